import pytest

from xvkit.riscv import MAXVA, PGSIZE, PTE_R, PTE_U, PTE_V, PTE_W, pte2pa, pte_flags
from xvkit.vm import CopyError, PageTable, PhysicalMemory, VmPanic

NPAGES = 64
USER = PTE_R | PTE_W | PTE_U


@pytest.fixture
def memory():
    return PhysicalMemory(NPAGES)


@pytest.fixture
def table(memory):
    return PageTable.create(memory)


def test_memory_alloc_free_counts(memory):
    pa = memory.alloc()
    assert pa % PGSIZE == 0
    assert memory.free_pages == NPAGES - 1
    memory.free(pa)
    assert memory.free_pages == NPAGES


def test_memory_double_free_panics(memory):
    pa = memory.alloc()
    memory.free(pa)
    with pytest.raises(VmPanic):
        memory.free(pa)


def test_memory_exhaustion():
    memory = PhysicalMemory(1)
    memory.alloc()
    with pytest.raises(MemoryError):
        memory.alloc()


def test_memory_word_round_trip(memory):
    pa = memory.alloc()
    memory.write_word(pa + 16, 0x0123456789ABCDEF)
    assert memory.read_word(pa + 16) == 0x0123456789ABCDEF


def test_map_and_walkaddr(table, memory):
    pa = memory.alloc()
    table.map_pages(PGSIZE, PGSIZE, pa, USER)
    assert table.walkaddr(PGSIZE) == pa
    pte = memory.read_word(table.walk(PGSIZE, False))
    assert pte2pa(pte) == pa
    assert pte_flags(pte) == USER | PTE_V


def test_walkaddr_requires_user_bit(table, memory):
    table.map_pages(0, PGSIZE, memory.alloc(), PTE_R | PTE_W)
    assert table.walkaddr(0) is None


def test_walk_without_alloc_missing(table):
    assert table.walk(5 * PGSIZE, False) is None
    assert table.walkaddr(MAXVA) is None


def test_walk_beyond_maxva_panics(table):
    with pytest.raises(VmPanic):
        table.walk(MAXVA, False)


def test_remap_panics(table, memory):
    pa = memory.alloc()
    table.map_pages(0, PGSIZE, pa, USER)
    with pytest.raises(VmPanic):
        table.map_pages(0, PGSIZE, pa, USER)


def test_zero_size_map_panics(table):
    with pytest.raises(VmPanic):
        table.map_pages(0, 0, 0, USER)


def test_unmap_unmapped_panics(table, memory):
    table.map_pages(0, PGSIZE, memory.alloc(), USER)
    with pytest.raises(VmPanic):
        table.unmap(PGSIZE, 1, True)


def test_unmap_unaligned_panics(table):
    with pytest.raises(VmPanic):
        table.unmap(1, 1, False)


def test_copy_round_trip_across_pages(table):
    table.grow(0, 3 * PGSIZE)
    payload = bytes(range(256)) * 20
    table.copyout(PGSIZE - 100, payload)
    assert table.copyin(PGSIZE - 100, len(payload)) == payload


def test_copy_unmapped_raises(table):
    table.grow(0, PGSIZE)
    with pytest.raises(CopyError):
        table.copyout(PGSIZE - 2, b"abcd")
    with pytest.raises(CopyError):
        table.copyin(PGSIZE - 2, 4)


def test_copyinstr(table):
    table.grow(0, 2 * PGSIZE)
    table.copyout(PGSIZE - 3, b"hello\0world")
    assert table.copyinstr(PGSIZE - 3, 100) == b"hello"


def test_copyinstr_limit(table):
    table.grow(0, PGSIZE)
    table.copyout(0, b"hello\0")
    with pytest.raises(CopyError):
        table.copyinstr(0, 5)


def test_copyinstr_runs_off_end(table):
    table.grow(0, PGSIZE)
    table.copyout(PGSIZE - 3, b"abc")
    with pytest.raises(CopyError):
        table.copyinstr(PGSIZE - 3, 100)


def test_grow_shrink_destroy_restores_memory(memory):
    table = PageTable.create(memory)
    size = table.grow(0, 3 * PGSIZE + 10)
    assert size == 3 * PGSIZE + 10
    assert table.walkaddr(3 * PGSIZE) is not None
    assert table.shrink(size, PGSIZE) == PGSIZE
    assert table.walkaddr(PGSIZE) is None
    assert table.walkaddr(0) is not None
    table.destroy(PGSIZE)
    assert memory.free_pages == NPAGES


def test_grow_and_shrink_noop_directions(table):
    assert table.grow(PGSIZE, 0) == PGSIZE
    assert table.shrink(0, PGSIZE) == 0


def test_grow_out_of_memory_cleans_up():
    memory = PhysicalMemory(4)
    table = PageTable.create(memory)
    with pytest.raises(MemoryError):
        table.grow(0, 10 * PGSIZE)
    assert table.walkaddr(0) is None


def test_destroy_with_leaf_panics(table, memory):
    table.map_pages(0, PGSIZE, memory.alloc(), USER)
    with pytest.raises(VmPanic):
        table.destroy(0)


def test_init_first(table):
    table.init_first(b"\x13\x00\x00\x00")
    assert table.copyin(0, 4) == b"\x13\x00\x00\x00"


def test_init_first_too_big(table):
    with pytest.raises(VmPanic):
        table.init_first(bytes(PGSIZE))


def test_copy_into(memory, table):
    table.grow(0, 2 * PGSIZE)
    table.copyout(10, b"parent data")
    child = PageTable.create(memory)
    table.copy_into(child, 2 * PGSIZE)
    assert child.copyin(10, 11) == b"parent data"
    assert child.walkaddr(0) != table.walkaddr(0)
    child.copyout(10, b"child")
    assert table.copyin(10, 6) == b"parent"


def test_copy_into_missing_page_panics(memory, table):
    child = PageTable.create(memory)
    with pytest.raises(VmPanic):
        table.copy_into(child, PGSIZE)


def test_clear_user(table):
    table.grow(0, 2 * PGSIZE)
    table.clear_user(0)
    assert table.walkaddr(0) is None
    assert table.walkaddr(PGSIZE) is not None
    with pytest.raises(CopyError):
        table.copyin(0, 1)


def test_clear_user_unmapped_panics(table):
    with pytest.raises(VmPanic):
        table.clear_user(PGSIZE)