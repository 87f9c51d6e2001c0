"""Sv39 page tables over a simulated pool of physical pages."""

from __future__ import annotations

import struct

from .riscv import (
    KERNBASE,
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    pa2pte,
    pgrounddown,
    pgroundup,
    pte2pa,
    pte_flags,
    px,
)

_ENTRIES = struct.Struct("<512Q")


class VmPanic(RuntimeError):
    """A kernel invariant was violated."""


class CopyError(ValueError):
    """A copy between kernel and user space touched an unmapped address."""


class PhysicalMemory:
    """A fixed pool of physical pages starting at a page-aligned base address."""

    def __init__(self, npages=1024, base=KERNBASE):
        if base % PGSIZE:
            raise ValueError("base must be page aligned")
        self._free = [base + i * PGSIZE for i in reversed(range(npages))]
        self._pages: dict[int, bytearray] = {}

    @property
    def free_pages(self):
        """Number of pages still available."""
        return len(self._free)

    def alloc(self):
        """Allocate one zeroed page and return its address."""
        if not self._free:
            raise MemoryError("out of physical pages")
        pa = self._free.pop()
        self._pages[pa] = bytearray(PGSIZE)
        return pa

    def free(self, pa):
        if pa % PGSIZE or pa not in self._pages:
            raise VmPanic("kfree")
        del self._pages[pa]
        self._free.append(pa)

    def _page(self, pa):
        try:
            return self._pages[pgrounddown(pa)]
        except KeyError:
            raise VmPanic(f"bad physical address {pa:#x}") from None

    def read(self, pa, n):
        out = bytearray()
        while n > 0:
            off = pa % PGSIZE
            k = min(n, PGSIZE - off)
            out += self._page(pa)[off:off + k]
            pa += k
            n -= k
        return bytes(out)

    def write(self, pa, data):
        view = memoryview(bytes(data))
        while view:
            off = pa % PGSIZE
            k = min(len(view), PGSIZE - off)
            self._page(pa)[off:off + k] = view[:k]
            pa += k
            view = view[k:]

    def read_word(self, pa):
        return int.from_bytes(self.read(pa, 8), "little")

    def write_word(self, pa, value):
        self.write(pa, value.to_bytes(8, "little"))


class PageTable:
    """A three-level Sv39 page table stored in physical memory."""

    def __init__(self, memory, root):
        self.memory = memory
        self.root = root

    @classmethod
    def create(cls, memory):
        """Allocate an empty page table."""
        return cls(memory, memory.alloc())

    def walk(self, va, alloc):
        """Return the physical address of the leaf PTE for va, or None.

        With alloc set, missing page-table pages are created; running out
        of memory then raises MemoryError.
        """
        if va >= MAXVA:
            raise VmPanic("walk")
        table = self.root
        for level in (2, 1):
            pte_addr = table + 8 * px(level, va)
            pte = self.memory.read_word(pte_addr)
            if pte & PTE_V:
                table = pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = self.memory.alloc()
                self.memory.write_word(pte_addr, pa2pte(table) | PTE_V)
        return table + 8 * px(0, va)

    def walkaddr(self, va):
        """Physical address of a user page, or None if it is not mapped for users."""
        if va >= MAXVA:
            return None
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            return None
        pte = self.memory.read_word(pte_addr)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def map_pages(self, va, size, pa, perm):
        """Map [va, va+size) onto physical memory from pa with the given permissions."""
        if size == 0:
            raise VmPanic("mappages: size")
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte_addr = self.walk(a, True)
            if self.memory.read_word(pte_addr) & PTE_V:
                raise VmPanic("mappages: remap")
            self.memory.write_word(pte_addr, pa2pte(pa) | perm | PTE_V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va, npages, do_free):
        """Remove npages mappings from a page-aligned va, optionally freeing them."""
        if va % PGSIZE:
            raise VmPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            pte_addr = self.walk(a, False)
            if pte_addr is None:
                raise VmPanic("uvmunmap: walk")
            pte = self.memory.read_word(pte_addr)
            if not pte & PTE_V:
                raise VmPanic("uvmunmap: not mapped")
            if pte_flags(pte) == PTE_V:
                raise VmPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.free(pte2pa(pte))
            self.memory.write_word(pte_addr, 0)

    def init_first(self, src):
        """Load code smaller than a page at user address 0."""
        if len(src) >= PGSIZE:
            raise VmPanic("inituvm: more than a page")
        mem = self.memory.alloc()
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(mem, src)

    def grow(self, oldsz, newsz):
        """Allocate user pages to grow from oldsz to newsz; return the new size."""
        if newsz < oldsz:
            return oldsz
        oldsz = pgroundup(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            mem = None
            try:
                mem = self.memory.alloc()
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_X | PTE_R | PTE_U)
            except MemoryError:
                if mem is not None:
                    self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Free user pages to shrink from oldsz to newsz; return the new size."""
        if newsz >= oldsz:
            return oldsz
        if pgroundup(newsz) < pgroundup(oldsz):
            npages = (pgroundup(oldsz) - pgroundup(newsz)) // PGSIZE
            self.unmap(pgroundup(newsz), npages, True)
        return newsz

    def _freewalk(self, table):
        for i, pte in enumerate(_ENTRIES.unpack(self.memory.read(table, PGSIZE))):
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._freewalk(pte2pa(pte))
                self.memory.write_word(table + 8 * i, 0)
            elif pte & PTE_V:
                raise VmPanic("freewalk: leaf")
        self.memory.free(table)

    def destroy(self, sz):
        """Free sz bytes of user memory, then every page-table page."""
        if sz > 0:
            self.unmap(0, pgroundup(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_into(self, other, sz):
        """Copy the first sz bytes of memory and mappings into another page table.

        On failure the pages already copied are freed and MemoryError is raised.
        """
        for i in range(0, sz, PGSIZE):
            pte_addr = self.walk(i, False)
            if pte_addr is None:
                raise VmPanic("uvmcopy: pte should exist")
            pte = self.memory.read_word(pte_addr)
            if not pte & PTE_V:
                raise VmPanic("uvmcopy: page not present")
            mem = None
            try:
                mem = self.memory.alloc()
                self.memory.write(mem, self.memory.read(pte2pa(pte), PGSIZE))
                other.map_pages(i, PGSIZE, mem, pte_flags(pte))
            except MemoryError:
                if mem is not None:
                    self.memory.free(mem)
                other.unmap(0, i // PGSIZE, True)
                raise

    def clear_user(self, va):
        """Make a page inaccessible to user mode."""
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            raise VmPanic("uvmclear")
        self.memory.write_word(pte_addr, self.memory.read_word(pte_addr) & ~PTE_U)

    def _chunks(self, va, n):
        """Yield (physical address, length) runs covering n user bytes from va."""
        while n > 0:
            va0 = pgrounddown(va)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise CopyError(f"user address {va:#x} is not mapped")
            k = min(PGSIZE - (va - va0), n)
            yield pa0 + (va - va0), k
            n -= k
            va = va0 + PGSIZE

    def copyout(self, dstva, data):
        """Copy bytes to user virtual address dstva."""
        data = bytes(data)
        pos = 0
        for pa, k in self._chunks(dstva, len(data)):
            self.memory.write(pa, data[pos:pos + k])
            pos += k

    def copyin(self, srcva, n):
        """Copy n bytes from user virtual address srcva."""
        return b"".join(self.memory.read(pa, k) for pa, k in self._chunks(srcva, n))

    def copyinstr(self, srcva, maximum):
        """Copy a NUL-terminated string of at most maximum bytes from user space."""
        out = bytearray()
        for pa, k in self._chunks(srcva, maximum):
            chunk = self.memory.read(pa, k)
            nul = chunk.find(b"\0")
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
        raise CopyError("string not terminated within limit")