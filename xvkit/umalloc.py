"""A first-fit free-list allocator over a simulated, growable heap."""

from __future__ import annotations

HEADER = 16  # bytes per block header; sizes are counted in headers
MIN_GROW = 4096  # least number of headers requested from sbrk at once
_BASE = 0  # address of the zero-sized sentinel block


class Heap:
    """A heap whose break moves with sbrk and whose blocks come from malloc."""

    def __init__(self, limit=16 * 1024 * 1024, start=0x1000):
        if start <= _BASE or start % HEADER:
            raise ValueError("start must be a positive multiple of the header size")
        self._start = start
        self._brk = start
        self._limit = start + limit
        self._blocks: dict[int, list[int]] = {}  # header -> [size, next]
        self._allocated: set[int] = set()
        self._freep = None

    @property
    def brk(self):
        """Current program break."""
        return self._brk

    @property
    def start(self):
        return self._start

    @property
    def free_bytes(self):
        """Bytes held on the free list, headers included."""
        if self._freep is None:
            return 0
        total = 0
        p = self._blocks[_BASE][1]
        while p != _BASE:
            total += self._blocks[p][0] * HEADER
            p = self._blocks[p][1]
        return total

    def sbrk(self, n):
        """Move the break by n bytes and return the old break."""
        old = self._brk
        new = old + n
        if new < self._start or new > self._limit:
            raise MemoryError("sbrk: out of memory")
        self._brk = new
        return old

    def _size(self, h):
        return self._blocks[h][0]

    def _next(self, h):
        return self._blocks[h][1]

    def _release(self, bp):
        p = self._freep
        while not (p < bp < self._next(p)):
            if p >= self._next(p) and (bp > p or bp < self._next(p)):
                break
            p = self._next(p)
        nxt = self._next(p)
        if bp + self._size(bp) * HEADER == nxt:
            self._blocks[bp][0] += self._size(nxt)
            self._blocks[bp][1] = self._next(nxt)
            del self._blocks[nxt]
        else:
            self._blocks[bp][1] = nxt
        if p + self._size(p) * HEADER == bp:
            self._blocks[p][0] += self._size(bp)
            self._blocks[p][1] = self._next(bp)
            del self._blocks[bp]
        else:
            self._blocks[p][1] = bp
        self._freep = p

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_GROW)
        hp = self.sbrk(nunits * HEADER)
        self._blocks[hp] = [nunits, _BASE]
        self._release(hp)
        return self._freep

    def malloc(self, nbytes):
        """Allocate nbytes and return the address of the usable area."""
        nunits = (nbytes + HEADER - 1) // HEADER + 1
        if self._freep is None:
            self._blocks[_BASE] = [0, _BASE]
            self._freep = _BASE
        prevp = self._freep
        p = self._next(prevp)
        while True:
            size = self._size(p)
            if size >= nunits:
                if size == nunits:
                    self._blocks[prevp][1] = self._next(p)
                else:
                    self._blocks[p][0] = size - nunits
                    p += (size - nunits) * HEADER
                    self._blocks[p] = [nunits, _BASE]
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER
            if p == self._freep:
                p = self._morecore(nunits)
            prevp = p
            p = self._next(p)

    def free(self, addr):
        """Return a block obtained from malloc to the free list."""
        bp = addr - HEADER
        if bp not in self._allocated:
            raise ValueError(f"free of address {addr:#x} not allocated by malloc")
        self._allocated.remove(bp)
        self._release(bp)