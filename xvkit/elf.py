"""Reading and writing ELF64 file and program headers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

ELF_MAGIC = 0x464C457F  # "\x7FELF" read little-endian

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELF_FORMAT = struct.Struct("<I12sHHIQQQIHHHHHH")
_PROG_FORMAT = struct.Struct("<IIQQQQQQ")


class ElfError(ValueError):
    """Raised for malformed or truncated ELF data."""


@dataclass
class ProgramHeader:
    """One program (segment) header."""

    SIZE = _PROG_FORMAT.size

    type: int = ELF_PROG_LOAD
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @classmethod
    def from_bytes(cls, data):
        if len(data) < cls.SIZE:
            raise ElfError("truncated program header")
        return cls(*_PROG_FORMAT.unpack_from(data))

    def to_bytes(self):
        return _PROG_FORMAT.pack(
            self.type, self.flags, self.off, self.vaddr,
            self.paddr, self.filesz, self.memsz, self.align,
        )


@dataclass
class ElfHeader:
    """The ELF file header."""

    SIZE = _ELF_FORMAT.size

    magic: int = ELF_MAGIC
    elf: bytes = field(default=bytes(12))
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = _ELF_FORMAT.size
    phentsize: int = _PROG_FORMAT.size
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    @classmethod
    def from_bytes(cls, data):
        if len(data) < cls.SIZE:
            raise ElfError("truncated ELF header")
        header = cls(*_ELF_FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfError(f"bad ELF magic {header.magic:#x}")
        return header

    def to_bytes(self):
        if len(self.elf) != 12:
            raise ElfError("ident bytes must be 12 long")
        return _ELF_FORMAT.pack(
            self.magic, self.elf, self.type, self.machine, self.version,
            self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
            self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
        )

    def program_headers(self, data):
        """Parse the program headers this header points to in the whole file."""
        headers = []
        for i in range(self.phnum):
            off = self.phoff + i * ProgramHeader.SIZE
            chunk = data[off:off + ProgramHeader.SIZE]
            if len(chunk) != ProgramHeader.SIZE:
                raise ElfError(f"program header {i} lies outside the file")
            headers.append(ProgramHeader.from_bytes(chunk))
        return headers