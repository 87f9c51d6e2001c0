"""Models of a small teaching operating system: Sv39 paging, ELF headers, user library, shell parser and tools."""

__version__ = "0.1.0"