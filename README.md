# xvkit

xvkit models pieces of a small teaching operating system in plain Python:
RISC-V Sv39 address arithmetic and virtual-memory code, ELF headers, user
library helpers, a first-fit heap allocator, a shell command-line parser and
a handful of classic command-line tools.

It has no dependencies outside the standard library and runs on Python 3.10
and later.

## Installing

```
pip install xvkit
```

To run the test suite:

```
pip install "xvkit[test]"
pytest
```

## What is inside

| Module            | Contents |
|-------------------|----------|
| `xvkit.riscv`     | Status and interrupt register bits, page rounding, PTE encoding, page-table indices, SATP values, the physical memory map and open flags (`pgroundup`, `pgrounddown`, `pa2pte`, `pte2pa`, `pte_flags`, `pxshift`, `px`, `make_satp`, `kstack`, `clint_mtimecmp`, the `plic_*` address functions, `O_RDONLY` and friends). |
| `xvkit.elf`       | `ElfHeader` and `ProgramHeader`, parsed from and written back to bytes; `ElfHeader.program_headers` reads the segment table of a whole file. Truncated data or a bad magic number raises `ElfError`. |
| `xvkit.vm`        | `PhysicalMemory`, a pool of simulated physical pages, and `PageTable`, a three-level Sv39 page table with `walk`, `walkaddr`, `map_pages`, `unmap`, `init_first`, `grow`, `shrink`, `destroy`, `copy_into`, `clear_user`, `copyout`, `copyin` and `copyinstr`. Broken kernel invariants raise `VmPanic`, unmapped user addresses raise `CopyError`, and running out of pages raises `MemoryError`. |
| `xvkit.printf`    | `render`, `fprintf` and `printf`, understanding `%d`, `%l`, `%x`, `%p`, `%s`, `%c` and `%%`. |
| `xvkit.ulib`      | `atoi`, `strcmp` and the line reader `gets`. |
| `xvkit.umalloc`   | `Heap`, a first-fit free-list allocator with `malloc`, `free` and `sbrk` over a simulated, bounded address range. |
| `xvkit.sh`        | `parse_cmd`, which turns a command line into a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`, raising `ShellSyntaxError` on bad input. |
| `xvkit.grep`      | `match`, a regular-expression matcher supporting `^ . * $`, `grep_lines`, and the `main` command. |
| `xvkit.prng`      | `ParkMiller`, the minimal-standard pseudo-random generator; it is also an iterator. |
| `xvkit.commands`  | `cat`, `echo`, `wc`, `ls`, `mkdir`, `rm`, `ln`, `sleep` and `kill`, each taking an argument list and returning an exit status, plus `wc_counts` and `fmtname`. |

## Examples

Address arithmetic:

```python
from xvkit.riscv import pgroundup, pgrounddown

pgroundup(4097)    # 8192
pgrounddown(4097)  # 4096
```

A page table over simulated memory:

```python
from xvkit.vm import PhysicalMemory, PageTable

memory = PhysicalMemory(npages=64)
table = PageTable.create(memory)
table.grow(0, 8192)
table.copyout(100, b"hello\0")
table.copyinstr(100, 32)   # b"hello"
```

Formatting in the style of the user-space `printf`:

```python
from xvkit.printf import render

render("%d %s\n", -7, "apples")   # "-7 apples\n"
```

Parsing a shell line:

```python
from xvkit.sh import parse_cmd, PipeCmd

tree = parse_cmd("cat README | grep the > out")
isinstance(tree, PipeCmd)  # True
```

Matching with the small regular-expression engine:

```python
from xvkit.grep import match

match("^ab*c$", "abbbc")  # True
match("x.z", "xz")        # False
```

## Command line

The grep tool is installed as a command:

```
xvkit-grep PATTERN [FILE ...]
```

With no files it reads standard input. Each newline-terminated line that
matches `PATTERN` is written to standard output. Patterns support `^`, `.`,
`*` and `$`.

The other tools in `xvkit.commands` are Python functions, called with a list
of arguments, for example `commands.wc(["notes.txt"])`; they work on the host
file system and are not installed as commands.

## What it does not do

xvkit is a set of models, not a running system. There is no kernel to boot,
no scheduler or processes, and no on-disk file system or image builder. The
shell module only parses command lines into trees; it does not execute them.
The heap and physical memory are simulated address ranges, not real memory.