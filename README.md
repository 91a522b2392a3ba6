# bcodegen

`bcodegen` is the back half of a compiler for the B programming language: a
small three-address intermediate representation, the bookkeeping a front end
needs while producing it, and code generators that turn it into text.

## Modules

- `bcodegen.ir` — the intermediate representation.
  - `Program` holds the compiled `Function`s, the external symbols
    (`add_extrn`), the global variables (`add_global`) and a data section of
    NUL-terminated strings (`add_string`, which returns the string's offset).
    `add_extrn` and `add_global` ignore names already recorded.
  - A `Function` has a `name`, a `name_loc`, a `body` of `Instruction`s,
    `params_count` and `auto_vars_count`.
  - An `Instruction` pairs an operation (`UnaryNot`, `Negate`, `BinopOp`,
    `AutoAssign`, `ExternalAssign`, `Store`, `Funcall`, `Jmp`, `JmpIfNot`,
    `Return`) with its source `Loc`.
  - Operands are `AutoVar`, `Deref`, `RefAutoVar`, `RefExternal`, `External`,
    `Literal` and `DataOffset`.
  - `Binop` knows its `precedence()` and is looked up from an operator symbol
    with `Binop.from_symbol` (None if it is not one) or from an assignment
    symbol such as `+=` with `Binop.from_assign_symbol` (None for plain `=`,
    `ValueError` for anything else).
  - `align_bytes(size, alignment)` rounds up to a multiple of `alignment`.
  - `CodegenError` is raised when a generator meets something it does not
    support.
- `bcodegen.symbols` — name resolution helpers: nested variable `Scopes`
  holding `Var`s with `AutoStorage` or `ExternalStorage`, a `LabelTable` for
  `goto` targets, an `AutoVarsAllocator` that hands out 1-based slots and
  remembers the most in use, `is_keyword` for B's reserved words and
  `strip_suffix`. Redeclaring a variable in the same scope or defining a
  label twice raises `SymbolError`, whose `note_loc` points at the first one.
- `bcodegen.targets` — the `Target` enumeration with `target_names()`,
  `name_of_target` and `target_by_name` (None for an unknown name). The names
  are `fasm-x86_64-linux`, `gas-aarch64-linux`, `uxn` and `ir`.
- `bcodegen.fasm` — flat assembler source for x86_64 Linux (`format ELF64`).
  `generate_program(program)` returns the whole file as a string. Functions
  may take at most six parameters and calls may pass at most six arguments;
  beyond that `CodegenError` is raised.
- `bcodegen.irdump` — a human-readable listing of the IR:
  `generate_program(program)` returns the functions with numbered
  operations, the external symbols, the global variables and a hex dump of
  the data section.

## Example

```python
from bcodegen import fasm, irdump
from bcodegen.ir import DataOffset, Funcall, Function, Instruction, Literal, Loc, Program, Return

loc = Loc("hello.b", 1, 1)
program = Program()
program.add_extrn("printf")
offset = program.add_string("Hello, World\n")
program.funcs.append(
    Function(
        "main",
        loc,
        body=[
            Instruction(Funcall(1, "printf", (DataOffset(offset),)), loc),
            Instruction(Return(Literal(0)), loc),
        ],
        auto_vars_count=1,
    )
)

print(irdump.generate_program(program))
with open("hello.asm", "w") as out:
    out.write(fasm.generate_program(program))
```

## What the package does not do

- It has no lexer or parser: B source text is not read. A `Program` must be
  built by the caller, for instance with the help of `bcodegen.symbols`.
- It has no command-line program, and it does not assemble, link or run
  what it generates; feeding the fasm output to an assembler and linker is
  left to the user.
- `bcodegen.targets` names four targets, but generators are included only
  for `fasm-x86_64-linux` (`bcodegen.fasm`) and `ir` (`bcodegen.irdump`).

## Requirements

Python 3.10 or later. The package has no third-party dependencies; the tests
use pytest (`pip install .[test]`).