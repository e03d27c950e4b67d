# sysyc

`sysyc` turns a SysY syntax tree into text-form Koopa IR. SysY is a small
C-like teaching language. The package also has a checker that makes sure every
basic block in a piece of Koopa IR ends with exactly one terminator.

It uses only the standard library and runs on Python 3.10 or later.

## What it handles

- Global and local `int` variables and constants, with nested scopes.
  Scalar constants are folded at compile time and emit no IR.
- Multi-dimensional constant and variable arrays. Nested initialiser lists are
  flattened in row-major order and padded with zeros. A global variable array
  written as `{}` becomes `zeroinit`.
- Functions with scalar and array parameters (`int a[]`, `int a[][3]`, ...),
  `int` and `void` return types, and calls to the SysY runtime library, which
  is declared at the top of every program: `getint`, `getch`, `getarray`,
  `putint`, `putch`, `putarray`, `starttime` and `stoptime`.
- Arithmetic, comparison and unary operators, plus `&&` and `||` with
  short-circuit evaluation.
- `if`/`else`, `while`, `break`, `continue` and `return`. Before a function is
  lowered, the statements that follow a `return`, `break` or `continue` in the
  same block are removed.
- A function body that does not end in a terminator gets `ret 0` (`int`) or
  `ret` (`void`) added.

## Modules

| Module              | Contents                                                                 |
|---------------------|--------------------------------------------------------------------------|
| `sysyc.ast`         | Syntax tree dataclasses (`CompUnit`, `FuncDef`, `VarDecl`, `IfStmt`, `AddExp`, ...) and the `Visitor` base |
| `sysyc.symtable`    | `SymbolTables`, `SymbolKind`, `SymbolError`                              |
| `sysyc.whilestack`  | `WhileStack` of loop labels for `break` and `continue`                   |
| `sysyc.prune`       | `prune_after_return` and `PruningRetVisitor`                             |
| `sysyc.evaluate`    | `evaluate`, `shape_of`, `array_type`, `flatten_const_init`, `flatten_var_init`, `param_array_type` |
| `sysyc.irbase`      | `IRBuilder`: output text, temporaries, pending results, label numbers    |
| `sysyc.irexpr`      | `ExpressionGenerator` for expressions                                    |
| `sysyc.irdecl`      | `DeclarationGenerator` for constant and variable declarations            |
| `sysyc.genir`       | `GenIRVisitor` and `generate_ir`                                         |
| `sysyc.checkir`     | `verify_koopa_blocks`, `split_blocks`, `is_terminator`, `IRVerificationError` |

## Usage

Build a `CompUnit` and lower it:

```python
from sysyc.ast import CompUnit, FuncDef, NumberExp, RetStmt
from sysyc.checkir import verify_koopa_blocks
from sysyc.genir import generate_ir

unit = CompUnit([FuncDef("int", "main", body=[RetStmt(NumberExp(0))])])
ir = generate_ir(unit)
verify_koopa_blocks(ir)
print(ir)
```

After the eight runtime-library `decl` lines this prints:

```
fun @main(): i32 {
%entry_main:
  ret 0
}
```

The block checker works on any Koopa IR text:

```python
from sysyc.checkir import IRVerificationError, verify_koopa_blocks

good = "fun @main(): i32 {\n%entry_main:\n  ret 0\n}\n"
verify_koopa_blocks(good)   # returns the blocks as lists of lines

bad = "fun @main(): i32 {\n%entry_main:\n  %0 = add 1, 2\n}\n"
try:
    verify_koopa_blocks(bad)
except IRVerificationError as err:
    print("rejected:", err, err.code)
```

`err.code` is `checkir.EMPTY_BLOCK`, `checkir.MISSING_TERMINATOR` or
`checkir.EARLY_TERMINATOR`, and `err.block` holds the offending block.

## Errors

Problems in the program being compiled are raised as exceptions:

- `SymbolError` (`sysyc.symtable`) when a name is used but no open scope
  defines it.
- `EvaluationError` (`sysyc.evaluate`) when an expression that must be constant
  is not, or an array initialiser has too many values. Division or modulo by
  zero in a constant expression raises `ZeroDivisionError`.
- `IRGenError` (`sysyc.irbase`) for a name redefined in the same scope, a call
  to an undefined function, a void call used as a value, and `break` or
  `continue` outside a loop.
- `IRVerificationError` (`sysyc.checkir`) for a basic block that is empty, does
  not end in a terminator, or has a terminator before its last line.

## What it does not do

- It does not read SysY source text: there is no lexer or parser, so the
  syntax tree has to be built by the caller.
- It does not turn Koopa IR into machine code or assembly.
- It has no command-line program; it is used as a library.