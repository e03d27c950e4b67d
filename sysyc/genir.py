"""Koopa IR generation for whole SysY programs: functions and statements."""

from __future__ import annotations

from typing import Optional, Union

from .ast import (
    AssignStmt,
    BlockItem,
    BlockStmt,
    BreakStmt,
    CompUnit,
    ConstDecl,
    ContinueStmt,
    Exp,
    ExpStmt,
    FuncDef,
    FuncFParam,
    FuncFParamArr,
    IfStmt,
    RetStmt,
    VarDecl,
    Visitor,
    WhileStmt,
)
from .checkir import is_terminator
from .evaluate import param_array_type
from .irbase import IRBuilder, IRGenError
from .irdecl import DeclarationGenerator
from .irexpr import ExpressionGenerator
from .prune import prune_after_return
from .symtable import SymbolKind, SymbolTables

_RUNTIME_FUNCTIONS = (
    ("getint", "@getint(): i32"),
    ("getch", "@getch(): i32"),
    ("getarray", "@getarray(*i32): i32"),
    ("putint", "@putint(i32): i32"),
    ("putch", "@putch(i32): i32"),
    ("putarray", "@putarray(i32, *i32): i32"),
    ("starttime", "@starttime()"),
    ("stoptime", "@stoptime()"),
)


class GenIRVisitor(Visitor):
    """Walks a syntax tree and produces Koopa IR text.

    The SysY runtime library is declared first; global declarations and
    functions follow in source order.  Output accumulates across calls to
    ``emit_program``.
    """

    def __init__(self) -> None:
        self.builder = IRBuilder()
        self.expressions = ExpressionGenerator(self.builder)
        self.declarations = DeclarationGenerator(self.builder, self.expressions)

    @property
    def symbols(self) -> SymbolTables:
        return self.builder.symbols

    @property
    def ir_code(self) -> str:
        """All IR generated so far."""
        return self.builder.text

    def emit_program(self, unit: CompUnit) -> str:
        """Generate IR for ``unit`` and return the IR text."""
        unit.accept(self)
        return self.builder.text

    # ------------------------------------------------------------ helpers

    def _emit(self, line: str) -> None:
        self.builder.append("  " + line + "\n")

    def _label(self, label: str) -> None:
        self.builder.append(label + ":\n")

    def _value(self, exp: Exp) -> str:
        result = self.expressions.generate(exp)
        if result is None:
            raise IRGenError("a void function call has no value")
        return result

    def _terminated(self) -> bool:
        return is_terminator(self.builder.last_line())

    def _items(self, items: list[BlockItem]) -> None:
        for item in items:
            item.accept(self)

    def _func_symbol(self, node: FuncDef) -> str:
        parts = []
        for param in node.params:
            if isinstance(param, FuncFParamArr):
                type_name, _ = param_array_type(param, self.symbols)
                parts.append(f"@{param.ident}: {type_name}")
            else:
                parts.append(f"@{param.ident}: i32")
        symbol = f"@{node.ident}(" + ",".join(parts) + ")"
        if node.func_type == "int":
            symbol += ": i32"
        return symbol

    # -------------------------------------------------------- translation unit

    def visit_CompUnit(self, node: CompUnit) -> None:
        self.symbols.push_table()
        for name, symbol in _RUNTIME_FUNCTIONS:
            self.builder.append(f"decl {symbol}\n")
            self.symbols.insert(name, symbol, SymbolKind.FUNC)
        for item in node.items:
            item.accept(self)

    def visit_ConstDecl(self, node: ConstDecl) -> None:
        self.declarations.declare(node)

    def visit_VarDecl(self, node: VarDecl) -> None:
        self.declarations.declare(node)

    # -------------------------------------------------------------- functions

    def visit_FuncDef(self, node: FuncDef) -> None:
        func_symbol = self._func_symbol(node)
        self.symbols.insert(node.ident, func_symbol, SymbolKind.FUNC)
        with self.symbols.scope():
            self.builder.reset_counter()
            prune_after_return(node.body)
            self.builder.append(f"fun {func_symbol} {{\n%entry_{node.ident}:\n")
            for param in node.params:
                param.accept(self)
            self._items(node.body)
            last = self.builder.last_line()
            if self.builder.last_line_is_label() or (
                "ret" not in last and "jump" not in last and "br" not in last
            ):
                self._emit("ret 0" if node.func_type == "int" else "ret")
            self.builder.append("}\n")

    def visit_FuncFParam(self, node: FuncFParam) -> None:
        local = "%" + node.ident
        self.symbols.insert(node.ident, local, SymbolKind.VAR)
        self._emit(f"{local} = alloc i32")
        self._emit(f"store @{node.ident}, {local}")

    def visit_FuncFParamArr(self, node: FuncFParamArr) -> None:
        type_name, dims = param_array_type(node, self.symbols)
        info = self.symbols.insert_ptr(node.ident, type_name, dims)
        self._emit(f"{info.sym_name} = alloc {type_name}")
        self._emit(f"store @{node.ident}, {info.sym_name}")

    # ------------------------------------------------------------- statements

    def visit_RetStmt(self, node: RetStmt) -> None:
        if node.exp is not None:
            self._emit(f"ret {self._value(node.exp)}")
        else:
            self._emit("ret")

    def visit_AssignStmt(self, node: AssignStmt) -> None:
        pointer = self.expressions.address(node.lval)
        value = self._value(node.exp)
        self._emit(f"store {value}, {pointer}")

    def visit_ExpStmt(self, node: ExpStmt) -> None:
        if node.exp is not None:
            self.expressions.generate(node.exp)

    def visit_BlockStmt(self, node: BlockStmt) -> None:
        with self.symbols.scope():
            self._items(node.items)

    def visit_IfStmt(self, node: IfStmt) -> None:
        cond = self._value(node.cond)
        label_id = self.builder.next_label_id()
        then_label = f"%then_{label_id}"
        end_label = f"%end_{label_id}"
        if node.else_body is not None:
            else_label = f"%else_{label_id}"
            self._emit(f"br {cond}, {then_label}, {else_label}")
            self._label(then_label)
            node.then_body.accept(self)
            if not self._terminated():
                self._emit(f"jump {end_label}")
            self._label(else_label)
            node.else_body.accept(self)
            if not self._terminated():
                self._emit(f"jump {end_label}")
        else:
            self._emit(f"br {cond}, {then_label}, {end_label}")
            self._label(then_label)
            node.then_body.accept(self)
            if not self._terminated():
                self._emit(f"jump {end_label}")
        self._label(end_label)

    def visit_WhileStmt(self, node: WhileStmt) -> None:
        label_id = self.builder.next_label_id()
        entry = f"%while_entry_{label_id}"
        body = f"%while_body_{label_id}"
        end = f"%while_end_{label_id}"
        self.builder.loops.push(entry, end)
        try:
            self._emit(f"jump {entry}")
            self._label(entry)
            cond = self._value(node.cond)
            self._emit(f"br {cond}, {body}, {end}")
            self._label(body)
            node.body.accept(self)
            if not self._terminated():
                self._emit(f"jump {entry}")
            self._label(end)
        finally:
            self.builder.loops.pop()

    def visit_BreakStmt(self, node: BreakStmt) -> None:
        try:
            target = self.builder.loops.top().end
        except IndexError:
            raise IRGenError("break outside of a loop") from None
        self._emit(f"jump {target}")

    def visit_ContinueStmt(self, node: ContinueStmt) -> None:
        try:
            target = self.builder.loops.top().entry
        except IndexError:
            raise IRGenError("continue outside of a loop") from None
        self._emit(f"jump {target}")


def generate_ir(unit: CompUnit) -> str:
    """Koopa IR text of a whole program."""
    return GenIRVisitor().emit_program(unit)