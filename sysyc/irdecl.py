"""IR generation for constant and variable declarations, scalar and array."""

from __future__ import annotations

from typing import Iterator, Optional, Union

from .ast import ArrayInitVal, ConstDecl, ConstDef, Exp, VarDecl, VarDef, Visitor
from .evaluate import (
    array_type,
    evaluate,
    flatten_const_init,
    flatten_var_init,
    shape_of,
)
from .irbase import IRBuilder, IRGenError
from .irexpr import ExpressionGenerator
from .symtable import SymbolKind, SymbolTables

_Leaf = Union[Exp, int]


def _aggregate(shape: list[int], values: Iterator[int]) -> str:
    """Nested brace initialiser such as ``{{1, 2}, {3, 4}}`` taken from ``values``."""
    if not shape:
        return str(next(values))
    inner = shape[1:]
    return "{" + ", ".join(_aggregate(inner, values) for _ in range(shape[0])) + "}"


class DeclarationGenerator(Visitor):
    """Emits the IR of declarations and records the names they bind.

    Scalar constants produce no IR: their values go into the symbol table.
    Global arrays get an aggregate initialiser; local arrays are filled one
    element at a time through ``getelemptr`` and ``store``.
    """

    def __init__(
        self, builder: IRBuilder, expressions: Optional[ExpressionGenerator] = None
    ) -> None:
        self.builder = builder
        self.expressions = (
            expressions if expressions is not None else ExpressionGenerator(builder)
        )

    @property
    def symbols(self) -> SymbolTables:
        return self.builder.symbols

    def declare(self, decl: Union[ConstDecl, VarDecl]) -> None:
        """Emit IR for every definition in ``decl``."""
        decl.accept(self)

    # ------------------------------------------------------------ helpers

    def _emit(self, line: str) -> None:
        self.builder.append("  " + line + "\n")

    def _operand(self, value: _Leaf) -> str:
        if isinstance(value, int):
            return str(value)
        result = self.expressions.generate(value)
        if result is None:
            raise IRGenError("a void function call has no value")
        return result

    def _store_elements(
        self, pointer: str, shape: list[int], leaves: Iterator[_Leaf]
    ) -> None:
        if not shape:
            value = self._operand(next(leaves))
            self._emit(f"store {value}, {pointer}")
            return
        for position in range(shape[0]):
            element = self.builder.new_temp("ptr")
            self._emit(f"{element} = getelemptr {pointer}, {position}")
            self._store_elements(element, shape[1:], leaves)

    # ------------------------------------------------------- declarations

    def visit_ConstDecl(self, node: ConstDecl) -> None:
        for definition in node.defs:
            definition.accept(self)

    def visit_VarDecl(self, node: VarDecl) -> None:
        for definition in node.defs:
            definition.accept(self)

    # ---------------------------------------------------------- constants

    def visit_ConstDef(self, node: ConstDef) -> None:
        if self.symbols.contains_in_current(node.ident, SymbolKind.CONST):
            raise IRGenError(
                f"redefined const symbol: {node.ident} in current scope"
            )
        if node.array_dims:
            self._const_array(node)
            return
        if node.init is None or node.init.exp is None:
            raise IRGenError(f"constant {node.ident} needs a single initial value")
        self.symbols.insert_const(node.ident, evaluate(node.init.exp, self.symbols))

    def _const_array(self, node: ConstDef) -> None:
        shape = shape_of(node.array_dims, self.symbols)
        data = flatten_const_init(shape, node.init, self.symbols)
        info = self.symbols.insert_const_array(node.ident, shape, data)
        type_name = array_type(shape)
        if node.is_global:
            init = _aggregate(shape, iter(data))
            self.builder.append(f"global {info.sym_name} = alloc {type_name}, {init}\n")
        else:
            self._emit(f"{info.sym_name} = alloc {type_name}")
            self._store_elements(info.sym_name, shape, iter(data))
            self.builder.append("\n")

    # ---------------------------------------------------------- variables

    def visit_VarDef(self, node: VarDef) -> None:
        if self.symbols.contains_in_current(node.ident, SymbolKind.VAR):
            raise IRGenError(f"redefined var symbol: {node.ident}")
        if node.array_dims:
            self._var_array(node)
        else:
            self._var_scalar(node)

    def _var_array(self, node: VarDef) -> None:
        init = node.init if node.init is not None else ArrayInitVal()
        shape = shape_of(node.array_dims, self.symbols)
        data = flatten_var_init(shape, init, self.symbols)
        info = self.symbols.insert_var_array(node.ident, shape, data)
        type_name = array_type(shape)
        if node.is_global:
            if init.is_zero_init:
                init_code = "zeroinit"
            else:
                values = (
                    leaf if isinstance(leaf, int) else evaluate(leaf, self.symbols)
                    for leaf in data
                )
                init_code = _aggregate(shape, iter(values))
            self.builder.append(
                f"global {info.sym_name} = alloc {type_name}, {init_code}\n"
            )
        else:
            self._emit(f"{info.sym_name} = alloc {type_name}")
            self._store_elements(info.sym_name, shape, iter(data))
            self.builder.append("\n")

    def _var_scalar(self, node: VarDef) -> None:
        count = self.symbols.total_occurrences(node.ident, SymbolKind.VAR)
        name = f"@{node.ident}_{count + 1}"
        self.symbols.insert(node.ident, name, SymbolKind.VAR)
        if node.init is not None and node.init.exp is None:
            raise IRGenError(f"variable {node.ident} needs a single initial value")
        if node.is_global:
            if node.init is not None:
                value = str(evaluate(node.init.exp, self.symbols))
            else:
                value = "zeroinit"
            self.builder.append(f"global {name} = alloc i32, {value}\n")
        else:
            self._emit(f"{name} = alloc i32")
            if node.init is not None:
                result = self._operand(node.init.exp)
                self._emit(f"store {result}, {name}")