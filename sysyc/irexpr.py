"""IR generation for expressions: arithmetic, short-circuit logic, names and calls."""

from __future__ import annotations

from typing import Optional

from .ast import (
    AddExp,
    DivExp,
    EQExp,
    Exp,
    FuncCallExp,
    GEExp,
    GTExp,
    LAndExp,
    LEExp,
    LOrExp,
    LTExp,
    LValExp,
    LogicalNotExp,
    ModExp,
    MulExp,
    NEExp,
    NegativeExp,
    NumberExp,
    SubExp,
    Visitor,
)
from .irbase import IRBuilder, IRGenError
from .symtable import SymbolKind, SymbolTables


def func_type_of(func_symbol: str) -> str:
    """``"int"`` if a function symbol such as ``@f(): i32`` returns a value, else ``"void"``."""
    return "int" if func_symbol.endswith("i32") else "void"


class ExpressionGenerator(Visitor):
    """Emits the IR of expressions into an IRBuilder.

    ``generate`` returns the operand holding the value: a literal, or the
    temporary it was computed into.  A call to a void function yields None.
    """

    def __init__(self, builder: IRBuilder) -> None:
        self.builder = builder

    @property
    def symbols(self) -> SymbolTables:
        return self.builder.symbols

    def generate(self, exp: Exp) -> Optional[str]:
        """Emit IR for ``exp`` and return the operand that holds its value."""
        return exp.accept(self)

    def address(self, lval: LValExp) -> str:
        """Emit IR computing where ``lval`` is stored and return that pointer."""
        kind = self.symbols.lookup_kind(lval.ident)
        if kind is SymbolKind.VAR:
            return self.symbols.get(lval.ident, SymbolKind.VAR)  # type: ignore[return-value]
        if kind is SymbolKind.VAR_ARR:
            if not lval.indices:
                raise IRGenError(f"cannot assign to the whole array {lval.ident}")
            base = self.symbols.get(lval.ident, SymbolKind.VAR_ARR)
            return self._elem_chain(str(base), lval.indices)
        if kind is SymbolKind.PTR:
            if not lval.indices:
                raise IRGenError(f"cannot assign to the array parameter {lval.ident}")
            sym_name = self.symbols.get(lval.ident, SymbolKind.PTR)
            pointer, _ = self._ptr_chain(str(sym_name), lval.indices)
            return pointer
        raise IRGenError(f"undefined var symbol: {lval.ident}")

    # ------------------------------------------------------------ helpers

    def _emit(self, line: str) -> None:
        self.builder.append("  " + line + "\n")

    def _value(self, exp: Exp) -> str:
        result = self.generate(exp)
        if result is None:
            raise IRGenError("a void function call has no value")
        return result

    def _elem_chain(self, base: str, indices: list[Exp]) -> str:
        pointer = base
        for index in indices:
            index_name = self._value(index)
            next_pointer = self.builder.new_temp()
            self._emit(f"{next_pointer} = getelemptr {pointer}, {index_name}")
            pointer = next_pointer
        return pointer

    def _ptr_chain(self, sym_name: str, indices: list[Exp]) -> tuple[str, int]:
        """Load an array parameter and index into it; return the pointer and depth."""
        base = self.builder.new_temp()
        self._emit(f"{base} = load {sym_name}")
        first, *rest = indices
        pointer = self.builder.new_temp()
        offset = self._value(first)
        self._emit(f"{pointer} = getptr {base}, {offset}")
        for index in rest:
            next_pointer = self.builder.new_temp()
            offset = self._value(index)
            self._emit(f"{next_pointer} = getelemptr {pointer}, {offset}")
            pointer = next_pointer
        return pointer, len(indices)

    def _load(self, pointer: str) -> str:
        result = self.builder.new_temp()
        self._emit(f"{result} = load {pointer}")
        return result

    def _decay(self, pointer: str) -> str:
        result = self.builder.new_temp()
        self._emit(f"{result} = getelemptr {pointer}, 0")
        return result

    # ---------------------------------------------------------- literals

    def visit_NumberExp(self, node: NumberExp) -> str:
        return str(node.number)

    # ------------------------------------------------------------- unary

    def visit_NegativeExp(self, node: NegativeExp) -> str:
        operand = self._value(node.operand)
        result = self.builder.new_temp()
        self._emit(f"{result} = sub 0, {operand}")
        return result

    def visit_LogicalNotExp(self, node: LogicalNotExp) -> str:
        operand = self._value(node.operand)
        result = self.builder.new_temp()
        self._emit(f"{result} = eq {operand}, 0")
        return result

    # ------------------------------------------------------------ binary

    def _binary(self, node) -> str:
        lhs = self._value(node.lhs)
        rhs = self._value(node.rhs)
        result = self.builder.new_temp()
        self._emit(f"{result} = {node.op} {lhs}, {rhs}")
        return result

    visit_AddExp = visit_SubExp = visit_MulExp = visit_DivExp = visit_ModExp = _binary
    visit_LTExp = visit_GTExp = visit_LEExp = visit_GEExp = _binary
    visit_EQExp = visit_NEExp = _binary

    def _short_circuit(self, node, initial: int, lhs_test: str) -> str:
        count = self.symbols.total_occurrences("result", SymbolKind.VAR)
        slot = f"@result_{count + 1}"
        self._emit(f"{slot} = alloc i32")
        self._emit(f"store {initial}, {slot}")
        lhs = self._value(node.lhs)
        test = self.builder.new_temp()
        self._emit(f"{test} = {lhs_test} {lhs}, 0")
        label_id = self.builder.next_label_id()
        then_label = f"%then_{label_id}"
        end_label = f"%end_{label_id}"
        self._emit(f"br {test}, {then_label}, {end_label}")
        self.builder.append(then_label + ":\n")
        rhs = self._value(node.rhs)
        rhs_test = self.builder.new_temp()
        self._emit(f"{rhs_test} = ne {rhs}, 0")
        self._emit(f"store {rhs_test}, {slot}")
        self._emit(f"jump {end_label}")
        self.builder.append(end_label + ":\n")
        return self._load(slot)

    def visit_LAndExp(self, node: LAndExp) -> str:
        return self._short_circuit(node, 0, "ne")

    def visit_LOrExp(self, node: LOrExp) -> str:
        return self._short_circuit(node, 1, "eq")

    # ------------------------------------------------------------- names

    def visit_LValExp(self, node: LValExp) -> str:
        kind = self.symbols.lookup_kind(node.ident)
        if kind is SymbolKind.CONST:
            return str(self.symbols.get(node.ident, SymbolKind.CONST))
        if kind is SymbolKind.VAR:
            return self._load(str(self.symbols.get(node.ident, SymbolKind.VAR)))
        if kind is SymbolKind.CONST_ARR:
            if not node.indices:
                raise IRGenError(f"constant array {node.ident} needs indices")
            base = str(self.symbols.get(node.ident, SymbolKind.CONST_ARR))
            return self._load(self._elem_chain(base, node.indices))
        if kind is SymbolKind.VAR_ARR:
            info = self.symbols.get_var_arr_info(node.ident)
            pointer = self._elem_chain(info.sym_name, node.indices)
            if len(node.indices) < len(info.dims):
                return self._decay(pointer)
            return self._load(pointer)
        if kind is SymbolKind.PTR:
            info = self.symbols.get_ptr_info(node.ident)
            if not node.indices:
                return self._load(info.sym_name)
            pointer, depth = self._ptr_chain(info.sym_name, node.indices)
            if depth < info.dims:
                return self._decay(pointer)
            return self._load(pointer)
        raise IRGenError(f"{node.ident} is not a value")

    # ------------------------------------------------------------- calls

    def visit_FuncCallExp(self, node: FuncCallExp) -> Optional[str]:
        args = [self._value(arg) for arg in node.args]
        if not self.symbols.contains(node.ident, SymbolKind.FUNC):
            raise IRGenError(f"undefined function symbol: {node.ident}")
        func_symbol = str(self.symbols.get(node.ident, SymbolKind.FUNC))
        call = f"call @{node.ident}({', '.join(args)})"
        if func_type_of(func_symbol) == "void":
            self._emit(call)
            return None
        result = self.builder.new_temp()
        self._emit(f"{result} = {call}")
        return result