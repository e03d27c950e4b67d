"""Compile-time evaluation of constant expressions, array shapes and initialisers."""

from __future__ import annotations

import math
from typing import Callable, Optional, Union

from .ast import (
    AddExp,
    ArrayInitVal,
    DivExp,
    EQExp,
    Exp,
    FuncFParamArr,
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
)
from .symtable import SymbolKind, SymbolTables


class EvaluationError(ValueError):
    """An expression cannot be computed at compile time."""


def _wrap(value: int) -> int:
    """Reduce to a signed 32-bit integer."""
    return (value + (1 << 31)) % (1 << 32) - (1 << 31)


def _div(lhs: int, rhs: int) -> int:
    if rhs == 0:
        raise ZeroDivisionError("division by zero")
    quotient = abs(lhs) // abs(rhs)
    return -quotient if (lhs < 0) != (rhs < 0) else quotient


def _mod(lhs: int, rhs: int) -> int:
    return lhs - rhs * _div(lhs, rhs)


_BINARY: dict[type, Callable[[int, int], int]] = {
    AddExp: lambda a, b: _wrap(a + b),
    SubExp: lambda a, b: _wrap(a - b),
    MulExp: lambda a, b: _wrap(a * b),
    DivExp: lambda a, b: _wrap(_div(a, b)),
    ModExp: _mod,
    LTExp: lambda a, b: int(a < b),
    GTExp: lambda a, b: int(a > b),
    LEExp: lambda a, b: int(a <= b),
    GEExp: lambda a, b: int(a >= b),
    EQExp: lambda a, b: int(a == b),
    NEExp: lambda a, b: int(a != b),
    LAndExp: lambda a, b: int(bool(a) and bool(b)),
    LOrExp: lambda a, b: int(bool(a) or bool(b)),
}


def evaluate(exp: Exp, symbols: Optional[SymbolTables] = None) -> int:
    """Value of a constant expression with 32-bit C integer semantics.

    Names must be scalar constants in ``symbols``.  Both sides of ``&&`` and
    ``||`` are evaluated.  Raises EvaluationError for anything else and
    ZeroDivisionError for division or modulo by zero.
    """
    if isinstance(exp, NumberExp):
        return exp.number
    if isinstance(exp, NegativeExp):
        return _wrap(-evaluate(exp.operand, symbols))
    if isinstance(exp, LogicalNotExp):
        return int(not evaluate(exp.operand, symbols))
    operation = _BINARY.get(type(exp))
    if operation is not None:
        lhs = evaluate(exp.lhs, symbols)
        rhs = evaluate(exp.rhs, symbols)
        return operation(lhs, rhs)
    if isinstance(exp, LValExp):
        if symbols is None or not symbols.contains(exp.ident, SymbolKind.CONST):
            raise EvaluationError(f"undefined const symbol: {exp.ident}")
        return symbols.get(exp.ident, SymbolKind.CONST)
    raise EvaluationError(f"{type(exp).__name__} cannot be evaluated at compile time")


def shape_of(dims: list[Exp], symbols: Optional[SymbolTables] = None) -> list[int]:
    """Evaluate the extents of an array declaration."""
    return [evaluate(dim, symbols) for dim in dims]


def array_type(shape: list[int]) -> str:
    """IR type of an array of ``shape``: ``[2, 3]`` gives ``[[i32, 3], 2]``."""
    type_name = "i32"
    for extent in reversed(shape):
        type_name = f"[{type_name}, {extent}]"
    return type_name


def _next_layer(shape: list[int], size: int) -> int:
    """Depth of the outermost sub-array that starts after ``size`` elements."""
    if size == 0:
        return 0
    if size >= math.prod(shape):
        raise EvaluationError("too many initialisers for the array")
    for depth in range(1, len(shape) + 1):
        if size % math.prod(shape[depth:]) == 0:
            return depth
    return len(shape)


_Leaf = Union[Exp, int]


def _flatten(
    shape: list[int], init: Optional[ArrayInitVal], leaf: Callable[[Exp], _Leaf]
) -> list[_Leaf]:
    if init is None or init.is_leaf:
        raise EvaluationError("an array needs a braced initialiser")
    result: list[_Leaf] = []

    def fill(layer: int, node: ArrayInitVal) -> int:
        pushed = 0
        for child in node.children:
            if child.exp is not None:
                result.append(leaf(child.exp))
                pushed += 1
            else:
                child_layer = max(_next_layer(shape, len(result)), layer + 1)
                pushed += fill(child_layer, child)
        total = math.prod(shape[layer:])
        if pushed < total:
            result.extend([0] * (total - pushed))
        return total

    fill(0, init)
    return result


def flatten_const_init(
    shape: list[int], init: Optional[ArrayInitVal], symbols: Optional[SymbolTables] = None
) -> list[int]:
    """Row-major values of a constant array initialiser, padded with zeros.

    ``int a[2][3][4] = {1, 2, 3, 4, {5}, {6}, {7, 8}}`` fills the first row,
    then one row each for ``{5}`` and ``{6}``, then the next ``[3][4]``
    block for ``{7, 8}``.
    """
    return _flatten(shape, init, lambda exp: evaluate(exp, symbols))  # type: ignore[return-value]


def flatten_var_init(
    shape: list[int], init: Optional[ArrayInitVal], symbols: Optional[SymbolTables] = None
) -> list[_Leaf]:
    """Like flatten_const_init, but keeps expressions it cannot evaluate."""

    def leaf(exp: Exp) -> _Leaf:
        try:
            return evaluate(exp, symbols)
        except EvaluationError:
            return exp

    return _flatten(shape, init, leaf)


def param_array_type(
    param: FuncFParamArr, symbols: Optional[SymbolTables] = None
) -> tuple[str, int]:
    """IR pointer type of an array parameter and its number of dimensions.

    ``int a[]`` gives ``("*i32", 1)``; ``int a[][2][3]`` gives
    ``("*[[i32, 3], 2]", 3)``.
    """
    if not isinstance(param, FuncFParamArr):
        raise TypeError(f"{param.ident} is not an array parameter")
    shape = shape_of(param.array_dims, symbols)
    return "*" + array_type(shape), 1 + len(shape)