"""Scoped symbol tables for constants, variables, functions, arrays and pointers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Union

from .ast import Exp


class SymbolError(LookupError):
    """A symbol is undefined, or no scope is open."""


class SymbolKind(Enum):
    """Kinds of symbol; lookups by name try them in this order."""

    CONST = "const"
    VAR = "var"
    FUNC = "func"
    CONST_ARR = "const array"
    VAR_ARR = "var array"
    PTR = "ptr"


@dataclass
class ConstArrInfo:
    sym_name: str
    dims: list[int] = field(default_factory=list)
    data: list[int] = field(default_factory=list)


@dataclass
class VarArrInfo:
    """A variable array; ``data`` holds values or expressions not known yet."""

    sym_name: str
    dims: list[int] = field(default_factory=list)
    data: list[Union[Exp, int]] = field(default_factory=list)


@dataclass
class PtrInfo:
    """An array parameter held as a pointer."""

    sym_name: str
    type_name: str
    dims: int


_COUNTED_KINDS = (
    SymbolKind.CONST,
    SymbolKind.VAR,
    SymbolKind.CONST_ARR,
    SymbolKind.VAR_ARR,
)

_Scope = dict[SymbolKind, dict[str, Any]]


class SymbolTables:
    """A stack of scopes, each holding one table per symbol kind."""

    def __init__(self) -> None:
        self._scopes: list[_Scope] = []
        self._counters: dict[SymbolKind, int] = {kind: -1 for kind in _COUNTED_KINDS}

    # ------------------------------------------------------------- scopes

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return len(self._scopes)

    def push_table(self) -> None:
        """Open a new innermost scope."""
        self._scopes.append({kind: {} for kind in SymbolKind})

    def pop_table(self) -> None:
        """Close the innermost scope."""
        if not self._scopes:
            raise SymbolError("no open scope")
        self._scopes.pop()

    @contextmanager
    def scope(self) -> Iterator["SymbolTables"]:
        """Open a scope for the duration of a ``with`` block."""
        self.push_table()
        try:
            yield self
        finally:
            self.pop_table()

    def _top(self, kind: SymbolKind) -> dict[str, Any]:
        if not self._scopes:
            raise SymbolError("no open scope")
        return self._scopes[-1][kind]

    # ---------------------------------------------------------- insertion

    def insert_const(self, ident: str, value: int) -> None:
        """Bind a scalar constant to its value in the innermost scope."""
        self._top(SymbolKind.CONST)[ident] = value

    def insert(self, ident: str, value: str, kind: SymbolKind) -> None:
        """Bind a variable or function to its IR symbol in the innermost scope."""
        if kind not in (SymbolKind.VAR, SymbolKind.FUNC):
            raise ValueError(f"cannot insert a {kind.value} symbol by name")
        self._top(kind)[ident] = value

    def insert_ptr(self, ident: str, type_name: str, dims: int) -> PtrInfo:
        """Bind an array parameter, held in ``%<ident>``, in the innermost scope."""
        info = PtrInfo(sym_name="%" + ident, type_name=type_name, dims=dims)
        self._top(SymbolKind.PTR)[ident] = info
        return info

    def insert_const_array(
        self, ident: str, dims: list[int], data: list[int]
    ) -> ConstArrInfo:
        """Bind a constant array under a fresh ``@<ident>_<n>`` symbol."""
        table = self._top(SymbolKind.CONST_ARR)
        count = self.total_occurrences(ident, SymbolKind.CONST_ARR)
        info = ConstArrInfo(f"@{ident}_{count + 1}", list(dims), list(data))
        table[ident] = info
        return info

    def insert_var_array(
        self, ident: str, dims: list[int], data: list[Union[Exp, int]]
    ) -> VarArrInfo:
        """Bind a variable array under a fresh ``@<ident>_<n>`` symbol."""
        table = self._top(SymbolKind.VAR_ARR)
        count = self.total_occurrences(ident, SymbolKind.VAR_ARR)
        info = VarArrInfo(f"@{ident}_{count + 1}", list(dims), list(data))
        table[ident] = info
        return info

    # ------------------------------------------------------------- lookup

    def lookup_kind(self, ident: str) -> SymbolKind:
        """Kind of the innermost binding of ``ident``."""
        for layer in reversed(self._scopes):
            for kind in SymbolKind:
                if ident in layer[kind]:
                    return kind
        raise SymbolError(f"undefined symbol: {ident}")

    def layer_of(self, ident: str, kind: SymbolKind) -> Optional[int]:
        """1-based depth of the innermost scope binding ``ident`` as ``kind``, or None."""
        for depth, layer in reversed(list(enumerate(self._scopes, start=1))):
            if ident in layer[kind]:
                return depth
        return None

    def contains(self, ident: str, kind: SymbolKind) -> bool:
        """True if any open scope binds ``ident`` as ``kind``."""
        return self.layer_of(ident, kind) is not None

    def contains_in_current(self, ident: str, kind: SymbolKind) -> bool:
        """True if the innermost scope binds ``ident`` as ``kind``."""
        return ident in self._top(kind)

    def total_occurrences(self, ident: str, kind: SymbolKind) -> int:
        """Next value of the running counter for ``kind``, starting at 0.

        The counter is shared by all names of that kind and is used to make
        IR symbol names unique.
        """
        if kind not in self._counters:
            raise ValueError(f"{kind.value} symbols are not counted")
        self._counters[kind] += 1
        return self._counters[kind]

    def _search(self, ident: str, kind: SymbolKind) -> Any:
        for layer in reversed(self._scopes):
            table = layer[kind]
            if ident in table:
                return table[ident]
        raise SymbolError(f"undefined {kind.value} symbol: {ident}")

    def get(self, ident: str, kind: SymbolKind) -> Union[int, str]:
        """Value of a constant, or IR symbol name of any other kind."""
        entry = self._search(ident, kind)
        if kind in (SymbolKind.CONST, SymbolKind.VAR, SymbolKind.FUNC):
            return entry
        return entry.sym_name

    def get_array(
        self, ident: str, indices: list[int], kind: SymbolKind
    ) -> Union[Exp, int]:
        """Element of a constant or variable array at ``indices``, row major."""
        if kind not in (SymbolKind.CONST_ARR, SymbolKind.VAR_ARR):
            raise ValueError(f"{kind.value} symbols are not arrays")
        info = self._search(ident, kind)
        position = 0
        multiplier = 1
        for index, extent in zip(
            reversed(indices), reversed(info.dims[: len(indices)])
        ):
            position += index * multiplier
            multiplier *= extent
        return info.data[position]

    def get_var_arr_info(self, ident: str) -> VarArrInfo:
        return self._search(ident, SymbolKind.VAR_ARR)

    def get_ptr_info(self, ident: str) -> PtrInfo:
        return self._search(ident, SymbolKind.PTR)