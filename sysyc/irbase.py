"""Text buffer and bookkeeping shared by the IR generators."""

from __future__ import annotations

from typing import Optional

from .symtable import SymbolTables
from .whilestack import WhileStack


class IRGenError(RuntimeError):
    """IR generation reached an inconsistent state."""


class IRBuilder:
    """Accumulates IR text, temporaries, pending results and label numbers."""

    def __init__(
        self,
        symbols: Optional[SymbolTables] = None,
        loops: Optional[WhileStack] = None,
    ) -> None:
        self.symbols = symbols if symbols is not None else SymbolTables()
        self.loops = loops if loops is not None else WhileStack()
        self._chunks: list[str] = []
        self._temp_counter = 0
        self._results: list[str] = []
        self._label_counter = 0

    @property
    def text(self) -> str:
        """All IR generated so far."""
        return "".join(self._chunks)

    def new_temp(self, name: str = "") -> str:
        """A fresh temporary such as ``%3`` or ``%ptr4``."""
        value = self._temp_counter
        self._temp_counter += 1
        return f"%{name}{value}"

    def reset_counter(self) -> None:
        """Restart temporary numbering, as at the start of a function."""
        self._temp_counter = 0

    def push_result(self, result: str) -> None:
        self._results.append(result)

    def pop_result(self) -> str:
        if not self._results:
            raise IRGenError("no pending result")
        return self._results.pop()

    def peek_result(self) -> str:
        if not self._results:
            raise IRGenError("no pending result")
        return self._results[-1]

    def append(self, text: str) -> None:
        self._chunks.append(text)

    def last_line(self) -> str:
        """The last line of the IR, without its newline."""
        tail = ""
        for chunk in reversed(self._chunks):
            tail = chunk + tail
            if "\n" in tail[:-1]:
                break
        if tail.endswith("\n"):
            tail = tail[:-1]
        return tail.rsplit("\n", 1)[-1]

    def last_line_is_label(self) -> bool:
        return ":" in self.last_line()

    def next_label_id(self) -> int:
        """A fresh number for a group of basic block labels."""
        value = self._label_counter
        self._label_counter += 1
        return value