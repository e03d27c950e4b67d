"""Stack of the labels of the loops that enclose the code being generated."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WhileLabel:
    """Labels of one loop: where ``continue`` jumps and where ``break`` jumps."""

    entry: str
    end: str


class WhileStack:
    """Innermost-last stack of enclosing ``while`` loops."""

    def __init__(self) -> None:
        self._labels: list[WhileLabel] = []

    def push(self, entry: str, end: str) -> WhileLabel:
        """Enter a loop whose condition is at ``entry`` and exit at ``end``."""
        label = WhileLabel(entry, end)
        self._labels.append(label)
        return label

    def pop(self) -> WhileLabel:
        """Leave the innermost loop and return its labels."""
        if not self._labels:
            raise IndexError("no enclosing while loop")
        return self._labels.pop()

    def top(self) -> WhileLabel:
        """Labels of the innermost loop."""
        if not self._labels:
            raise IndexError("no enclosing while loop")
        return self._labels[-1]

    def __len__(self) -> int:
        return len(self._labels)