"""Removal of the statements that can never run because they follow a return."""

from __future__ import annotations

from .ast import (
    AssignStmt,
    BlockItem,
    BlockStmt,
    BreakStmt,
    ConstDecl,
    ContinueStmt,
    ExpStmt,
    IfStmt,
    RetStmt,
    VarDecl,
    Visitor,
    WhileStmt,
)


class PruningRetVisitor(Visitor):
    """Cuts every block item that follows ``return``, ``break`` or ``continue``.

    A block that ends in one of those also cuts the items that follow the
    block itself.  The branches of an ``if`` and the body of a ``while`` may
    not run, so they never cut what follows the statement.
    """

    def __init__(self) -> None:
        self.pruning_ret = False

    def prune(self, items: list[BlockItem]) -> list[BlockItem]:
        """Truncate ``items`` in place after the first item that leaves the block."""
        for position, item in enumerate(items):
            item.accept(self)
            if self.pruning_ret:
                del items[position + 1 :]
                break
        return items

    def visit_ConstDecl(self, node: ConstDecl) -> None:
        pass

    def visit_VarDecl(self, node: VarDecl) -> None:
        pass

    def visit_AssignStmt(self, node: AssignStmt) -> None:
        pass

    def visit_ExpStmt(self, node: ExpStmt) -> None:
        pass

    def visit_RetStmt(self, node: RetStmt) -> None:
        self.pruning_ret = True

    def visit_BreakStmt(self, node: BreakStmt) -> None:
        self.pruning_ret = True

    def visit_ContinueStmt(self, node: ContinueStmt) -> None:
        self.pruning_ret = True

    def visit_BlockStmt(self, node: BlockStmt) -> None:
        self.prune(node.items)

    def visit_IfStmt(self, node: IfStmt) -> None:
        node.then_body.accept(self)
        self.pruning_ret = False
        if node.else_body is not None:
            node.else_body.accept(self)
        self.pruning_ret = False

    def visit_WhileStmt(self, node: WhileStmt) -> None:
        node.body.accept(self)
        # The loop may run zero times, so what follows it stays reachable.
        self.pruning_ret = False


def prune_after_return(items: list[BlockItem]) -> list[BlockItem]:
    """Prune a function body in place and return it."""
    return PruningRetVisitor().prune(items)