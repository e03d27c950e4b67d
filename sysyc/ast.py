"""Abstract syntax tree for SysY programs and the visitor that walks it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union


class Node:
    """Base class of every syntax tree node."""

    def accept(self, visitor: "Visitor") -> Any:
        """Dispatch to ``visitor`` and return whatever it returns."""
        cls = type(self)
        if cls in _ABSTRACT_NODES:
            raise TypeError(f"{cls.__name__} is an abstract class")
        return visitor.visit(self)


class Visitor:
    """Dispatches a node to the method ``visit_<ClassName>``.

    Dispatch is on the exact class of the node: a handler for a base class
    does not catch its subclasses.
    """

    def visit(self, node: Node) -> Any:
        name = type(node).__name__
        handler = getattr(self, f"visit_{name}", None)
        if handler is None:
            raise NotImplementedError(f"{name} is not implemented")
        return handler(node)


# ---------------------------------------------------------------- expressions


class Exp(Node):
    """Base class of all expressions."""


@dataclass
class NumberExp(Exp):
    number: int


@dataclass
class LValExp(Exp):
    """A name, optionally indexed: ``a`` or ``a[i][j]``."""

    ident: str
    indices: list[Exp] = field(default_factory=list)


@dataclass
class FuncCallExp(Exp):
    ident: str
    args: list[Exp] = field(default_factory=list)


@dataclass
class UnaryExp(Exp):
    """Base class of unary expressions."""

    operand: Exp


class NegativeExp(UnaryExp):
    pass


class LogicalNotExp(UnaryExp):
    pass


@dataclass
class BinaryExp(Exp):
    """Base class of binary expressions; ``op`` is the IR mnemonic."""

    lhs: Exp
    rhs: Exp

    op: ClassVar[str] = ""


class AddExp(BinaryExp):
    op = "add"


class SubExp(BinaryExp):
    op = "sub"


class MulExp(BinaryExp):
    op = "mul"


class DivExp(BinaryExp):
    op = "div"


class ModExp(BinaryExp):
    op = "mod"


class LTExp(BinaryExp):
    op = "lt"


class GTExp(BinaryExp):
    op = "gt"


class LEExp(BinaryExp):
    op = "le"


class GEExp(BinaryExp):
    op = "ge"


class EQExp(BinaryExp):
    op = "eq"


class NEExp(BinaryExp):
    op = "ne"


class LAndExp(BinaryExp):
    """Short-circuit logical and."""


class LOrExp(BinaryExp):
    """Short-circuit logical or."""


# --------------------------------------------------------------- declarations


@dataclass
class ArrayInitVal(Node):
    """An initialiser.

    ``exp`` set and no children: a single value.
    No ``exp`` and children: a braced list.
    No ``exp`` and no children: ``{}``, i.e. zero initialisation.
    """

    exp: Optional[Exp] = None
    children: list["ArrayInitVal"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.exp is not None

    @property
    def is_zero_init(self) -> bool:
        return self.exp is None and not self.children


@dataclass
class ConstDef(Node):
    ident: str
    init: Optional[ArrayInitVal] = None
    array_dims: list[Exp] = field(default_factory=list)
    is_global: bool = False


@dataclass
class VarDef(Node):
    ident: str
    init: Optional[ArrayInitVal] = None
    array_dims: list[Exp] = field(default_factory=list)
    is_global: bool = False


@dataclass
class Decl(Node):
    """Base class of declarations."""

    btype: str = "int"


@dataclass
class ConstDecl(Decl):
    defs: list[ConstDef] = field(default_factory=list)


@dataclass
class VarDecl(Decl):
    defs: list[VarDef] = field(default_factory=list)


# ----------------------------------------------------------------- statements


class Stmt(Node):
    """Base class of statements."""


BlockItem = Union[Decl, Stmt]


@dataclass
class RetStmt(Stmt):
    exp: Optional[Exp] = None


@dataclass
class AssignStmt(Stmt):
    lval: LValExp
    exp: Exp


@dataclass
class ExpStmt(Stmt):
    """An expression statement; without ``exp`` it is the empty statement."""

    exp: Optional[Exp] = None


@dataclass
class BlockStmt(Stmt):
    items: list[BlockItem] = field(default_factory=list)


@dataclass
class IfStmt(Stmt):
    cond: Exp
    then_body: Stmt
    else_body: Optional[Stmt] = None


@dataclass
class WhileStmt(Stmt):
    cond: Exp
    body: Stmt


@dataclass
class BreakStmt(Stmt):
    pass


@dataclass
class ContinueStmt(Stmt):
    pass


# ------------------------------------------------------------------ functions


@dataclass
class FuncFParam(Node):
    """A scalar parameter."""

    ident: str
    btype: str = "int"


@dataclass
class FuncFParamArr(FuncFParam):
    """An array parameter.

    ``int a[]`` has no ``array_dims``; ``int a[][2]`` has ``[2]``.
    """

    array_dims: list[Exp] = field(default_factory=list)


@dataclass
class FuncDef(Node):
    func_type: str
    ident: str
    params: list[FuncFParam] = field(default_factory=list)
    body: list[BlockItem] = field(default_factory=list)


@dataclass
class CompUnit(Node):
    """A whole translation unit: functions and global declarations in order."""

    items: list[Union[FuncDef, Decl]] = field(default_factory=list)


_ABSTRACT_NODES = frozenset({Node, Exp, UnaryExp, BinaryExp, Decl, Stmt})