from sysyc.ast import (
    AssignStmt,
    BlockStmt,
    BreakStmt,
    ConstDecl,
    ContinueStmt,
    ExpStmt,
    IfStmt,
    LValExp,
    NumberExp,
    RetStmt,
    VarDecl,
    VarDef,
    WhileStmt,
)
from sysyc.prune import PruningRetVisitor, prune_after_return


def test_items_after_return_are_removed():
    first = ExpStmt(NumberExp(1))
    ret = RetStmt(NumberExp(0))
    items = [first, ret, ExpStmt(), AssignStmt(LValExp("a"), NumberExp(2))]
    result = prune_after_return(items)
    assert result is items
    assert [id(x) for x in result] == [id(first), id(ret)]


def test_body_without_return_is_untouched():
    items = [VarDecl(defs=[VarDef("a")]), ConstDecl(), ExpStmt()]
    before = list(items)
    assert prune_after_return(items) == before


def test_return_inside_block_cuts_outer_items():
    inner_ret = RetStmt()
    block = BlockStmt([ExpStmt(), inner_ret, ExpStmt()])
    items = [block, ExpStmt(), RetStmt()]
    prune_after_return(items)
    assert items == [block]
    assert block.items[-1] is inner_ret
    assert len(block.items) == 2


def test_return_in_if_branches_does_not_cut_after_if():
    then_block = BlockStmt([RetStmt(), ExpStmt()])
    else_block = BlockStmt([ExpStmt(), ContinueStmt(), ExpStmt()])
    tail = ExpStmt()
    items = [IfStmt(NumberExp(1), then_block, else_block), tail]
    visitor = PruningRetVisitor()
    visitor.prune(items)
    assert items[-1] is tail
    assert visitor.pruning_ret is False
    assert len(then_block.items) == 1
    assert isinstance(else_block.items[-1], ContinueStmt)


def test_break_cuts_loop_body_but_not_after_loop():
    brk = BreakStmt()
    body = BlockStmt([ExpStmt(), BlockStmt([brk, ExpStmt()]), RetStmt()])
    tail = RetStmt()
    items = [WhileStmt(NumberExp(1), body), tail, ExpStmt()]
    prune_after_return(items)
    assert items[1] is tail
    assert len(items) == 2
    assert len(body.items) == 2
    assert body.items[1].items == [brk]


def test_visitor_flag_set_after_return():
    visitor = PruningRetVisitor()
    visitor.prune([RetStmt()])
    assert visitor.pruning_ret is True