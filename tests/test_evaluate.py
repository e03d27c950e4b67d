import math

import pytest

from sysyc.ast import (
    AddExp,
    ArrayInitVal,
    DivExp,
    FuncCallExp,
    FuncFParam,
    FuncFParamArr,
    GTExp,
    LAndExp,
    LOrExp,
    LTExp,
    LValExp,
    LogicalNotExp,
    ModExp,
    MulExp,
    NegativeExp,
    NumberExp,
    SubExp,
)
from sysyc.evaluate import (
    EvaluationError,
    array_type,
    evaluate,
    flatten_const_init,
    flatten_var_init,
    param_array_type,
    shape_of,
)
from sysyc.symtable import SymbolKind, SymbolTables


def n(value):
    return NumberExp(value)


def init(*items):
    children = []
    for item in items:
        if isinstance(item, (list, tuple)):
            children.append(init(*item))
        elif isinstance(item, int):
            children.append(ArrayInitVal(exp=n(item)))
        else:
            children.append(ArrayInitVal(exp=item))
    return ArrayInitVal(children=children)


@pytest.fixture
def symbols():
    tables = SymbolTables()
    tables.push_table()
    tables.insert_const("size", 4)
    tables.insert("v", "@v_1", SymbolKind.VAR)
    return tables


def test_number_and_negation():
    assert evaluate(n(42)) == 42
    assert evaluate(NegativeExp(n(42))) == -42


def test_subtraction_is_antisymmetric():
    assert evaluate(SubExp(n(9), n(4))) == -evaluate(SubExp(n(4), n(9)))


def test_division_truncates_toward_zero():
    assert evaluate(DivExp(n(-7), n(2))) == -evaluate(DivExp(n(7), n(2)))
    for a, b in [(7, 2), (-7, 2), (7, -2), (-7, -2)]:
        q = evaluate(DivExp(n(a), n(b)))
        r = evaluate(ModExp(n(a), n(b)))
        assert q * b + r == a
        assert r == 0 or (r < 0) == (a < 0)


def test_arithmetic_wraps_to_32_bits():
    big = 2**31 - 1
    assert evaluate(AddExp(n(big), n(1))) == -(2**31)
    assert evaluate(MulExp(n(big), n(2))) == evaluate(SubExp(n(0), n(2)))


def test_comparisons_and_logic():
    for a, b in [(1, 2), (2, 1), (3, 3)]:
        assert evaluate(LTExp(n(a), n(b))) == evaluate(GTExp(n(b), n(a)))
        assert evaluate(LTExp(n(a), n(b))) in (0, 1)
    assert evaluate(LogicalNotExp(n(0))) == 1
    assert evaluate(LogicalNotExp(n(5))) == 0
    assert evaluate(LAndExp(n(3), n(0))) == 0
    assert evaluate(LOrExp(n(0), n(7))) == 1


def test_division_by_zero():
    with pytest.raises(ZeroDivisionError):
        evaluate(DivExp(n(1), n(0)))
    with pytest.raises(ZeroDivisionError):
        evaluate(ModExp(n(1), n(0)))


def test_constant_lookup(symbols):
    assert evaluate(MulExp(LValExp("size"), n(1)), symbols) == 4


def test_non_constants_cannot_be_evaluated(symbols):
    with pytest.raises(EvaluationError):
        evaluate(LValExp("v"), symbols)
    with pytest.raises(EvaluationError):
        evaluate(LValExp("size"))
    with pytest.raises(EvaluationError):
        evaluate(FuncCallExp("getint"), symbols)
    with pytest.raises(EvaluationError):
        evaluate(LAndExp(n(0), LValExp("missing")), symbols)


def test_shape_of(symbols):
    assert shape_of([n(2), LValExp("size")], symbols) == [2, 4]


def test_array_type():
    assert array_type([2, 3]) == "[[i32, 3], 2]"
    assert array_type([]) == "i32"


def test_flatten_const_init_worked_example():
    shape = [2, 3, 4]
    result = flatten_const_init(shape, init(1, 2, 3, 4, [5], [6], [7, 8]))
    expected = [1, 2, 3, 4, 5, 0, 0, 0, 6, 0, 0, 0] + [7, 8] + [0] * 10
    assert result == expected
    assert len(result) == math.prod(shape)


def test_flatten_zero_init_and_flat_list():
    assert flatten_const_init([2, 2], init()) == [0, 0, 0, 0]
    assert flatten_const_init([2, 2], init(1, 2, 3)) == [1, 2, 3, 0]


def test_flatten_const_requires_braces():
    with pytest.raises(EvaluationError):
        flatten_const_init([2], ArrayInitVal(exp=n(1)))
    with pytest.raises(EvaluationError):
        flatten_const_init([2], None)


def test_flatten_rejects_nested_list_past_the_end():
    with pytest.raises(EvaluationError):
        flatten_const_init([2], init(1, 2, [3]))


def test_flatten_var_keeps_runtime_expressions(symbols):
    runtime = LValExp("v")
    result = flatten_var_init([3], init(LValExp("size"), runtime), symbols)
    assert result[0] == 4
    assert result[1] is runtime
    assert result[2] == 0


def test_param_array_types():
    assert param_array_type(FuncFParamArr("a")) == ("*i32", 1)
    type_name, dims = param_array_type(FuncFParamArr("a", array_dims=[n(2), n(3)]))
    assert type_name == "*" + array_type([2, 3])
    assert dims == 3


def test_param_array_type_rejects_scalar():
    with pytest.raises(TypeError):
        param_array_type(FuncFParam("x"))