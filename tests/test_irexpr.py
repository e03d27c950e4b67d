import pytest

from sysyc.ast import (
    AddExp,
    DivExp,
    EQExp,
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
)
from sysyc.checkir import verify_koopa_blocks
from sysyc.irbase import IRBuilder, IRGenError
from sysyc.irexpr import ExpressionGenerator, func_type_of
from sysyc.symtable import SymbolError, SymbolKind


@pytest.fixture
def builder():
    b = IRBuilder()
    b.symbols.push_table()
    return b


@pytest.fixture
def gen(builder):
    return ExpressionGenerator(builder)


def lines(builder):
    return [line for line in builder.text.split("\n") if line]


def test_number_emits_nothing(gen, builder):
    assert gen.generate(NumberExp(7)) == "7"
    assert builder.text == ""


def test_add_pinned(gen, builder):
    result = gen.generate(AddExp(NumberExp(1), NumberExp(2)))
    assert result == "%0"
    assert builder.last_line() == "  %0 = add 1, 2"


@pytest.mark.parametrize(
    "cls",
    [AddExp, SubExp, MulExp, DivExp, ModExp, LTExp, GTExp, LEExp, GEExp, EQExp, NEExp],
)
def test_binary_ops_use_mnemonic(gen, builder, cls):
    result = gen.generate(cls(NumberExp(3), NumberExp(4)))
    assert builder.last_line() == f"  {result} = {cls.op} 3, 4"
    assert len(lines(builder)) == 1


def test_nested_expression_uses_inner_result(gen, builder):
    result = gen.generate(MulExp(AddExp(NumberExp(1), NumberExp(2)), NumberExp(3)))
    first, second = lines(builder)
    inner = first.split(" = ")[0].strip()
    assert second == f"  {result} = mul {inner}, 3"
    assert inner != result


def test_negative_and_not(gen, builder):
    neg = gen.generate(NegativeExp(NumberExp(5)))
    assert builder.last_line() == f"  {neg} = sub 0, 5"
    inv = gen.generate(LogicalNotExp(NumberExp(5)))
    assert builder.last_line() == f"  {inv} = eq 5, 0"


def test_const_scalar_is_inlined(gen, builder):
    builder.symbols.insert_const("n", 4)
    assert gen.generate(LValExp("n")) == "4"
    assert builder.text == ""


def test_var_is_loaded(gen, builder):
    builder.symbols.insert("x", "@x_1", SymbolKind.VAR)
    result = gen.generate(LValExp("x"))
    assert builder.last_line() == f"  {result} = load @x_1"


def test_const_array_element(gen, builder):
    info = builder.symbols.insert_const_array("a", [2, 3], [0] * 6)
    result = gen.generate(LValExp("a", [NumberExp(1), NumberExp(2)]))
    got = lines(builder)
    assert len(got) == 3
    assert got[0].endswith(f"= getelemptr {info.sym_name}, 1")
    assert got[-1].startswith(f"  {result} = load ")


def test_var_array_partial_index_decays(gen, builder):
    info = builder.symbols.insert_var_array("b", [2, 3], [0] * 6)
    result = gen.generate(LValExp("b", [NumberExp(1)]))
    got = lines(builder)
    assert got[0].endswith(f"= getelemptr {info.sym_name}, 1")
    assert got[-1].startswith(f"  {result} = getelemptr ")
    assert got[-1].endswith(", 0")


def test_var_array_full_index_loads(gen, builder):
    builder.symbols.insert_var_array("b", [2, 3], [0] * 6)
    result = gen.generate(LValExp("b", [NumberExp(1), NumberExp(0)]))
    assert builder.last_line().startswith(f"  {result} = load ")


def test_ptr_without_index_is_loaded_pointer(gen, builder):
    builder.symbols.insert_ptr("p", "*i32", 1)
    result = gen.generate(LValExp("p"))
    assert lines(builder) == [f"  {result} = load %p"]


def test_ptr_with_index_loads_value(gen, builder):
    builder.symbols.insert_ptr("p", "*i32", 1)
    result = gen.generate(LValExp("p", [NumberExp(2)]))
    got = lines(builder)
    assert len(got) == 3
    assert " = getptr " in got[1]
    assert got[2].startswith(f"  {result} = load ")


def test_ptr_partial_index_decays(gen, builder):
    builder.symbols.insert_ptr("p", "*[i32, 3]", 2)
    result = gen.generate(LValExp("p", [NumberExp(1)]))
    assert builder.last_line().startswith(f"  {result} = getelemptr ")
    assert builder.last_line().endswith(", 0")


def test_int_call(gen, builder):
    builder.symbols.insert("f", "@f(@x: i32): i32", SymbolKind.FUNC)
    result = gen.generate(FuncCallExp("f", [NumberExp(3), NumberExp(4)]))
    assert builder.last_line() == f"  {result} = call @f(3, 4)"


def test_void_call_has_no_result(gen, builder):
    builder.symbols.insert("g", "@g()", SymbolKind.FUNC)
    assert gen.generate(FuncCallExp("g")) is None
    assert builder.last_line() == "  call @g()"


def test_undefined_function(gen):
    with pytest.raises(IRGenError):
        gen.generate(FuncCallExp("nope"))


def test_void_call_as_argument(gen, builder):
    builder.symbols.insert("g", "@g()", SymbolKind.FUNC)
    builder.symbols.insert("f", "@f(@x: i32): i32", SymbolKind.FUNC)
    with pytest.raises(IRGenError):
        gen.generate(FuncCallExp("f", [FuncCallExp("g")]))


def test_func_type_of():
    assert func_type_of("@getint(): i32") == "int"
    assert func_type_of("@starttime()") == "void"


def _wrap_function(builder, gen, exp):
    builder.append("fun @main(): i32 {\n%entry:\n")
    result = gen.generate(exp)
    builder.append(f"  ret {result}\n}}\n")
    return result


@pytest.mark.parametrize("cls,initial", [(LAndExp, "0"), (LOrExp, "1")])
def test_short_circuit_forms_valid_blocks(gen, builder, cls, initial):
    _wrap_function(builder, gen, cls(NumberExp(1), NumberExp(0)))
    blocks = verify_koopa_blocks(builder.text)
    assert len(blocks) == 3
    assert f"  store {initial}, @result_1" in builder.text


def test_short_circuit_slots_are_unique(gen, builder):
    gen.generate(LAndExp(NumberExp(1), NumberExp(2)))
    gen.generate(LOrExp(NumberExp(1), NumberExp(2)))
    allocs = [line for line in lines(builder) if line.endswith("= alloc i32")]
    assert len(allocs) == 2
    assert len(set(allocs)) == 2


def test_address_of_var(gen, builder):
    builder.symbols.insert("x", "@x_1", SymbolKind.VAR)
    assert gen.address(LValExp("x")) == "@x_1"
    assert builder.text == ""


def test_address_of_var_array(gen, builder):
    info = builder.symbols.insert_var_array("b", [2], [0, 0])
    pointer = gen.address(LValExp("b", [NumberExp(1)]))
    assert lines(builder) == [f"  {pointer} = getelemptr {info.sym_name}, 1"]


def test_address_of_ptr(gen, builder):
    builder.symbols.insert_ptr("p", "*[i32, 3]", 2)
    pointer = gen.address(LValExp("p", [NumberExp(1), NumberExp(2)]))
    got = lines(builder)
    assert got[0].endswith("= load %p")
    assert got[-1].startswith(f"  {pointer} = getelemptr ")


def test_address_of_const_fails(gen, builder):
    builder.symbols.insert_const("n", 1)
    with pytest.raises(IRGenError):
        gen.address(LValExp("n"))


def test_function_name_is_not_a_value(gen, builder):
    builder.symbols.insert("f", "@f(): i32", SymbolKind.FUNC)
    with pytest.raises(IRGenError):
        gen.generate(LValExp("f"))


def test_undefined_name(gen):
    with pytest.raises(SymbolError):
        gen.generate(LValExp("missing"))