import pytest

from meltools.melobjects import Kind, MelError, MelObject
from meltools.melops import Op, arithmetic, compare, string_op


def Z(value):
    return MelObject(Kind.INT, value)


def R(value):
    return MelObject(Kind.REAL, value)


def S(value):
    return MelObject(Kind.STRING, value)


@pytest.mark.parametrize("a,b", [(7, 5), (-3, 10), (0, 0), (123456, -789)])
def test_int_add_sub_round_trip(a, b):
    total = arithmetic(Op.ADD, Z(a), Z(b))
    assert total.kind is Kind.INT
    back = arithmetic(Op.SUB, total, Z(b))
    assert back.kind is Kind.INT
    assert back.value == a


def test_mixed_operands_give_real():
    result = arithmetic(Op.ADD, Z(2), R(0.5))
    assert result.kind is Kind.REAL
    back = arithmetic(Op.SUB, result, R(0.5))
    assert back.value == 2.0


@pytest.mark.parametrize("a,b", [(7, 2), (-7, 2), (7, -2), (-7, -2), (9, 3)])
def test_int_div_mod_invariant(a, b):
    q = arithmetic(Op.DIV, Z(a), Z(b)).value
    r = arithmetic(Op.MOD, Z(a), Z(b)).value
    assert q * b + r == a
    assert abs(r) < abs(b)
    assert r == 0 or (r < 0) == (a < 0)


def test_int_division_truncates_toward_zero():
    assert arithmetic(Op.DIV, Z(-7), Z(2)).value == -3


def test_and_or_on_ints():
    assert arithmetic(Op.AND, Z(12), Z(12)).value == 12
    assert arithmetic(Op.OR, Z(0), Z(9)).value == 9


def test_real_division():
    result = arithmetic(Op.DIV, R(1.0), Z(4))
    assert result.kind is Kind.REAL
    assert arithmetic(Op.MUL, result, Z(4)).value == 1.0


@pytest.mark.parametrize("zero", [Z(0), R(0.0)])
def test_divide_by_zero(zero):
    with pytest.raises(MelError, match="divide by zero"):
        arithmetic(Op.DIV, Z(1), zero)


def test_mod_by_zero():
    with pytest.raises(MelError, match="divide by zero"):
        arithmetic(Op.MOD, Z(1), Z(0))


def test_arithmetic_on_string_is_error():
    with pytest.raises(MelError, match="illegal operands"):
        arithmetic(Op.ADD, S("a"), Z(1))


@pytest.mark.parametrize("op", [Op.AND, Op.OR, Op.MOD])
def test_int_only_ops_reject_reals(op):
    with pytest.raises(MelError, match=f"{op.value}: wrong type"):
        arithmetic(op, R(1.5), Z(2))


def test_relations_compare_top_against_deeper():
    assert compare(Op.LT, Z(3), Z(5)).value == 0
    assert compare(Op.LT, Z(5), Z(3)).value == compare(Op.GT, Z(3), Z(5)).value


@pytest.mark.parametrize(
    "left,right",
    [(Z(3), Z(5)), (Z(5), Z(5)), (R(1.5), Z(1)), (S("abc"), S("abd")), (S("x"), S("x"))],
)
def test_relations_are_complementary(left, right):
    def value(op):
        result = compare(op, left, right)
        assert result.kind is Kind.INT
        return result.value

    assert value(Op.EQ) + value(Op.NE) == 1
    assert value(Op.LT) + value(Op.GE) == 1
    assert value(Op.GT) + value(Op.LE) == 1


def test_equal_values_compare_equal():
    assert compare(Op.EQ, S("same"), S("same")).value == 1
    assert compare(Op.EQ, Z(4), R(4.0)).value == 1


def test_compare_mismatched_types():
    with pytest.raises(MelError, match="eq: wrong type"):
        compare(Op.EQ, S("1"), Z(1))


def test_compare_rejects_non_relation():
    with pytest.raises(MelError):
        compare(Op.ADD, Z(1), Z(2))


def test_concatenation():
    result = string_op(Op.CAT, S("ab"), S("cd"))
    assert result.kind is Kind.STRING
    assert result.value == "ab" + "cd"


@pytest.mark.parametrize("a,b", [("abc", "abd"), ("z", "a"), ("", "x")])
def test_strcmp_is_antisymmetric(a, b):
    forward = string_op(Op.CMP, S(a), S(b))
    backward = string_op(Op.CMP, S(b), S(a))
    assert forward.kind is Kind.INT
    assert forward.value == -backward.value
    assert forward.value in (-1, 1)
    assert string_op(Op.CMP, S(a), S(a)).value == 0


def test_string_op_needs_strings():
    with pytest.raises(MelError, match=r"\.: wrong type"):
        string_op(Op.CAT, S("a"), Z(1))


def test_string_op_rejects_other_ops():
    with pytest.raises(MelError):
        string_op(Op.ADD, S("a"), S("b"))