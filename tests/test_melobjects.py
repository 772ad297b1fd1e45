import pytest

from meltools.melobjects import (
    Kind,
    MelError,
    MelObject,
    Namelist,
    format_object,
)


def test_copy_int_is_new_object_with_same_value():
    ob = MelObject(Kind.INT, 42)
    dup = ob.copy()
    assert dup is not ob
    assert dup.kind is Kind.INT
    assert dup.value == 42


def test_copy_keeps_flags():
    ob = MelObject(Kind.STRING, "text", bound=True, immediate=True)
    dup = ob.copy()
    assert (dup.bound, dup.immediate, dup.value) == (True, True, "text")


def test_copy_thread_has_independent_list():
    inner = MelObject(Kind.INT, 1)
    ob = MelObject(Kind.THREAD, [inner])
    dup = ob.copy()
    dup.value.append(MelObject(Kind.INT, 2))
    assert len(ob.value) == 1
    assert dup.value[0] is inner


@pytest.mark.parametrize("kind", [Kind.MARK, Kind.NAME])
def test_copy_unknown_kind_raises(kind):
    with pytest.raises(MelError):
        MelObject(kind).copy()


def test_insert_binds_and_lookup_finds():
    names = Namelist()
    ob = MelObject(Kind.INT, 3)
    names.insert("x", ob)
    assert ob.bound
    var = names.lookup("x")
    assert var.ob is ob
    assert "x" in names
    assert names.lookup("y") is None


def test_lookup_moves_entry_to_front():
    names = Namelist()
    for name in ("a", "b", "c"):
        names.insert(name, MelObject(Kind.INT, 0))
    assert [var.name for var in names] == ["c", "b", "a"]
    names.lookup("a")
    assert [var.name for var in names] == ["a", "c", "b"]


def test_remove_deletes_entry():
    names = Namelist()
    ob = MelObject(Kind.STRING, "s")
    names.insert("s", ob)
    assert names.remove("s") is ob
    assert len(names) == 0
    assert names.remove("s") is None


def test_remove_code_raises():
    names = Namelist()
    names.insert("+", MelObject(Kind.CODE, lambda: None))
    with pytest.raises(MelError):
        names.remove("+")
    assert "+" in names


def test_name_of_finds_bound_object():
    names = Namelist()
    target = MelObject(Kind.INT, 1)
    names.insert("t", target)
    names.insert("u", MelObject(Kind.INT, 1))
    assert names.name_of(target) == "t"
    assert [var.name for var in names][0] == "t"
    assert names.name_of(MelObject(Kind.INT, 1)) is None


def test_format_int_radixes():
    ob = MelObject(Kind.INT, 255)
    assert format_object(ob) == ["255"]
    assert format_object(ob, radix=16) == ["ff"]
    assert format_object(MelObject(Kind.INT, 15), radix=8) == ["17"]


def test_format_negative_hex_is_64_bit():
    assert format_object(MelObject(Kind.INT, -1), radix=16) == ["f" * 16]


def test_format_bad_radix():
    with pytest.raises(ValueError):
        format_object(MelObject(Kind.INT, 1), radix=2)


def test_format_string_and_indent():
    assert format_object(MelObject(Kind.STRING, "hello"), indent=2) == ["  <hello>"]


def test_format_long_string_is_truncated():
    line = format_object(MelObject(Kind.STRING, "x" * 500))[0]
    assert line.startswith("<") and line.endswith(">")
    assert len(line) < 500


def test_format_real():
    assert format_object(MelObject(Kind.REAL, 1.5)) == ["1.500000"]


def test_format_null_and_mark():
    assert format_object(None, indent=1) == [" [NULL]"]
    assert format_object(MelObject(Kind.MARK)) == ["[MARK]"]


def test_format_verbose_int_with_name():
    names = Namelist()
    ob = MelObject(Kind.INT, 5)
    names.insert("five", ob)
    assert format_object(ob, verbose=True, namelist=names) == ["[ZB]:five:5"]


def test_format_thread():
    thread = MelObject(Kind.THREAD, [MelObject(Kind.INT, 1), MelObject(Kind.INT, 2)])
    assert format_object(thread) == ["unnamed_thread"]
    lines = format_object(thread, verbose=True)
    assert lines[0] == "[T]:unnamed_thread:len=2"
    assert lines[1:] == ["   [Z]:1", "   [Z]:2"]
    assert format_object(MelObject(Kind.THREAD, None)) == ["[NULL THREAD]"]


def test_format_code_uses_name():
    names = Namelist()
    code = MelObject(Kind.CODE, lambda: None)
    names.insert("dup", code)
    assert format_object(code, namelist=names) == ["dup "]


def test_format_name_points_at_value():
    names = Namelist()
    var = names.insert("v", MelObject(Kind.INT, 9))
    ref = MelObject(Kind.NAME, var)
    assert format_object(ref) == ["-->", "      9"]