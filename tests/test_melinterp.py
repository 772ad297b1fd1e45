import io
import sys

import pytest

from meltools.melinterp import Interpreter, main
from meltools.melobjects import Kind, MelError


@pytest.fixture
def interp():
    return Interpreter(io.StringIO())


def lines(interp):
    return interp.out.getvalue().splitlines()


def test_arithmetic(interp):
    interp.run("6 7 *")
    assert interp.pop().value == 42


def test_print_string(interp):
    interp.run("<hello> =")
    assert lines(interp) == ["<hello>"]


def test_hex_output(interp):
    interp.run("hex 0xff =")
    assert lines(interp) == ["ff"]


def test_equality(interp):
    interp.run("3 3 eq <abc> <abc> eq")
    assert interp.pop().value == 1
    assert interp.pop().value == 1


def test_concatenation(interp):
    interp.run("<ab> <cd> .")
    assert interp.pop().value == "ab" + "cd"


def test_error_restores_operands(interp):
    with pytest.raises(MelError, match="illegal operands"):
        interp.run("<s> 1 +")
    assert interp.stack.depth() == 2
    assert interp.pop().value == 1


def test_divide_by_zero(interp):
    with pytest.raises(MelError, match="attempt to divide by zero"):
        interp.run("7 0 /")


def test_print_empty_stack(interp):
    with pytest.raises(MelError, match="printpop: end of stack"):
        interp.run("=")


def test_store_and_read_variable(interp):
    interp.run("5 x ! x")
    assert interp.pop().value == 5


def test_def_and_call_thread(interp):
    interp.run("{ <hi> = } <greet> def greet greet")
    assert lines(interp) == ["<hi>", "<hi>"]


def test_rpt(interp):
    interp.run("{ <a> = } 3 rpt")
    assert lines(interp).count("<a>") == 3


def test_loop_break(interp):
    interp.run("{ <z> = break } loop")
    assert lines(interp) == ["<z>"]


def test_exit_leaves_thread(interp):
    interp.run("{ <a> = exit <b> = } <f> def f")
    assert "<a>" in lines(interp)
    assert "<b>" not in lines(interp)


def test_if(interp):
    interp.run("1 { <yes> = } if 0 { <no> = } if")
    assert lines(interp) == ["<yes>"]


def test_compile_makes_unbound_thread(interp):
    interp.run("{ 1 2 }")
    thread = interp.pop()
    assert thread.kind is Kind.THREAD
    assert [ob.value for ob in thread.value] == [1, 2]


def test_exec_thread(interp):
    interp.run("{ <e> = } exec")
    assert lines(interp) == ["<e>"]


def test_array_brackets(interp):
    interp.run("[ 4 5 ]")
    assert [ob.value for ob in interp.pop().value] == [4, 5]


def test_count_to_mark_word(interp):
    interp.run("[ 1 2 3 count_to_mark")
    assert interp.pop().value == 3


def test_push_and_load(interp):
    interp.run("7 <seven> def <seven> push @")
    assert interp.pop().value == 7


def test_quit_stops(interp):
    interp.run("1 q 2")
    assert interp.finished
    assert interp.stack.depth() == 1
    assert interp.pop().value == 1


def test_test_word(interp):
    interp.run("t")
    assert lines(interp) == ["Well, we are executing a test now"]


def test_undefined_object(interp):
    interp.run("foo drop <foo> push exec")
    assert lines(interp) == ["Executing undefined object."]


def test_dmpvar_unknown(interp):
    interp.run("<nosuch> dmpvar")
    assert lines(interp) == ["[NULL]"]


def test_load_file(interp, tmp_path):
    path = tmp_path / "script.mel"
    path.write_text("<fromfile> =\n")
    interp.load_file(path)
    assert lines(interp) == ["<fromfile>"]


def test_load_word(interp, tmp_path):
    path = tmp_path / "script.mel"
    path.write_text("<inner> =\n")
    interp.run(f"<{path}> load <outer> =")
    assert lines(interp) == ["<inner>", "<outer>"]


def test_load_word_missing_file(interp, tmp_path):
    with pytest.raises(MelError, match="can't access file"):
        interp.run(f"<{tmp_path / 'missing'}> load")


def test_main_quits(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "stdin", io.StringIO("<hi> = q\n"))
    assert main([]) == 0
    assert "<hi>" in capsys.readouterr().out


def test_main_eof_reports_errors(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "stdin", io.StringIO("=\n"))
    assert main([]) == 1
    captured = capsys.readouterr()
    assert "printpop: end of stack" in captured.out
    assert "EOF on input" in captured.err