"""The MEL stack-language interpreter and its interactive command."""

from __future__ import annotations

import os
import sys
from functools import partial
from typing import Callable, Sequence, TextIO

from meltools.melobjects import Kind, MelError, MelObject, Namelist, format_object
from meltools.melops import Op, arithmetic, compare, string_op
from meltools.melreader import START_STRING, WordReader, parse_number
from meltools.melstack import Stack

RC_FILE = ".melrc"
_VALUE_KINDS = (Kind.INT, Kind.REAL, Kind.STRING)


class _Quit(Exception):
    """Raised by the quit word to stop interpretation."""


class Interpreter:
    """Reads words and executes them against a stack and a name list."""

    def __init__(self, out: TextIO | None = None) -> None:
        self.out = out if out is not None else sys.stdout
        self.stack = Stack()
        self.namelist = Namelist()
        self.verbose = False
        self.radix = 10
        self.compile_depth = 0
        self.finished = False
        self._run_next = False
        self._break_loop = False
        self._exit_thread = False
        self._reader: WordReader | None = None
        self._undefined = MelObject(Kind.CODE, self._undefined_word)
        self._install()

    # -- set-up -----------------------------------------------------------

    def _install(self) -> None:
        words: dict[str, Callable[[], None]] = {
            "t": self._test,
            "q": self._quit,
            "+": partial(self._binary, Op.ADD, arithmetic),
            "-": partial(self._binary, Op.SUB, arithmetic),
            "*": partial(self._binary, Op.MUL, arithmetic),
            "/": partial(self._binary, Op.DIV, arithmetic),
            "%": partial(self._binary, Op.MOD, arithmetic),
            ".": partial(self._binary, Op.CAT, string_op),
            "=": self._printpop,
            "?": self._printtop,
            "dec": partial(self._set_radix, 10),
            "hex": partial(self._set_radix, 16),
            "oct": partial(self._set_radix, 8),
            "not": self._not,
            "ne": partial(self._binary, Op.NE, compare),
            "eq": partial(self._binary, Op.EQ, compare),
            "lt": partial(self._binary, Op.LT, compare),
            "gt": partial(self._binary, Op.GT, compare),
            "le": partial(self._binary, Op.LE, compare),
            "ge": partial(self._binary, Op.GE, compare),
            "strcmp": partial(self._binary, Op.CMP, string_op),
            "depth": self._depth,
            "dup": self.stack.dup,
            "drop": self._drop,
            "over": self.stack.over,
            "rot": self.stack.rot,
            "exch": self.stack.exch,
            "clear": self.stack.clear,
            ".c": self.stack.clear,
            "exec": self._x_exec,
            "rpt": self._rpt,
            "def": self._def,
            "!": self._store,
            "@": self._load,
            "loop": self._loop,
            "if": self._if,
            "load": self._load_word,
            ".s": self._printstack,
            "namelist": self._dump_namelist,
            "dmptop": self._dmptop,
            "dmpvar": self._dmpvar,
            "push": self._push_name,
            "verbose": self._toggle_verbose,
            ".v": self._toggle_verbose,
            "break": self._break,
            "exit": self._exit,
            "[": self.stack.mark,
            "]": self.stack.pack_thread,
            "{": self._compile,
            "}": self._end_compile,
            "count_to_mark": self._count_to_mark,
            "$": self._set_run_next,
        }
        immediate = {"[", "]", "{", "}", "$"}
        for name, fn in words.items():
            self.namelist.insert(
                name, MelObject(Kind.CODE, fn, immediate=name in immediate)
            )

    # -- public interface ---------------------------------------------------

    def push(self, ob: MelObject) -> None:
        """Push an object on the stack."""
        self.stack.push(ob)

    def pop(self) -> MelObject:
        """Pop the top object from the stack."""
        return self.stack.pop()

    def run(self, text: str) -> None:
        """Interpret the words of ``text``; errors are raised as MelError."""
        self.finished = False
        reader = WordReader()
        reader.push_string(text)
        self._interpret(reader, keep_going=False)

    def load_file(self, path) -> None:
        """Interpret the words of the file at ``path``."""
        self.finished = False
        reader = WordReader()
        reader.push_file(path)
        self._interpret(reader, keep_going=False)

    # -- interpretation -----------------------------------------------------

    def _interpret(self, reader: WordReader, keep_going: bool) -> None:
        previous = self._reader
        self._reader = reader
        try:
            while not self.finished:
                try:
                    word = reader.next_word()
                except EOFError:
                    return
                try:
                    self._step(word)
                except MelError as exc:
                    if not keep_going:
                        raise
                    self._write([str(exc)])
        except _Quit:
            self.finished = True
        finally:
            self._reader = previous

    def _step(self, word: str) -> None:
        self._break_loop = False
        self._exit_thread = False
        if word == START_STRING:
            self.push(MelObject(Kind.STRING, self._reader.scan_string()))
            return
        var = self.namelist.lookup(word)
        if var is None:
            number = parse_number(word)
            if isinstance(number, int):
                self.push(MelObject(Kind.INT, number))
            elif isinstance(number, float):
                self.push(MelObject(Kind.REAL, number))
            else:
                var = self.namelist.insert(word, self._undefined)
                self.push(MelObject(Kind.NAME, var))
        elif self.compile_depth == 0 or var.ob.immediate or self._run_next:
            self._run_next = False
            self._exec(var.ob)
        else:
            self.push(MelObject(Kind.NAME, var))

    def _exec(self, ob: MelObject) -> None:
        kind = ob.kind
        if kind is Kind.CODE:
            ob.value()
        elif kind in _VALUE_KINDS:
            self.push(MelObject(kind, ob.value))
        elif kind is Kind.THREAD:
            if ob.bound:
                self._exec_thread(ob.value)
            else:
                self.push(ob)
        elif kind is Kind.NAME:
            target = ob.value.ob
            if target is self._undefined:
                self.push(ob)
            else:
                self._exec(target)
        else:
            raise MelError("exec: Internal error -- no flag")

    def _exec_thread(self, items: list[MelObject]) -> None:
        try:
            for ob in list(items):
                self._exec(ob)
                if self._exit_thread or self._break_loop:
                    break
        finally:
            self._exit_thread = False

    def _body(self, ob: MelObject) -> None:
        if ob.kind is Kind.THREAD:
            self._exec_thread(ob.value)
        else:
            self._exec(ob)

    # -- helpers ------------------------------------------------------------

    def _write(self, lines: list[str]) -> None:
        for line in lines:
            self.out.write(line + "\n")

    def _format(self, ob: MelObject | None, indent: int = 0, verbose=None) -> list[str]:
        return format_object(
            ob,
            indent,
            self.verbose if verbose is None else verbose,
            self.radix,
            self.namelist,
        )

    def _need(self, name: str, count: int) -> None:
        if self.stack.depth() < count:
            raise MelError(f"{name}: end of stack")

    def _is_code(self, ob: MelObject) -> bool:
        return ob.kind is Kind.CODE and ob is not self._undefined

    def _rebind(self, var, ob: MelObject) -> None:
        if var.ob is not self._undefined:
            var.ob.bound = False
        ob.bound = True
        var.ob = ob

    # -- words --------------------------------------------------------------

    def _test(self) -> None:
        self._write(["Well, we are executing a test now"])

    def _quit(self) -> None:
        raise _Quit

    def _undefined_word(self) -> None:
        self._write(["Executing undefined object."])

    def _binary(self, op: Op, fn) -> None:
        self._need(op.value, 2)
        right = self.pop()
        left = self.pop()
        try:
            result = fn(op, left, right)
        except MelError:
            self.push(left)
            self.push(right)
            raise
        self.push(result)

    def _printpop(self) -> None:
        self._need("printpop", 1)
        self._write(self._format(self.pop()))

    def _printtop(self) -> None:
        self._need("printtop", 1)
        self._write(self._format(self.stack.peek()))

    def _set_radix(self, radix: int) -> None:
        self.radix = radix

    def _not(self) -> None:
        self._need("not", 1)
        ob = self.pop()
        self.push(MelObject(Kind.INT, int(not ob.value)))

    def _depth(self) -> None:
        self.push(MelObject(Kind.INT, self.stack.depth()))

    def _drop(self) -> None:
        self.pop()

    def _x_exec(self) -> None:
        self._need("exec", 1)
        self._body(self.pop())

    def _rpt(self) -> None:
        self._need("rpt", 2)
        count = self.pop()
        body = self.pop()
        if count.kind is not Kind.INT:
            raise MelError("illegal count for rpt")
        try:
            for _ in range(count.value):
                if self._break_loop:
                    break
                self._body(body)
        finally:
            self._break_loop = False

    def _loop(self) -> None:
        self._need("loop", 1)
        body = self.pop()
        try:
            while not self._break_loop:
                self._body(body)
        finally:
            self._break_loop = False

    def _if(self) -> None:
        self._need("if", 2)
        body = self.pop()
        cond = self.pop()
        if cond.value:
            self._body(body)

    def _def(self) -> None:
        self._need("def", 2)
        key = self.pop()
        value = self.pop()
        if key.kind is Kind.STRING:
            name = key.value
        elif key.kind is Kind.NAME:
            name = key.value.name
        else:
            raise MelError("set: TOS is not of right type")
        var = self.namelist.lookup(name)
        if var is None:
            self.namelist.insert(name, value)
        elif self._is_code(var.ob):
            raise MelError("def: can't redefine a code object")
        else:
            self._rebind(var, value)

    def _store(self) -> None:
        self._need("store", 2)
        target = self.pop()
        value = self.pop()
        if target.kind is not Kind.NAME:
            raise MelError("store: not a variable")
        var = target.value
        if self._is_code(var.ob):
            raise MelError("store: can't redefine a code object")
        var.ob = value
        value.links += 1

    def _load(self) -> None:
        self._need("load", 1)
        ob = self.pop()
        if ob.kind is Kind.NAME:
            target = ob.value.ob
        elif ob.bound:
            target = ob
        else:
            raise MelError("load: no variable")
        if target.kind not in _VALUE_KINDS:
            raise MelError("load: illegal variable value")
        self.push(MelObject(target.kind, target.value))

    def _load_word(self) -> None:
        self._need("load", 1)
        ob = self.pop()
        if ob.kind is not Kind.STRING:
            raise MelError("load_file: no file name")
        if not os.access(ob.value, os.R_OK):
            raise MelError("load_file: can't access file")
        self._reader.push_file(ob.value)

    def _printstack(self) -> None:
        for ob in reversed(list(self.stack)):
            self._write(self._format(ob, 2))

    def _dump_namelist(self) -> None:
        for var in self.namelist:
            lines = self._format(var.ob)
            self._write([f"{var.name}: {lines[0]}"] + lines[1:])

    def _dmptop(self) -> None:
        if self.stack.depth():
            self._write(self._format(self.stack.peek()))

    def _dmpvar(self) -> None:
        self._need("pr_var", 1)
        ob = self.pop()
        if ob.kind is not Kind.STRING:
            raise MelError("dmpvar: TOS must be a string")
        var = self.namelist.lookup(ob.value)
        if var is None:
            self._write(["[NULL]"])
        else:
            self._write(self._format(var.ob, len(ob.value), verbose=True))

    def _push_name(self) -> None:
        if not self.stack.depth():
            return
        top = self.stack.peek()
        if top.kind is not Kind.STRING:
            return
        var = self.namelist.lookup(top.value)
        if var is not None:
            self.push(var.ob)

    def _toggle_verbose(self) -> None:
        self.verbose = not self.verbose

    def _break(self) -> None:
        self._break_loop = True

    def _exit(self) -> None:
        self._exit_thread = True

    def _compile(self) -> None:
        self.stack.mark()
        self.compile_depth += 1

    def _end_compile(self) -> None:
        self.stack.pack_thread()
        self.compile_depth = max(0, self.compile_depth - 1)

    def _count_to_mark(self) -> None:
        self.push(MelObject(Kind.INT, self.stack.count_to_mark()))

    def _set_run_next(self) -> None:
        self._run_next = True


def main(argv: Sequence[str] | None = None) -> int:
    """Run the start-up file and any named files, then read words from stdin."""
    paths = list(sys.argv[1:] if argv is None else argv)
    interp = Interpreter(sys.stdout)
    sources = ([RC_FILE] if os.access(RC_FILE, os.R_OK) else []) + paths
    for path in sources:
        try:
            interp.load_file(path)
        except MelError as exc:
            print(exc)
        if interp.finished:
            return 0
    interp._interpret(WordReader(sys.stdin), keep_going=True)
    if interp.finished:
        return 0
    print("EOF on input", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())