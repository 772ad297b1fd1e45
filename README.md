# meltools

Pieces of a small terminal text editor, usable on their own:

- **Buffer search and replace** (`meltools.search`, `meltools.metapattern`):
  forward and reverse search over an in-memory line buffer, repeated
  searches ("hunt"), and search-and-replace with an optional query
  callback. Matching folds ASCII case unless the buffer is exact. In
  "magic" mode patterns support `.` (any character but newline), `*`
  (zero or more of the previous element), `[...]` / `[^...]` character
  classes with `-` ranges, `^` and `$` line anchors and `\` escapes.
- **MEL**, a small stack-based extension language (`meltools.melinterp`,
  with `melobjects`, `melops`, `melreader` and `melstack`): integers,
  reals, `<strings>`, threads in `{ ... }`, named variables, arithmetic,
  comparisons, loops and conditionals.
- **File encryption** (`meltools.cryptfile`) using Blowfish in CBC mode
  (`meltools.blowfish`).
- **MD5 digests** (`meltools.md5driver`) with the classic reference test
  suite and a time trial.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command-line tools

### `mel` — the MEL interpreter

```
mel [file ...]
```

Runs `.melrc` from the current directory when it is readable, then each
named file, then reads words from standard input until `q` or end of
input. Errors are printed and interpretation carries on. For example,
the input

```
2 3 + =
<hello> < world> . =
{ 1 = } 3 rpt
```

prints `5`, `<hello world>` and then `1` three times.

Words include:

- arithmetic `+ - * / %`; two integers give an integer, otherwise a real
- comparisons `eq ne lt gt le ge` and `strcmp`; these compare the top of
  stack with the item below it, so `a b lt` is 1 when `b < a`
- `.` concatenates two strings
- printing: `=` (print and pop), `?` (print top), `.s` (print stack),
  `dmptop`, `dmpvar`, `namelist`, `verbose` / `.v`, and `hex oct dec`
  to choose how integers are printed
- stack: `dup drop over rot exch clear .c depth`, and marks with
  `[ ]` and `count_to_mark`
- control: `{ ... }` builds a thread, `exec`, `rpt`, `loop`, `if`,
  `not`, `break`, `exit`, and `$` to run the next word while compiling
- variables: `def`, `!` (store), `@` (fetch), `push`
- `load` reads words from the file named by the string on the stack;
  `q` quits; `t` prints a test message

### `mel-crypt` — encrypt and decrypt files

```
mel-crypt [-d] [-p password] infile outfile
```

Without `-d` the input is encrypted; with `-d` it is decrypted. Without
`-p` the password is asked for twice on the terminal. The output file is
created with mode 0600.

### `mel-md5` — MD5 digests

```
mel-md5 -sabc          # digest a string
mel-md5 -x             # run the reference test suite
mel-md5 -t             # time trial
mel-md5 file1 file2    # digest files
mel-md5 < file         # digest standard input
```

## Library use

Searching a buffer:

```python
from meltools.search import TextBuffer, Searcher

buf = TextBuffer("one two\nthree two\n", exact=False, magic=True)
searcher = Searcher(buf)
searcher.forward_search("t[wh]", 1)        # True; buf.dot is after the match
count = searcher.replace("two", "2")       # replaces from dot onward
print(count, buf.text())
```

`replace` accepts an `ask` callable that is given a prompt for each
match and answers `y`, `n`, `!`, `u`, `.`, `"\x07"` or `?`; it returns
`None` when the query is aborted.

Compiling a magic pattern:

```python
from meltools.metapattern import compile_magic, expand_pattern

elements, magical = compile_magic("^ab*c$")
print(expand_pattern("line\nbreak"))       # line<NL>break
```

Encrypting a block with Blowfish:

```python
from meltools.blowfish import Blowfish

key = b"secret"
cipher = Blowfish(key)
block = b"8 bytes!"
assert cipher.decrypt_block(cipher.encrypt_block(block)) == block
```

Encrypting a stream:

```python
import io
from meltools.cryptfile import encrypt_stream, decrypt_stream

password = "password"
sealed = io.BytesIO()
encrypt_stream(password, io.BytesIO(b"some text"), sealed)
sealed.seek(0)
plain = io.BytesIO()
decrypt_stream(password, sealed, plain)
assert plain.getvalue() == b"some text"
```

`decrypt_stream` raises `ValueError` when the input is not well-formed,
which is also what a wrong password usually gives.

Running MEL code from Python:

```python
import sys
from meltools.melinterp import Interpreter

interp = Interpreter(sys.stdout)
interp.run("2 3 * =")
```

`Interpreter.run` and `Interpreter.load_file` raise
`meltools.melobjects.MelError` on the first error.

## What is not included

There is no editor here: no screen, key bindings or file loading into a
buffer. Search and replace work only on `TextBuffer` objects held in
memory, and patterns are passed in as arguments rather than typed at a
prompt.