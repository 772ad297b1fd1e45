"""MD5 digest driver: strings, files, standard input, test suite and timing."""

from __future__ import annotations

import hashlib
import sys
import time
from dataclasses import dataclass
from typing import BinaryIO, Sequence

TEST_BLOCK_LEN = 1000
TEST_BLOCK_COUNT = 1000
_CHUNK = 1024

_SUITE = (
    "",
    "a",
    "abc",
    "message digest",
    "abcdefghijklmnopqrstuvwxyz",
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789",
    "1234567890" * 8,
)


def digest_string(text: str | bytes) -> str:
    """Return the hex MD5 digest of a string."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    return hashlib.md5(text).hexdigest()


def digest_stream(stream: BinaryIO) -> str:
    """Return the hex MD5 digest of everything read from a binary stream."""
    context = hashlib.md5()
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        context.update(chunk)
    return context.hexdigest()


def digest_file(path) -> str:
    """Return the hex MD5 digest of a file's contents."""
    with open(path, "rb") as stream:
        return digest_stream(stream)


def _string_line(text: str) -> str:
    return f'MD5 ("{text}") = {digest_string(text)}'


def test_suite() -> list[str]:
    """Digest the reference strings and return one report line for each."""
    return [_string_line(text) for text in _SUITE]


@dataclass(frozen=True)
class TrialResult:
    digest: str
    seconds: float
    bytes_per_second: float


def time_trial() -> TrialResult:
    """Time digesting TEST_BLOCK_COUNT blocks of TEST_BLOCK_LEN bytes."""
    block = bytes(i & 0xFF for i in range(TEST_BLOCK_LEN))
    start = time.perf_counter()
    context = hashlib.md5()
    for _ in range(TEST_BLOCK_COUNT):
        context.update(block)
    digest = context.hexdigest()
    elapsed = time.perf_counter() - start
    total = TEST_BLOCK_LEN * TEST_BLOCK_COUNT
    speed = total / elapsed if elapsed > 0 else float("inf")
    return TrialResult(digest, elapsed, speed)


def main(argv: Sequence[str] | None = None) -> int:
    """Digest strings (-sSTRING), run the trial (-t) or suite (-x), or digest files."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(digest_stream(sys.stdin.buffer))
        return 0
    for arg in args:
        if arg.startswith("-s"):
            print(_string_line(arg[2:]))
        elif arg == "-t":
            print(
                f"MD5 time trial. Digesting {TEST_BLOCK_LEN} "
                f"{TEST_BLOCK_COUNT}-byte blocks ...",
                end="",
            )
            result = time_trial()
            print(" done")
            print(f"Digest = {result.digest}")
            print(f"Time = {result.seconds:.3f} seconds")
            print(f"Speed = {result.bytes_per_second:.0f} bytes/second")
        elif arg == "-x":
            print("MD5 test suite:")
            for line in test_suite():
                print(line)
        else:
            try:
                digest = digest_file(arg)
            except OSError:
                print(f"{arg} can't be opened")
            else:
                print(f"MD5 ({arg}) = {digest}")
    return 0


if __name__ == "__main__":
    sys.exit(main())