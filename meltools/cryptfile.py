"""Password-based file encryption with Blowfish in CBC mode.

The encrypted form starts with an 8-byte all-zero IV. The plaintext is
padded with ``pad`` zero bytes (enough to reach a block boundary), then
seven zero bytes and a final byte holding ``pad``.
"""

from __future__ import annotations

import argparse
import contextlib
import getpass
import os
import sys
from typing import BinaryIO, Iterator, Sequence

from meltools.blowfish import BLOCK_SIZE, Blowfish

CHUNK_SIZE = 32768
MAX_NAME_LENGTH = 250
_TRAILER = BLOCK_SIZE  # seven zero bytes plus the pad-size byte
_HOLD_BACK = 2 * BLOCK_SIZE


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def _blocks(data: bytes) -> Iterator[bytes]:
    for start in range(0, len(data), BLOCK_SIZE):
        yield data[start:start + BLOCK_SIZE]


def _chunks(stream: BinaryIO) -> Iterator[bytes]:
    yield from iter(lambda: stream.read(CHUNK_SIZE), b"")


class _CbcChain:
    """Cipher-block chaining over a run of whole blocks."""

    def __init__(self, cipher: Blowfish, iv: bytes) -> None:
        self._cipher = cipher
        self._previous = bytes(iv)

    def encrypt(self, data: bytes) -> bytes:
        out = bytearray()
        for block in _blocks(data):
            self._previous = self._cipher.encrypt_block(_xor(block, self._previous))
            out += self._previous
        return bytes(out)

    def decrypt(self, data: bytes) -> bytes:
        out = bytearray()
        for block in _blocks(data):
            out += _xor(self._cipher.decrypt_block(block), self._previous)
            self._previous = block
        return bytes(out)


def encrypt_stream(password: str | bytes, infile: BinaryIO, outfile: BinaryIO) -> int:
    """Encrypt everything read from ``infile`` into ``outfile``; return bytes written."""
    iv = bytes(BLOCK_SIZE)
    chain = _CbcChain(Blowfish(password), iv)
    outfile.write(iv)
    written = len(iv)
    pending = b""
    for chunk in _chunks(infile):
        pending += chunk
        whole = len(pending) - len(pending) % BLOCK_SIZE
        if whole:
            encrypted = chain.encrypt(pending[:whole])
            outfile.write(encrypted)
            written += len(encrypted)
            pending = pending[whole:]
    pad = (BLOCK_SIZE - len(pending) % BLOCK_SIZE) % BLOCK_SIZE
    tail = pending + bytes(pad + _TRAILER - 1) + bytes([pad])
    encrypted = chain.encrypt(tail)
    outfile.write(encrypted)
    return written + len(encrypted)


def decrypt_stream(password: str | bytes, infile: BinaryIO, outfile: BinaryIO) -> int:
    """Decrypt ``infile`` into ``outfile``; return plaintext bytes written.

    Raises ValueError when the input is not well-formed ciphertext, which
    is also what a wrong password usually produces.
    """
    cipher = Blowfish(password)
    chain: _CbcChain | None = None
    pending = b""
    held = b""
    written = 0
    for chunk in _chunks(infile):
        pending += chunk
        if chain is None:
            if len(pending) < BLOCK_SIZE:
                continue
            chain = _CbcChain(cipher, pending[:BLOCK_SIZE])
            pending = pending[BLOCK_SIZE:]
        whole = len(pending) - len(pending) % BLOCK_SIZE
        held += chain.decrypt(pending[:whole])
        pending = pending[whole:]
        if len(held) > _HOLD_BACK:
            outfile.write(held[:-_HOLD_BACK])
            written += len(held) - _HOLD_BACK
            held = held[-_HOLD_BACK:]

    if chain is None or pending:
        raise ValueError("ciphertext is not a whole number of blocks")
    if len(held) < _TRAILER:
        raise ValueError("ciphertext too short")
    pad = held[-1]
    strip = pad + _TRAILER
    if pad >= BLOCK_SIZE or len(held) < strip or any(held[-strip:-1]):
        raise ValueError("bad padding (wrong password?)")
    plain = held[:-strip]
    outfile.write(plain)
    return written + len(plain)


def _die(message: str) -> int:
    print(f"crypt: {message}", file=sys.stderr)
    return 1


def _read_password() -> str | None:
    first = getpass.getpass("  pw: ")
    second = getpass.getpass("again: ")
    return first if first == second else None


def main(argv: Sequence[str] | None = None) -> int:
    """crypt [-d] [-p password] infile outfile"""
    parser = argparse.ArgumentParser(
        prog="crypt", description="Encrypt or decrypt a file with Blowfish."
    )
    parser.add_argument("-d", dest="decrypt", action="store_true", help="decrypt")
    parser.add_argument("-p", dest="password", help="password")
    parser.add_argument("infile")
    parser.add_argument("outfile")
    args = parser.parse_args(argv)

    if len(args.infile) > MAX_NAME_LENGTH:
        return _die("input file name too long")
    if len(args.outfile) > MAX_NAME_LENGTH:
        return _die("output file name too long")

    password = args.password
    if password is None:
        password = _read_password()
        if password is None:
            return _die("passwords don't match")

    with contextlib.ExitStack() as stack:
        try:
            infile = stack.enter_context(open(args.infile, "rb"))
        except OSError as exc:
            print(f"couldn't open input file: {exc}", file=sys.stderr)
            return 1
        try:
            fd = os.open(args.outfile, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        except OSError as exc:
            print(f"couldn't create output file: {exc}", file=sys.stderr)
            return 1
        outfile = stack.enter_context(os.fdopen(fd, "wb"))
        try:
            if args.decrypt:
                decrypt_stream(password, infile, outfile)
            else:
                encrypt_stream(password, infile, outfile)
        except ValueError as exc:
            return _die(str(exc))
        except OSError as exc:
            return _die(f"write error: {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())