"""Blowfish block cipher with the classic pi-derived initial key."""

from __future__ import annotations

from functools import lru_cache

from mpmath import mp

BLOCK_SIZE = 8
KEY_WORDS = 1042  # 18 P-array words followed by four 256-word S-boxes
_P_WORDS = 18
_MASK = 0xFFFFFFFF


@lru_cache(maxsize=1)
def init_key() -> tuple[int, ...]:
    """Return the 1042 initial key words: the leading fractional bits of pi."""
    nbits = KEY_WORDS * 32
    with mp.workprec(nbits + 64):
        fraction = mp.ldexp(mp.pi - 3, nbits)
        value = int(mp.floor(fraction))
    return tuple(
        (value >> (32 * (KEY_WORDS - 1 - i))) & _MASK for i in range(KEY_WORDS)
    )


class Blowfish:
    """A Blowfish cipher keyed with a user key of any length."""

    def __init__(self, key: bytes | str) -> None:
        if isinstance(key, str):
            key = key.encode("utf-8")
        key = bytes(key) or b"\0"
        base = init_key()

        cycle = _cycle_bytes(key)
        p = [
            base[i]
            ^ (next(cycle) << 24 | next(cycle) << 16 | next(cycle) << 8 | next(cycle))
            for i in range(_P_WORDS)
        ]
        self._p = p
        self._s = [list(base[_P_WORDS + 256 * box: _P_WORDS + 256 * (box + 1)])
                   for box in range(4)]

        left = right = 0
        for i in range(0, KEY_WORDS, 2):
            left, right = self._encrypt_words(left, right)
            self._store(i, left)
            self._store(i + 1, right)

    def _store(self, index: int, word: int) -> None:
        if index < _P_WORDS:
            self._p[index] = word
        else:
            offset = index - _P_WORDS
            self._s[offset // 256][offset % 256] = word

    def _f(self, x: int) -> int:
        s0, s1, s2, s3 = self._s
        h = (s0[x >> 24] + s1[(x >> 16) & 0xFF]) & _MASK
        return ((h ^ s2[(x >> 8) & 0xFF]) + s3[x & 0xFF]) & _MASK

    def _encrypt_words(self, left: int, right: int) -> tuple[int, int]:
        p = self._p
        left ^= p[0]
        for i in range(1, 17, 2):
            right ^= p[i] ^ self._f(left)
            left ^= p[i + 1] ^ self._f(right)
        return right ^ p[17], left

    def _decrypt_words(self, left: int, right: int) -> tuple[int, int]:
        p = self._p
        left ^= p[17]
        for i in range(16, 0, -2):
            right ^= p[i] ^ self._f(left)
            left ^= p[i - 1] ^ self._f(right)
        return right ^ p[0], left

    @staticmethod
    def _split(block: bytes) -> tuple[int, int]:
        block = bytes(block)
        if len(block) != BLOCK_SIZE:
            raise ValueError(f"block must be {BLOCK_SIZE} bytes, got {len(block)}")
        return int.from_bytes(block[:4], "big"), int.from_bytes(block[4:], "big")

    @staticmethod
    def _join(left: int, right: int) -> bytes:
        return left.to_bytes(4, "big") + right.to_bytes(4, "big")

    def encrypt_block(self, block: bytes) -> bytes:
        """Encrypt one 8-byte block (big-endian word order)."""
        return self._join(*self._encrypt_words(*self._split(block)))

    def decrypt_block(self, block: bytes) -> bytes:
        """Decrypt one 8-byte block (big-endian word order)."""
        return self._join(*self._decrypt_words(*self._split(block)))


def _cycle_bytes(data: bytes):
    while True:
        yield from data