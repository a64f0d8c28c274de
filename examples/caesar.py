"""Recover the key of a Caesar cipher over 7-bit ASCII.

Each ciphertext symbol narrows down the set of keys consistent with the
plaintext language; `KeySet.concat` intersects those sets along a path.
"""
from dataclasses import dataclass

from weftmatch import KeySet, Pattern, PreferTarget, Step, SymbolStep

ALPHABET = 128


def rotate_left(bits: int, n: int) -> int:
    n %= ALPHABET
    mask = (1 << ALPHABET) - 1
    return ((bits << n) | (bits >> (ALPHABET - n))) & mask


@dataclass
class CaesarRange(SymbolStep[int, KeySet]):
    """Plaintext symbols in [lo, hi], seen through an unknown shift."""

    lo: int
    hi: int

    def step(self, symbol: int) -> KeySet | None:
        # If C = P + K (mod 128), then K = C - P (mod 128).
        span = (1 << (self.hi - self.lo + 1)) - 1
        keys = rotate_left(span, (symbol - self.hi) % ALPHABET)
        return KeySet(keys) if keys else None


def identifier_program() -> list:
    """[a-z]+_[a-z]+"""
    return [
        Step(CaesarRange(ord('a'), ord('z'))),  # 0
        PreferTarget(0),                        # 1
        Step(CaesarRange(ord('_'), ord('_'))),  # 2
        Step(CaesarRange(ord('a'), ord('z'))),  # 3
        PreferTarget(3),                        # 4
    ]


def encrypt(message: bytes, key: int) -> list[int]:
    return [(p + key) % ALPHABET for p in message]


if __name__ == '__main__':
    pattern = Pattern(identifier_program(), KeySet)
    message = b"hello_world"
    for key in range(ALPHABET):
        result = pattern.eval(encrypt(message, key))
        assert result == KeySet.single(key), f"no match for key {key}: {result!r}"
    print(f"recovered all {ALPHABET} keys for {message.decode()!r}")
