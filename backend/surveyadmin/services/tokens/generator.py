"""
Random access-token strings.

Tokens are read aloud and typed by hand, so the alphabets leave out vowels
(no accidental words) and the easily confused ``0 1 3 l``.
"""

from __future__ import annotations

import secrets
from random import Random

UPPER = "BCDFGHJKLMNPQRSTVWXZ"
LOWER = UPPER.lower()
DIGITS = "2456789"
ALPHANUM = UPPER + LOWER + DIGITS

#: Alphabet for respondent tokens: 46 distinct symbols.
TOKEN_SYMBOLS = DIGITS + UPPER + LOWER.replace("l", "")
DEFAULT_TOKEN_LENGTH = 9


class RandomStringGenerator:
    """
    Produce random strings of a fixed length over a fixed alphabet.

    :param length: Number of characters per string (``>= 1``).
    :param symbols: Alphabet; duplicates are collapsed (first occurrence wins)
        so every symbol is equally likely. Needs 2 distinct symbols.
    :param rng: Randomness source; defaults to :class:`secrets.SystemRandom`.
    :raises ValueError: On an invalid length or alphabet.
    """

    def __init__(
        self,
        length: int = DEFAULT_TOKEN_LENGTH,
        symbols: str = TOKEN_SYMBOLS,
        *,
        rng: Random | None = None,
    ) -> None:
        if length < 1:
            raise ValueError("length must be >= 1")
        distinct = "".join(dict.fromkeys(symbols or ""))
        if len(distinct) < 2:
            raise ValueError("symbols must contain at least 2 distinct characters")
        self.length = length
        self.symbols = distinct
        self._rng = rng or secrets.SystemRandom()

    def next(self) -> str:
        """Return a fresh random string of exactly ``length`` characters."""
        return "".join(self._rng.choice(self.symbols) for _ in range(self.length))

    __call__ = next


def generate(length: int) -> str:
    """Return a random :data:`ALPHANUM` string of ``length`` characters."""
    return RandomStringGenerator(length, ALPHANUM).next()
