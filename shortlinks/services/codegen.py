"""Random short code generation."""

import secrets
from typing import Optional, Protocol, Sequence

from shortlinks.core.config import settings


class RandomSource(Protocol):
    """Anything with a ``random.Random``-style ``choice``."""

    def choice(self, seq: Sequence[str]) -> str:
        ...


class CodeGenerator:
    """
    Produces candidate short codes.

    Each character is drawn uniformly and independently from the alphabet.
    The generator holds no mutable state, so one instance can serve
    concurrent requests. Pass a seeded ``random.Random`` (or any object with
    ``choice``) to make the output deterministic in tests.
    """

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        length: Optional[int] = None,
        alphabet: Optional[str] = None,
    ):
        self.random_source = random_source or secrets.SystemRandom()
        self.length = length or settings.SHORT_CODE_LENGTH
        self.alphabet = alphabet or settings.SHORT_CODE_ALPHABET

    def generate(self) -> str:
        return "".join(self.random_source.choice(self.alphabet) for _ in range(self.length))
