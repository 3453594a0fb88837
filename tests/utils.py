"""Test utilities for short links tests."""

import random
import string
from typing import Iterable, List, Optional

from shortlinks.models.link import Link
from shortlinks.services.codegen import CodeGenerator


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8).lower()}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_link(
    db,
    owner_id: str = "user_alice",
    short_code: Optional[str] = None,
    original_url: Optional[str] = None,
) -> Link:
    """Create and commit a Link directly, bypassing the service rules."""
    link = Link(
        owner_id=owner_id,
        short_code=short_code or random_string(8),
        original_url=original_url or random_url(),
    )
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


class ScriptedCodeGenerator(CodeGenerator):
    """Hands out a fixed sequence of codes, repeating the last one forever."""

    def __init__(self, codes: Iterable[str]):
        super().__init__()
        self.codes: List[str] = list(codes)
        self.calls = 0

    def generate(self) -> str:
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


class FixedChoice:
    """Random source that always picks the same character."""

    def __init__(self, char: str):
        self.char = char

    def choice(self, seq):
        assert self.char in seq
        return self.char
