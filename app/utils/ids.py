"""Submission identifier generation.

Identifiers are short, URL-safe random strings drawn from the OS CSPRNG. They
carry no ordering, timing or counter information.
"""

from __future__ import annotations

import secrets
import string
from typing import Callable

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"

DEFAULT_ID_SIZE = 21

IdGenerator = Callable[[], str]


def generate_submission_id(size: int = DEFAULT_ID_SIZE) -> str:
    """Return a new collision-resistant, URL-safe identifier.

    21 symbols from a 64-character alphabet give 126 bits of entropy.

    Args:
        size: Number of characters in the identifier.

    Returns:
        Random identifier string.

    Raises:
        ValueError: If size is not positive.
    """
    if size < 1:
        raise ValueError("size must be >= 1")
    return "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(size))
