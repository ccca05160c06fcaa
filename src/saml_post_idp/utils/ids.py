"""Identifier generation for SAML responses and assertions.

SAML IDs must be valid ``xs:ID`` values (start with a letter or underscore)
and unguessable, so the default generator draws from ``secrets``.
"""

import logging
import secrets
from typing import Iterable, Iterator, Protocol

logger = logging.getLogger(__name__)

# 20 random bytes -> 160 bits, same strength as a SHA-1 sized identifier
ID_RANDOM_BYTES = 20


class IdGenerator(Protocol):
    """Produces a fresh identifier on every call."""

    def generate(self) -> str:
        ...


class SecureIdGenerator:
    """Cryptographically secure random ID generator.

    Example:
        >>> generated = SecureIdGenerator().generate()
        >>> generated.startswith("_") and len(generated) == 41
        True
    """

    def __init__(self, num_bytes: int = ID_RANDOM_BYTES) -> None:
        if num_bytes < 16:
            raise ValueError(
                f"num_bytes must be at least 16 for unguessable IDs, got: {num_bytes}"
            )
        self.num_bytes = num_bytes

    def generate(self) -> str:
        generated = f"_{secrets.token_hex(self.num_bytes)}"
        logger.debug(f"Generated SAML ID: {generated}")
        return generated


class SequenceIdGenerator:
    """Deterministic generator that hands out a fixed sequence of IDs.

    Intended for tests and reproducible fixtures only.

    Raises:
        RuntimeError: When the sequence is exhausted
    """

    def __init__(self, ids: Iterable[str]) -> None:
        self._ids: Iterator[str] = iter(ids)

    def generate(self) -> str:
        try:
            return next(self._ids)
        except StopIteration:
            raise RuntimeError("SequenceIdGenerator exhausted") from None
