"""
ID generation for acceptance records

Acceptance ids are generated client-side before submission, so the remote
ledger and the local one agree on identity. UUIDv7 keeps them sortable by
creation time, which matches the append-only order of a ledger.
"""

import secrets
import time
from typing import Protocol

ACCEPTANCE_ID_PREFIX = "acceptance-"


class IdFactory(Protocol):
    """Protocol for ID generation strategies"""

    def generate(self) -> str:
        ...


def generate_id() -> str:
    """
    Generate a UUIDv7-like identifier (time-ordered UUID)

    First 48 bits are the Unix timestamp in milliseconds, followed by the
    version nibble (7), 12 random bits, the variant bits and 62 random bits.

    Returns:
        Sortable UUID string (e.g., "01908e9a-3b87-7000-8000-123456789abc")
    """
    timestamp_48 = int(time.time() * 1000) & 0xFFFFFFFFFFFF
    rand_12 = secrets.randbits(12)
    rand_62 = secrets.randbits(62)

    time_high = (timestamp_48 >> 16) & 0xFFFFFFFF
    time_low = timestamp_48 & 0xFFFF
    version_and_rand = 0x7000 | rand_12
    variant_and_rand = 0x8000 | ((rand_62 >> 48) & 0x3FFF)
    node = rand_62 & 0xFFFFFFFFFFFF

    return (
        f"{time_high:08x}-{time_low:04x}-{version_and_rand:04x}-"
        f"{variant_and_rand:04x}-{node:012x}"
    )


def generate_acceptance_id() -> str:
    """Generate an acceptance record id (``acceptance-<uuid7>``)"""
    return f"{ACCEPTANCE_ID_PREFIX}{generate_id()}"


class AcceptanceIdFactory:
    """Default factory for acceptance record ids"""

    def generate(self) -> str:
        return generate_acceptance_id()


class SequentialIdFactory:
    """Deterministic ids (``acceptance-1``, ``acceptance-2``, ...) for tests and fixtures"""

    def __init__(self, prefix: str = ACCEPTANCE_ID_PREFIX) -> None:
        self.prefix = prefix
        self._counter = 0

    def generate(self) -> str:
        self._counter += 1
        return f"{self.prefix}{self._counter}"


default_id_factory = AcceptanceIdFactory()
