"""Unique name generation for releases and operation tokens."""

import os
import struct
import time
from typing import Callable


class NameGenerator:
    """Generates ``<prefix><20 hex chars>`` names.

    The suffix is the little-endian UTC nanosecond timestamp followed by two
    random bytes.
    """

    def __init__(
        self,
        time_ns: Callable[[], int] = time.time_ns,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        self._time_ns = time_ns
        self._random_bytes = random_bytes

    def generate(self, prefix: str = "") -> str:
        suffix = struct.pack("<Q", self._time_ns() & 0xFFFFFFFFFFFFFFFF) + self._random_bytes(2)
        return f"{prefix}{suffix.hex()}"


default_generator = NameGenerator()


def generate_name(prefix: str = "") -> str:
    return default_generator.generate(prefix)
