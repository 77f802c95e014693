"""Order number generation.

Numbers look like ``E3-1704067200000-K3ZP0QX7A``: a fixed prefix, the
millisecond epoch at intake and nine random base36 characters. Nothing is
stored, so uniqueness is probabilistic.
"""

import secrets
import string
import time
from collections.abc import Callable, Sequence

ORDER_PREFIX = "E3"
SUFFIX_LENGTH = 9
SUFFIX_ALPHABET = string.digits + string.ascii_uppercase


def generate_order_number(
    now_ms: Callable[[], int] | None = None,
    choice: Callable[[Sequence[str]], str] = secrets.choice,
) -> str:
    """Return a fresh order number.

    ``now_ms`` and ``choice`` replace the clock and random source in tests.
    """
    timestamp = now_ms() if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join(choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{ORDER_PREFIX}-{timestamp}-{suffix}"
