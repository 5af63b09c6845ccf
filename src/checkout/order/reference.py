"""Order reference generation.

References look like ``mmart-1718000000000-9f86d081884c7d65``: a prefix,
the creation time in unix milliseconds and 64 random bits. The random part
comes from ``secrets`` so concurrent callers never coordinate.
"""

import re
import secrets
import time

from checkout.settings import REFERENCE_PREFIX_PATTERN, get_settings, validate_reference_prefix

_RANDOM_BYTES = 8
_REFERENCE_PATTERN = re.compile(rf"^{REFERENCE_PREFIX_PATTERN.pattern}-\d{{10,}}-[0-9a-f]{{16}}$")


def generate_reference(prefix: str | None = None) -> str:
    """Return a new, unique order reference.

    Raises ``ValueError`` for a prefix that ``is_valid_reference`` would not
    accept back.
    """
    prefix = validate_reference_prefix(prefix or get_settings().reference_prefix)
    return f"{prefix}-{time.time_ns() // 1_000_000}-{secrets.token_hex(_RANDOM_BYTES)}"


def is_valid_reference(reference: str | None) -> bool:
    """Whether ``reference`` has the shape of a generated reference."""
    return bool(reference) and _REFERENCE_PATTERN.fullmatch(reference) is not None
