"""Input validation utilities."""

from typing import Final

# Characters that would let a host name smuggle shell syntax
SUSPICIOUS_HOST_CHARS: Final[list[str]] = [
    "/", "\\", ";", "&", "|", "$", "`", " ", "\n", "\r", "\x00",
]


def validate_key(key: str) -> str:
    """Validate a key-value store key.

    Keys become file names inside the store directory, so they must not
    contain path separators or name the directory itself.

    Args:
        key: The key to validate

    Returns:
        The key, unchanged

    Raises:
        ValueError: If the key is not a plain file name
    """
    if not key:
        raise ValueError("Key cannot be empty")

    if "\x00" in key:
        raise ValueError(f"Key contains null byte: {key!r}")

    if "/" in key:
        raise ValueError(f"Key cannot contain '/': {key}")

    if key in (".", ".."):
        raise ValueError(f"Key cannot be {key!r}")

    return key


def validate_host(host: str) -> str:
    """Validate a host name.

    Args:
        host: The host name to validate

    Returns:
        Validated host name

    Raises:
        ValueError: If host name is invalid
    """
    if not host:
        raise ValueError("Host cannot be empty")

    if len(host) > 253:
        raise ValueError(f"Host name too long: {len(host)} chars")

    for char in SUSPICIOUS_HOST_CHARS:
        if char in host:
            raise ValueError(f"Host contains invalid characters: {host!r}")

    return host
