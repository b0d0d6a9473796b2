"""Tests for input validation."""

import pytest

from clustrz.utils.validation import validate_host, validate_key


@pytest.mark.parametrize("key", ["last-seen-oome", "deploy.version", "a b"])
def test_valid_keys(key: str) -> None:
    assert validate_key(key) == key


@pytest.mark.parametrize("key", ["", ".", "..", "../etc/passwd", "a/b", "a\x00b"])
def test_invalid_keys(key: str) -> None:
    with pytest.raises(ValueError):
        validate_key(key)


def test_valid_host() -> None:
    assert validate_host("vot013.example.com") == "vot013.example.com"


@pytest.mark.parametrize("host", ["", "a;b", "host name", "x" * 254])
def test_invalid_hosts(host: str) -> None:
    with pytest.raises(ValueError):
        validate_host(host)
