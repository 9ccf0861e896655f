# tests/services/test_domain.py
"""Tests for Origin/Referer matching of domain-restricted keys."""

from __future__ import annotations

import pytest

from gatecha.services.domain import extract_hostname, is_origin_allowed


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://example.com", "example.com"),
        ("http://Example.COM:8080/path?q=1", "example.com"),
        ("example.com/login", "example.com"),
        ("example.com:443", "example.com"),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_hostname(value: str | None, expected: str) -> None:
    assert extract_hostname(value) == expected


def test_unrestricted_key_allows_everything() -> None:
    assert is_origin_allowed("", "https://evil.com", None) is True


def test_missing_origin_skips_check() -> None:
    assert is_origin_allowed("example.com", None, None) is True
    assert is_origin_allowed("example.com", None, "https://evil.com/") is True


def test_matching_origin_is_allowed() -> None:
    assert is_origin_allowed("example.com", "https://EXAMPLE.com:8443", None) is True


def test_matching_referer_is_enough() -> None:
    assert is_origin_allowed("example.com", "null", "https://example.com/form") is True


def test_foreign_origin_is_rejected() -> None:
    assert is_origin_allowed("example.com", "https://evil.com", None) is False
    assert is_origin_allowed("example.com", "https://evil.com", "https://evil.com/x") is False


def test_subdomains_do_not_match() -> None:
    assert is_origin_allowed("example.com", "https://www.example.com", None) is False
