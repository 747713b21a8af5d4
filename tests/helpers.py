"""Helpers shared by the test suites."""

from unittest.mock import Mock
from urllib.parse import parse_qs, urlparse

TEST_SECRET = "test-secret-key-0123456789-abcdefghijklmnopqrstuvwxyz"
VERIFICATION_URL = "http://localhost:8000/verify"


def link_params(link: str) -> tuple[str, str]:
    """Extract (user id, plaintext token) from a verification link."""
    query = parse_qs(urlparse(link).query)
    return query["id"][0], query["token"][0]


def last_link(sender: Mock) -> str:
    """Link passed to the most recent send_verification call."""
    return sender.send_verification.call_args[0][1]
