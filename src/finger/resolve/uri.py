"""Syntactic checks for URIs and email addresses.

These checks never touch the network: they answer whether a string is well formed, not
whether it points anywhere.
"""

import re
from email import errors as email_errors
from email.headerregistry import Address
from urllib.parse import urlsplit

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")

# Whitespace and ASCII control characters are never valid inside a URI.
INVALID_URI_CHARS_RE = re.compile(r"[\s\x00-\x1f\x7f]")


def _splits(value: str) -> bool:
    try:
        urlsplit(value)
    except ValueError:
        # Raised for malformed netlocs such as an unterminated IPv6 literal.
        return False
    return True


def is_absolute_uri(value: str) -> bool:
    """Return True if `value` is an absolute URI: a scheme followed by a non-empty remainder.

    >>> is_absolute_uri("https://example.com/user")
    True
    >>> is_absolute_uri("acct:alice@example.com")
    True
    >>> is_absolute_uri("Alice Doe")
    False
    """
    match = SCHEME_RE.match(value)
    if match is None or match.end() == len(value):
        return False
    if INVALID_URI_CHARS_RE.search(value):
        return False
    return _splits(value)


def is_request_uri(value: str) -> bool:
    """Return True if `value` is an absolute URI or an absolute path.

    This is the rule used to decide whether an attribute value is a link.
    """
    if value.startswith("/"):
        return INVALID_URI_CHARS_RE.search(value) is None and _splits(value)
    return is_absolute_uri(value)


def is_email_address(value: str) -> bool:
    """Return True if `value` is a bare RFC 5322 addr-spec (`local-part@domain`).

    Display names (`Alice <alice@example.com>`) and trailing text are rejected.
    """
    if not value or value != value.strip():
        return False
    try:
        Address(addr_spec=value)
    # The header parser indexes past the end of an empty domain ("alice@").
    except (ValueError, IndexError, email_errors.HeaderParseError):
        return False
    return True
