"""Normalization of raw resource keys into canonical WebFinger subjects."""

from finger.resolve.errors import InvalidSubject
from finger.resolve.uri import is_absolute_uri, is_email_address

ACCT_PREFIX = "acct:"


def normalize_subject(key: str) -> str:
    """Normalize a raw resource key into a canonical subject.

    A leading `acct:` is stripped before classification. Email addresses become
    `acct:<address>` whether or not the prefix was present, and absolute URIs are kept as they
    are. Email interpretation wins when both would apply.

    Args:
        key: The resource key as written in the definition file

    Returns:
        str: The canonical subject

    Raises:
        InvalidSubject: If the key is neither an email address nor an absolute URI
    """
    subject = key
    if len(key) > len(ACCT_PREFIX) and key.startswith(ACCT_PREFIX):
        subject = key[len(ACCT_PREFIX):]

    if is_email_address(subject):
        return f"{ACCT_PREFIX}{subject}"

    if is_absolute_uri(subject):
        return subject

    raise InvalidSubject(key)
