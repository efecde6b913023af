"""Email domain restriction for workspace sign-in."""

from typing import List, Optional


def parse_allow_list(allow_list: Optional[str]) -> List[str]:
    """Split a comma-separated domain allow-list, dropping blanks."""
    if not allow_list:
        return []
    return [entry.strip() for entry in allow_list.split(",") if entry and entry.strip()]


def email_domain(email: Optional[str]) -> str:
    """Everything after the last '@' (the whole string when there is none)."""
    if not email:
        return ""
    return email[email.rfind("@") + 1:]


def is_valid_domain(email: Optional[str], allow_list: Optional[str]) -> bool:
    """
    Check an email against an organization's domain allow-list.

    An empty allow-list accepts every address. Matching is exact and
    case-sensitive against the trimmed entries.

    >>> is_valid_domain("jo@acme.com", "acme.com, acme.io")
    True
    >>> is_valid_domain("jo@other.com", "acme.com")
    False
    """
    if not email:
        return False

    domain = email_domain(email)

    if not allow_list:
        return True
    if not domain:
        return False

    return domain in parse_allow_list(allow_list)
