"""
Request helpers for the login routes.

This module handles:
- The browser check on the User-Agent header
- Resolving the client's network origin
- Formatting provider errors into response strings
"""

from typing import Iterable, Optional

from fastapi import Request


def is_browser_client(user_agent: Optional[str], signatures: Iterable[str]) -> bool:
    """
    Check whether a User-Agent carries one of the browser signatures.

    This is a substring match and trivially spoofable; it filters out
    scripted clients, nothing more.

    Example:
        >>> is_browser_client("Mozilla/5.0 (X11; Linux x86_64)", ["Mozilla", "Chrome"])
        True
        >>> is_browser_client("curl/8.4.0", ["Mozilla", "Chrome"])
        False
    """
    if not user_agent:
        return False
    return any(sig in user_agent for sig in signatures)


def client_origin(request: Request) -> str:
    """
    Return the client address for a request.

    The first X-Forwarded-For hop wins when present, otherwise the socket peer.
    The header is taken on trust, so the value is as spoofable as the
    User-Agent check.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client:
        return request.client.host
    return ""


def format_provider_error(prefix: str, exc: Exception) -> str:
    """Build the response string for a failed provider call."""
    message = getattr(exc, "message", None) or str(exc)
    return f"{prefix}: {message}"
