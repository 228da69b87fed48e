"""
Core utility functions.
"""

from typing import cast, overload

from django.http import HttpRequest


@overload
def get_client_ip(request: HttpRequest) -> str | None: ...


@overload
def get_client_ip(request: HttpRequest, default: str) -> str: ...


def get_client_ip(request: HttpRequest, default: str | None = None) -> str | None:
    """
    Extract client IP from X-Forwarded-For or REMOTE_ADDR.

    With a proxy chain the first X-Forwarded-For entry is the original client.
    """
    x_forwarded_for: str | None = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    remote_addr = cast(str | None, request.META.get("REMOTE_ADDR"))
    if remote_addr is not None:
        return remote_addr
    return default


def split_csv(value: str | None) -> list[str]:
    """'a, b,,c' -> ['a', 'b', 'c']; None or blank -> []."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def sequential_key(prefix: str, number: int, width: int = 3) -> str:
    """Human-readable record key, e.g. sequential_key("PR-", 7) -> "PR-007"."""
    return f"{prefix}{number:0{width}d}"
