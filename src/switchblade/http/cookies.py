"""Cookie parsing and Set-Cookie serialization.

Consolidates the read side (``parse_cookies``, used by the request
context) and the write side (``SetCookie``, used by the response
builder) in one module.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime

# Sent when a cookie is cleared
EXPIRED = "Thu, 01 Jan 1970 00:00:00 GMT"


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" in pair:
            key, _, value = pair.partition("=")
            cookies[key.strip()] = value.strip()
    return cookies


def _same_site_value(same_site: str | bool | None) -> str | None:
    if same_site is True:
        return "Lax"
    if not same_site:
        return None
    return same_site.capitalize()


def _http_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive produced by the response builder.

    Attributes are only emitted when set; a bare ``SetCookie("a", "1")``
    serializes to ``a=1``.
    """

    name: str
    value: str
    path: str | None = None
    domain: str | None = None
    expires: datetime | None = None
    max_age: int | None = None
    secure: bool = False
    http_only: bool = False
    same_site: str | bool | None = None
    signed: bool = False

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.expires is not None:
            parts.append(f"Expires={_http_date(self.expires)}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.secure:
            parts.append("Secure")
        if self.http_only:
            parts.append("HttpOnly")
        same_site = _same_site_value(self.same_site)
        if same_site:
            parts.append(f"SameSite={same_site}")
        if self.signed:
            parts.append("Signed")
        return "; ".join(parts)

    def expired(self) -> "SetCookie":
        """Return a directive that tells the client to drop this cookie."""
        return SetCookie(
            name=self.name,
            value="",
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            http_only=self.http_only,
            same_site=self.same_site,
        )

    def to_clear_header_value(self) -> str:
        """Serialize as a clearing directive (empty value, epoch expiry)."""
        cleared = self.expired()
        head, _, rest = cleared.to_header_value().partition("; ")
        parts = [head, f"Expires={EXPIRED}"]
        if rest:
            parts.append(rest)
        return "; ".join(parts)
