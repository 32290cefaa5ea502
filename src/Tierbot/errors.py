# src/Tierbot/errors.py
from __future__ import annotations


class TierbotError(Exception):
    """Base class for every error raised on purpose by Tierbot."""


class ConfigurationError(TierbotError):
    """Required secrets are missing; every request fails with 500 until fixed."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("missing configuration: " + ", ".join(self.missing))


class AuthenticationError(TierbotError):
    """The request is not signed by Discord. Never carries the reason outward."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class ValidationError(TierbotError):
    """A command option failed to decode. Rendered as an ephemeral chat reply."""

    def __init__(self, field: str, message: str, *, kind: str = "invalid"):
        self.field = field
        self.kind = kind  # "missing" | "invalid"
        super().__init__(message)


class UpstreamError(TierbotError):
    """The store or the Discord API failed."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ProtocolError(TierbotError):
    """The body is not a usable interaction payload."""
