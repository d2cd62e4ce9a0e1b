"""
Exception types for jXSS.

Everything except ConfigError is recoverable and is handled per target or
per candidate by the scanner.
"""


class JXSSError(Exception):
    """Base class for jXSS errors."""


class FetchError(JXSSError):
    """A request failed at the network level (DNS, connect, TLS, timeout)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"fetch {url} failed: {reason}")


class ParseError(JXSSError):
    """A URL could not be parsed while building an injected request."""


class PatternError(JXSSError):
    """A detection pattern failed to compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid pattern {pattern!r}: {reason}")


class RateLimitError(JXSSError):
    """Waiting for a rate token was cancelled."""


class ConfigError(JXSSError):
    """Configuration or target list could not be loaded."""
