"""link_scout.errors: Исключения LinkScout.

Fatal errors (configuration, archive) abort the run before or during
crawling; seed and fetch errors are recoverable and only logged.
"""


class LinkScoutError(Exception):
    """Base class for all LinkScout errors."""


class ConfigurationError(LinkScoutError, ValueError):
    """Raised for malformed options or a missing input stream."""


class SeedError(LinkScoutError):
    """Raised when a seed URL cannot be turned into a crawlable absolute URL."""

    def __init__(self, seed: str, reason: str = "invalid URL"):
        self.seed = seed
        self.reason = reason
        super().__init__(f"Seed '{seed}': {reason}")


class FetchError(LinkScoutError):
    """Raised when a single fetch fails (network error or non-2xx status)."""

    def __init__(
        self,
        url: str,
        original: Exception | None = None,
        status: int | None = None,
        reason: str | None = None,
    ):
        self.url = url
        self.original = original
        self.status = status
        if status is not None:
            detail = f"HTTP {status}"
        elif reason is not None:
            detail = reason
        else:
            detail = str(original)
        super().__init__(f"Fetch failed for {url}: {detail}")


class ArchiveError(LinkScoutError):
    """Raised when the web archive lookup fails while the feature is enabled."""

    def __init__(self, hostname: str, original: Exception):
        self.hostname = hostname
        self.original = original
        super().__init__(f"Archive lookup failed for {hostname}: {original}")


__all__ = ["LinkScoutError", "ConfigurationError", "SeedError", "FetchError", "ArchiveError"]
