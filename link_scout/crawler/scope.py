# link_scout/crawler/scope.py
"""
Host scope rules: which hosts a crawl session may fetch from.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Pattern
from urllib.parse import urlparse

__all__ = ("ScopeRule", "resolve_scope")


def _bare_host(value: str) -> str:
    """Lower-case a host and drop a ``:port`` suffix (``Host`` headers may carry one)."""
    host = value.strip().lower()
    if host.startswith("["):
        return host.split("]", 1)[0] + "]"
    return host.rsplit(":", 1)[0] if host.count(":") == 1 else host


@dataclass(frozen=True, slots=True)
class ScopeRule:
    """
    Immutable host predicate for one session.

    Either an allow-list of exact hosts, or (``pattern`` set) a
    subdomain-inclusive match where the pattern alone decides.
    """

    allowed_hosts: FrozenSet[str] = frozenset()
    pattern: Optional[Pattern[str]] = None

    @property
    def includes_subdomains(self) -> bool:
        return self.pattern is not None

    def allows_host(self, host: str) -> bool:
        host = _bare_host(host)
        if not host:
            return False
        if self.pattern is not None:
            return self.pattern.fullmatch(host) is not None
        return host in self.allowed_hosts

    def allows(self, url: str) -> bool:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return False
        return self.allows_host(parsed.hostname or "")


def resolve_scope(
    seed_host: str,
    include_subdomains: bool = False,
    host_override: Optional[str] = None,
) -> ScopeRule:
    """Build the scope rule for a seed host."""
    base = _bare_host(seed_host)
    if include_subdomains:
        return ScopeRule(pattern=re.compile(r"(?:[^/?#@]+\.)?" + re.escape(base)))
    hosts = {base}
    if host_override:
        hosts.add(_bare_host(host_override))
    return ScopeRule(allowed_hosts=frozenset(hosts))
