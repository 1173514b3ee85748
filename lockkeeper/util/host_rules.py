"""Host rules — per-host credentials for private package registries.

Rules are passed explicitly to whoever needs them; there is no
process-wide rule store.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

_ENV_HOST_RULES = "LOCKKEEPER_HOST_RULES"


class HostRule(BaseModel):
    """One credential rule.

    ``match_host`` is either a URL prefix (``https://hex.pm/api/repos/acme/``)
    or a bare host name (``hex.pm``) that also matches its subdomains.
    A rule without ``match_host`` applies to every host.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    match_host: str | None = None
    host_type: str | None = None
    token: str | None = None
    username: str | None = None
    password: str | None = None

    @field_validator("match_host", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    @property
    def specificity(self) -> int:
        if not self.match_host:
            return 0
        if "://" in self.match_host:
            return 2
        return 1

    def matches(self, url: str, host_type: str | None = None) -> bool:
        if self.host_type and host_type and self.host_type != host_type:
            return False
        if not self.match_host:
            return True
        if "://" in self.match_host:
            return url.startswith(self.match_host)
        hostname = urlparse(url).hostname or ""
        return hostname == self.match_host or hostname.endswith("." + self.match_host)


@dataclass(frozen=True)
class HostRuleSearchResult:
    token: str | None = None
    username: str | None = None
    password: str | None = None


_rules_adapter = TypeAdapter(list[HostRule])


class HostRules:
    """Ordered collection of :class:`HostRule` with lookup by URL."""

    def __init__(self, rules: Iterable[HostRule] = ()) -> None:
        self._rules: list[HostRule] = list(rules)

    def add(self, rule: HostRule) -> None:
        self._rules.append(rule)

    def get_all(self) -> list[HostRule]:
        return list(self._rules)

    def find(self, *, url: str, host_type: str | None = None) -> HostRuleSearchResult:
        """Merge every matching rule; more specific rules win, then later ones."""
        matching = [r for r in self._rules if r.matches(url, host_type)]
        # sorted() is stable, so declaration order breaks specificity ties.
        merged: dict[str, str] = {}
        for rule in sorted(matching, key=lambda r: r.specificity):
            for key in ("token", "username", "password"):
                value = getattr(rule, key)
                if value is not None:
                    merged[key] = value
        return HostRuleSearchResult(**merged)

    @classmethod
    def from_json(cls, raw: str) -> HostRules:
        """Load rules from a JSON list (``matchHost`` or ``match_host`` keys)."""
        try:
            rules = _rules_adapter.validate_json(raw)
        except ValidationError as exc:
            raise ValueError(f"invalid host rules: {exc}") from exc
        return cls(rules)

    @classmethod
    def from_env(cls) -> HostRules:
        raw = os.environ.get(_ENV_HOST_RULES)
        if not raw:
            return cls()
        return cls.from_json(raw)
