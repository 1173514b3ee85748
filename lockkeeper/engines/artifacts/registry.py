"""Artifact ecosystem registry — lock file tooling per ecosystem."""

from __future__ import annotations

import re
import shlex
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from lockkeeper.core.config import RunConfig
from lockkeeper.exceptions import RegistryNotSupportedError, UnknownEcosystemError
from lockkeeper.util.exec import ToolConstraint

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ArtifactEcosystem:
    """Everything the artifact updater needs to know about one ecosystem's tooling.

    ``registry_org_url_pattern`` must expose an ``organization`` named group;
    ``registry_org_url_template`` and ``auth_command_template`` are
    ``str.format`` templates over ``organization`` (and ``token``).
    ``cache_env`` maps an environment variable to a cache directory name.
    ``tool_defaults`` lists the toolchains the commands need, in order, with
    the constraint used when the run config gives none.
    """

    name: str
    lock_file_name: str
    maintenance_command: str
    update_command: str
    host_type: str | None = None
    registry_org_url_pattern: re.Pattern[str] | None = None
    registry_org_url_template: str | None = None
    org_separator: str | None = None
    auth_command_template: str | None = None
    cache_env: Mapping[str, str] = field(default_factory=dict)
    tool_defaults: Mapping[str, str | None] = field(default_factory=dict)

    @property
    def supports_organizations(self) -> bool:
        return (
            self.registry_org_url_pattern is not None
            and self.registry_org_url_template is not None
            and self.auth_command_template is not None
        )

    def organization_from_host(self, match_host: str) -> str | None:
        if self.registry_org_url_pattern is None:
            return None
        m = self.registry_org_url_pattern.fullmatch(match_host)
        return m.group("organization") if m else None

    def organization_from_package(self, package_name: str) -> str | None:
        if not self.org_separator or self.org_separator not in package_name:
            return None
        organization = package_name.split(self.org_separator, 1)[0]
        return organization or None

    def registry_url(self, organization: str) -> str:
        if self.registry_org_url_template is None:
            raise RegistryNotSupportedError(f"{self.name} has no private registry support")
        return self.registry_org_url_template.format(organization=organization)

    def auth_command(self, organization: str, token: str) -> str:
        if self.auth_command_template is None:
            raise RegistryNotSupportedError(f"{self.name} has no registry auth command")
        return self.auth_command_template.format(
            organization=shlex.quote(organization), token=shlex.quote(token)
        )

    def update_command_for(self, dep_names: Iterable[str]) -> str:
        return " ".join([self.update_command, *(shlex.quote(name) for name in dep_names)])

    def tool_constraints(self, config: RunConfig) -> list[ToolConstraint]:
        return [
            ToolConstraint(tool_name=tool, constraint=config.constraints.get(tool, default))
            for tool, default in self.tool_defaults.items()
        ]


ARTIFACT_REGISTRY: dict[str, ArtifactEcosystem] = {}


def register_artifact_ecosystem(ecosystem: ArtifactEcosystem) -> None:
    """Register an ecosystem's artifact tooling by name."""
    ARTIFACT_REGISTRY[ecosystem.name] = ecosystem
    log.debug("artifacts.ecosystem_registered", ecosystem=ecosystem.name)


def get_artifact_ecosystem(name: str) -> ArtifactEcosystem:
    try:
        return ARTIFACT_REGISTRY[name]
    except KeyError:
        raise UnknownEcosystemError(f"no artifact ecosystem registered for {name!r}") from None
