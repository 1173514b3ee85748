"""Private registry authentication — which organizations need a login, with which token."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from lockkeeper.engines.artifacts.models import OrganizationCredential
from lockkeeper.engines.artifacts.registry import ArtifactEcosystem
from lockkeeper.engines.extraction.models import Dependency
from lockkeeper.util.host_rules import HostRules

log = structlog.get_logger("lockkeeper.engine")


def collect_organizations(
    host_rules: HostRules, updated_deps: Iterable[Dependency], ecosystem: ArtifactEcosystem
) -> set[str]:
    """Organizations named by registry host rules or by namespaced package names."""
    organizations: set[str] = set()
    if not ecosystem.supports_organizations:
        return organizations

    for rule in host_rules.get_all():
        if not rule.match_host:
            continue
        organization = ecosystem.organization_from_host(rule.match_host)
        if organization:
            organizations.add(organization)

    for dep in updated_deps:
        if not dep.package_name:
            continue
        organization = ecosystem.organization_from_package(dep.package_name)
        if organization:
            organizations.add(organization)

    return organizations


def find_credentials(
    host_rules: HostRules, organizations: Iterable[str], ecosystem: ArtifactEcosystem
) -> list[OrganizationCredential]:
    credentials: list[OrganizationCredential] = []
    for organization in organizations:
        url = ecosystem.registry_url(organization)
        token = host_rules.find(url=url, host_type=ecosystem.host_type).token
        if not token:
            continue
        credentials.append(OrganizationCredential(organization=organization, token=token))
    return credentials


def build_auth_commands(
    host_rules: HostRules, updated_deps: Iterable[Dependency], ecosystem: ArtifactEcosystem
) -> list[str]:
    """One login command per organization that has a stored token."""
    organizations = collect_organizations(host_rules, updated_deps, ecosystem)
    commands: list[str] = []
    for credential in find_credentials(host_rules, organizations, ecosystem):
        log.debug(
            "artifacts.registry_auth",
            ecosystem=ecosystem.name,
            organization=credential.organization,
        )
        commands.append(ecosystem.auth_command(credential.organization, credential.token))
    return commands
