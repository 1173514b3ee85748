"""Elixir Mix / Hex: ``mix.exs`` manifests with a ``mix.lock`` lock file."""

from __future__ import annotations

import re

from lockkeeper.engines.artifacts.registry import ArtifactEcosystem, register_artifact_ecosystem

HEX_REPO_URL = "https://hex.pm/"

MIX = ArtifactEcosystem(
    name="mix",
    lock_file_name="mix.lock",
    maintenance_command="mix deps.get",
    update_command="mix deps.update",
    host_type="hex",
    registry_org_url_pattern=re.compile(
        r"^https://hex\.pm/api/repos/(?P<organization>[a-z0-9_]+)/$"
    ),
    registry_org_url_template=HEX_REPO_URL + "api/repos/{organization}/",
    org_separator=":",
    auth_command_template="mix hex.organization auth {organization} --key {token}",
    # Keeps installed archives (hex, rebar) out of the user's home directory.
    cache_env={"MIX_ARCHIVES": "mix_archives"},
    # Erlang is pinned to OTP 26 unless the run config says otherwise.
    tool_defaults={"erlang": "^26", "elixir": None},
)

register_artifact_ecosystem(MIX)
