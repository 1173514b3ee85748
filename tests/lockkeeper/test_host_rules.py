"""Tests for host rule matching and loading."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from lockkeeper.util.host_rules import HostRule, HostRules, HostRuleSearchResult


class TestHostRuleMatching:
    def test_url_prefix(self):
        rule = HostRule(match_host="https://hex.pm/api/repos/acme/")
        assert rule.matches("https://hex.pm/api/repos/acme/")
        assert rule.matches("https://hex.pm/api/repos/acme/packages/x")
        assert not rule.matches("https://hex.pm/api/repos/other/")

    def test_bare_host_and_subdomains(self):
        rule = HostRule(match_host="hex.pm")
        assert rule.matches("https://hex.pm/api/repos/acme/")
        assert rule.matches("https://repo.hex.pm/tarballs/x")
        assert not rule.matches("https://nothex.pm/")

    def test_rule_without_host_matches_everything(self):
        assert HostRule(token="t").matches("https://anything.example/")

    def test_host_type_filter(self):
        rule = HostRule(match_host="hex.pm", host_type="hex")
        assert rule.matches("https://hex.pm/", host_type="hex")
        assert not rule.matches("https://hex.pm/", host_type="npm")
        assert rule.matches("https://hex.pm/")

    def test_match_host_whitespace_stripped(self):
        assert HostRule(match_host="  hex.pm ").match_host == "hex.pm"


class TestHostRulesFind:
    def test_no_match(self):
        rules = HostRules([HostRule(match_host="github.com", token="gh")])
        assert rules.find(url="https://hex.pm/") == HostRuleSearchResult()

    def test_specific_rule_wins(self):
        rules = HostRules(
            [
                HostRule(match_host="https://hex.pm/api/repos/acme/", token="org"),
                HostRule(match_host="hex.pm", token="host"),
                HostRule(token="global"),
            ]
        )
        assert rules.find(url="https://hex.pm/api/repos/acme/").token == "org"
        assert rules.find(url="https://hex.pm/api/repos/beta/").token == "host"
        assert rules.find(url="https://example.com/").token == "global"

    def test_later_rule_wins_on_tie(self):
        rules = HostRules(
            [HostRule(match_host="hex.pm", token="first"), HostRule(match_host="hex.pm", token="second")]
        )
        assert rules.find(url="https://hex.pm/").token == "second"

    def test_fields_merged(self):
        rules = HostRules(
            [
                HostRule(match_host="hex.pm", username="bot"),
                HostRule(match_host="https://hex.pm/api/", token="tok"),
            ]
        )
        assert rules.find(url="https://hex.pm/api/x") == HostRuleSearchResult(
            token="tok", username="bot"
        )

    def test_get_all_returns_copy(self):
        rules = HostRules()
        rules.add(HostRule(match_host="hex.pm"))
        rules.get_all().clear()
        assert len(rules.get_all()) == 1


class TestHostRulesLoading:
    def test_from_json_camel_and_snake_case(self):
        raw = json.dumps(
            [
                {"matchHost": "https://hex.pm/api/repos/acme/", "token": "a"},
                {"match_host": "hex.pm", "host_type": "hex", "token": "b"},
            ]
        )
        rules = HostRules.from_json(raw).get_all()
        assert rules[0].match_host == "https://hex.pm/api/repos/acme/"
        assert rules[1].host_type == "hex"

    def test_from_json_invalid(self):
        with pytest.raises(ValueError, match="invalid host rules"):
            HostRules.from_json('{"not": "a list"}')

    def test_from_env(self):
        raw = json.dumps([{"matchHost": "hex.pm", "token": "env-token"}])
        with patch.dict(os.environ, {"LOCKKEEPER_HOST_RULES": raw}):
            rules = HostRules.from_env()
        assert rules.find(url="https://hex.pm/").token == "env-token"

    def test_from_env_unset(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOCKKEEPER_HOST_RULES", None)
            assert HostRules.from_env().get_all() == []
