"""Unit tests for agent identity resolution."""

import uuid

import pytest
from structlog.testing import capture_logs

from agent_control_gate.gate.identity import (
    DEFAULT_SOURCE_AGENT_ID,
    MAX_AGENT_NAME_LENGTH,
    IdentityResolver,
    derive_agent_uuid,
    is_agent_uuid,
    resolve_source_agent_id,
)

CONFIGURED_AGENT_ID = "123e4567-e89b-42d3-a456-426614174000"


class TestIsAgentUuid:
    """Tests for the UUID format check."""

    @pytest.mark.parametrize(
        "value",
        [
            CONFIGURED_AGENT_ID,
            CONFIGURED_AGENT_ID.upper(),
            "00000000-0000-1000-8000-000000000000",
            "ffffffff-ffff-5fff-bfff-ffffffffffff",
        ],
    )
    def test_accepts_valid_uuids(self, value):
        """Version 1-5 UUIDs with RFC 4122 variant are accepted."""
        assert is_agent_uuid(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-uuid",
            "",
            "123e4567e89b42d3a456426614174000",
            "123e4567-e89b-02d3-a456-426614174000",  # version 0
            "123e4567-e89b-62d3-a456-426614174000",  # version 6
            "123e4567-e89b-42d3-c456-426614174000",  # variant c
            "123e4567-e89b-42d3-a456-4266141740001",
            " 123e4567-e89b-42d3-a456-426614174000",
        ],
    )
    def test_rejects_invalid_values(self, value):
        """Anything else is rejected."""
        assert is_agent_uuid(value) is False


class TestDeriveAgentUuid:
    """Tests for deterministic UUID derivation."""

    def test_known_values(self):
        """Derivation is bit-for-bit stable across processes."""
        assert derive_agent_uuid("main") == "00fbe547-c658-5794-b627-3240aca6fe4e"
        assert derive_agent_uuid("default") == "5c8c0f9c-eb90-541b-a7e9-7acc17eed3a6"

    def test_repeated_calls_agree(self):
        """Same source id always yields the same identifier."""
        assert derive_agent_uuid("worker-7") == derive_agent_uuid("worker-7")

    def test_distinct_sources_differ(self):
        """Different source ids yield different identifiers."""
        assert derive_agent_uuid("main") != derive_agent_uuid("Main")

    def test_namespace_changes_result(self):
        """The namespace is part of the hashed seed."""
        assert derive_agent_uuid("main", namespace="other") != derive_agent_uuid("main")

    @pytest.mark.parametrize("source", ["main", "default", "ünïcødé", "a" * 1000, ""])
    def test_result_is_version_5_rfc_4122(self, source):
        """Version and variant nibbles are forced."""
        derived = derive_agent_uuid(source)
        assert is_agent_uuid(derived)
        parsed = uuid.UUID(derived)
        assert parsed.version == 5
        assert parsed.variant == uuid.RFC_4122


class TestResolveSourceAgentId:
    """Tests for host agent id normalization."""

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_falls_back_to_default(self, value):
        """Missing or unusable ids map to 'default'."""
        assert resolve_source_agent_id(value) == DEFAULT_SOURCE_AGENT_ID

    def test_trims_whitespace(self):
        """Valid ids are trimmed."""
        assert resolve_source_agent_id("  main ") == "main"


class TestIdentityResolver:
    """Tests for IdentityResolver."""

    def test_derived_identity(self):
        """Without a configured id each source gets its own identity."""
        resolver = IdentityResolver("openclaw-agent")
        identity = resolver.resolve("main")
        assert identity.source_agent_id == "main"
        assert identity.agent_uuid == derive_agent_uuid("main")
        assert identity.agent_name == "openclaw-agent:main"

    def test_configured_identity_is_shared(self):
        """A valid configured id is used verbatim for every source."""
        resolver = IdentityResolver("openclaw-agent", CONFIGURED_AGENT_ID)
        main = resolver.resolve("main")
        worker = resolver.resolve("worker")
        assert main.agent_uuid == worker.agent_uuid == CONFIGURED_AGENT_ID
        assert main.agent_name == worker.agent_name == "openclaw-agent"
        assert resolver.configured_agent_id == CONFIGURED_AGENT_ID

    def test_configured_identity_keeps_case(self):
        """Upper-case configured ids are not normalized."""
        resolver = IdentityResolver("bot", CONFIGURED_AGENT_ID.upper())
        assert resolver.resolve("main").agent_uuid == CONFIGURED_AGENT_ID.upper()

    def test_invalid_configured_id_warns_and_derives(self):
        """An invalid configured id is reported and never used."""
        with capture_logs() as logs:
            resolver = IdentityResolver("openclaw-agent", "agent-42")
        assert resolver.configured_agent_id is None
        assert resolver.resolve("main").agent_uuid == derive_agent_uuid("main")
        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["agent_id"] == "agent-42"

    def test_display_name_is_truncated(self):
        """Display names never exceed the maximum length."""
        long_name = "n" * 300
        derived = IdentityResolver(long_name).resolve("main")
        configured = IdentityResolver(long_name, CONFIGURED_AGENT_ID).resolve("main")
        assert len(derived.agent_name) == MAX_AGENT_NAME_LENGTH
        assert derived.agent_name == long_name[:MAX_AGENT_NAME_LENGTH]
        assert configured.agent_name == long_name[:MAX_AGENT_NAME_LENGTH]

    def test_suffix_is_truncated_not_dropped_for_short_base(self):
        """A long source id is cut at the maximum length."""
        identity = IdentityResolver("bot").resolve("s" * 300)
        assert len(identity.agent_name) == MAX_AGENT_NAME_LENGTH
        assert identity.agent_name.startswith("bot:sss")
