"""
Tests for backoff_compose_retry factory functions and presets.
"""

import httpx
import pytest

from backoff_compose_retry.factory import create_retry_client
from backoff_compose_retry.presets import DEFAULT_PRESET, RETRY_PRESETS
from backoff_compose_retry.transport import RetryTransport
from backoff_retry import RetryConfig, resolve_config


class TestCreateRetryClient:
    """Tests for create_retry_client function."""

    @pytest.mark.asyncio
    async def test_creates_async_client_with_retry_transport(self):
        """Should build an AsyncClient whose transport retries."""
        client = create_retry_client(
            config=RetryConfig(retries=4),
            base_url="https://api.example.com",
        )
        try:
            assert isinstance(client, httpx.AsyncClient)
            assert isinstance(client._transport, RetryTransport)
            assert client._transport.config.retries == 4
            assert client.base_url.host == "api.example.com"
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_uses_the_default_preset_without_config(self):
        """Should resolve through RETRY_PRESETS when no config is given."""
        client = create_retry_client()
        try:
            expected = resolve_config(RETRY_PRESETS[DEFAULT_PRESET])
            config = client._transport.config
            assert config.retries == expected.retries
            assert config.factor == expected.factor
            assert config.max_interval_ms == expected.max_interval_ms
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_uses_the_named_preset(self):
        """Should pick the preset named by the caller."""
        client = create_retry_client(preset="quick")
        try:
            config = client._transport.config
            assert config.retries == 2
            assert config.min_interval_ms == 200
            assert config.max_interval_ms == 2_000
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_config_replaces_the_preset(self):
        """Should use an explicit config instead of the preset."""
        client = create_retry_client(preset="gentle", config={"retries": 1})
        try:
            assert client._transport.config.retries == 1
            assert client._transport.config.factor == 1
        finally:
            await client.aclose()

    def test_rejects_unknown_presets(self):
        """Should raise ValueError for a preset that does not exist."""
        with pytest.raises(ValueError, match="Unknown retry preset 'turbo'"):
            create_retry_client(preset="turbo")


class TestRetryPresets:
    """Tests for RETRY_PRESETS."""

    @pytest.mark.parametrize("name", ["default", "aggressive", "quick", "gentle"])
    def test_presets_are_valid(self, name):
        """Should resolve every preset without errors."""
        resolved = resolve_config(RETRY_PRESETS[name])
        assert resolved.max_interval_ms >= resolved.min_interval_ms
        assert resolved.factor > 1

    def test_default_preset_bounds_total_wait(self):
        """Should keep the default preset's total backoff well under a minute."""
        preset = RETRY_PRESETS[DEFAULT_PRESET]
        waits = [
            min(preset.factor ** (n - 1) * preset.min_interval_ms, preset.max_interval_ms)
            for n in range(1, preset.retries + 1)
        ]
        assert sum(waits) == 7000
