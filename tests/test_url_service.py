"""
Tests for the URL shortening service: mapping creation, expiry arithmetic,
collision retries and failure paths.
"""

import asyncio

import pytest

from conftest import START_TIME, ScriptedGenerator, UnavailableStore
from shortener.core.exceptions import (
    CodeGenerationExhaustedError,
    StorageError,
    ValidationError,
)
from shortener.services.url_service import ShortenService, build_short_url


class TestBuildShortURL:

    def test_joins_base_and_code(self):
        assert build_short_url("https://sho.rt", "abcd1234") == "https://sho.rt/abcd1234"

    def test_does_not_double_trailing_slash(self):
        assert build_short_url("https://sho.rt/", "abcd1234") == "https://sho.rt/abcd1234"


class TestShorten:

    @pytest.mark.asyncio
    async def test_scenario_url_with_ttl(self, memory_store, settings, clock):
        """{"url": "example.com", "ttl": 10} -> https://example.com, expires 600s later."""
        service = ShortenService(memory_store, settings, clock=clock)

        result = await service.shorten(b'{"url": "example.com", "ttl": 10}')

        stored = await memory_store.get(result.mapping.short_code)
        assert stored.original_url == "https://example.com"
        assert stored.created_at == START_TIME
        assert stored.expires_at == stored.created_at + 600
        assert stored.click_count == 0
        assert result.short_url == f"https://sho.rt/{stored.short_code}"

    @pytest.mark.asyncio
    async def test_bare_string_kept_as_given(self, memory_store, settings, clock):
        service = ShortenService(memory_store, settings, clock=clock)

        result = await service.shorten('"https://already-has-scheme.test"')

        stored = await memory_store.get(result.mapping.short_code)
        assert stored.original_url == "https://already-has-scheme.test"
        assert stored.expires_at == START_TIME + 60

    @pytest.mark.asyncio
    async def test_malformed_ttl_still_succeeds_with_default(self, memory_store, settings, clock):
        service = ShortenService(memory_store, settings, clock=clock)

        result = await service.shorten({"url": "example.com", "ttl": "soon"})

        assert result.mapping.expires_at == START_TIME + 60

    @pytest.mark.asyncio
    async def test_out_of_range_ttl_is_clamped(self, memory_store, settings, clock):
        service = ShortenService(memory_store, settings, clock=clock)

        too_long = await service.shorten({"url": "example.com", "ttl": 10**7})
        too_short = await service.shorten({"url": "example.com", "ttl": -5})

        assert too_long.mapping.expires_at == START_TIME + 525600 * 60
        assert too_short.mapping.expires_at == START_TIME + 60

    @pytest.mark.asyncio
    async def test_codes_follow_configured_length(self, memory_store, settings):
        service = ShortenService(memory_store, settings)

        result = await service.shorten({"url": "example.com"})

        assert len(result.mapping.short_code) == 8
        assert result.mapping.short_code.isalnum()

    @pytest.mark.asyncio
    async def test_validation_error_does_not_touch_store(self, memory_store, settings):
        service = ShortenService(memory_store, settings)

        with pytest.raises(ValidationError):
            await service.shorten({"url": "   "})

        assert memory_store.mappings == {}


class TestCollisions:

    @pytest.mark.asyncio
    async def test_collision_is_retried_with_new_code(self, memory_store, settings, clock):
        await ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["taken001"]), clock=clock
        ).shorten({"url": "first.test"})

        service = ShortenService(
            memory_store, settings,
            generator=ScriptedGenerator(["taken001", "fresh002"]),
            clock=clock,
        )
        result = await service.shorten({"url": "second.test"})

        assert result.mapping.short_code == "fresh002"
        assert (await memory_store.get("taken001")).original_url == "https://first.test"
        assert (await memory_store.get("fresh002")).original_url == "https://second.test"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, memory_store, settings):
        await ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["taken001"])
        ).shorten({"url": "first.test"})

        service = ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["taken001"] * 10)
        )
        with pytest.raises(CodeGenerationExhaustedError) as exc_info:
            await service.shorten({"url": "second.test"})

        assert exc_info.value.attempts == settings.MAX_CODE_ATTEMPTS
        assert list(memory_store.mappings) == ["taken001"]

    @pytest.mark.asyncio
    async def test_concurrent_creations_on_same_code(self, memory_store, settings, clock):
        """Two requests drawing the same code: exactly one gets it, the other retries."""
        first = ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["samecode", "other001"]), clock=clock
        )
        second = ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["samecode", "other002"]), clock=clock
        )

        results = await asyncio.gather(
            first.shorten({"url": "one.test"}),
            second.shorten({"url": "two.test"}),
        )

        codes = sorted(result.mapping.short_code for result in results)
        assert "samecode" in codes
        assert len(set(codes)) == 2
        assert len(memory_store.mappings) == 2

    @pytest.mark.asyncio
    async def test_concurrent_creations_on_sql_store(self, sql_store, settings, clock):
        first = ShortenService(
            sql_store, settings, generator=ScriptedGenerator(["samecode", "other001"]), clock=clock
        )
        second = ShortenService(
            sql_store, settings, generator=ScriptedGenerator(["samecode", "other002"]), clock=clock
        )

        results = await asyncio.gather(
            first.shorten({"url": "one.test"}),
            second.shorten({"url": "two.test"}),
        )

        codes = {result.mapping.short_code for result in results}
        assert "samecode" in codes
        assert len(codes) == 2
        winner = await sql_store.get("samecode")
        assert winner.original_url in {"https://one.test", "https://two.test"}


class TestStorageFailure:

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self, settings):
        service = ShortenService(UnavailableStore(), settings)

        with pytest.raises(StorageError):
            await service.shorten({"url": "example.com"})
