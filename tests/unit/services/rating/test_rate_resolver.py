"""Unit tests for hierarchical rate resolution."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from quote_engine.models.rating import DEFAULT_CODE, ProductType, RateTableEntry
from quote_engine.services.rating import InMemoryRateTable, RateLookup, RateResolver


class RecordingLookup:
    """Rate lookup that records every key it is asked for."""

    def __init__(self, hits: dict[tuple[str, str], RateTableEntry] | None = None):
        self.hits = hits or {}
        self.calls: list[tuple[str, str, ProductType]] = []

    async def get_rate(self, state_code, classification_code, product_type, as_of=None):
        self.calls.append((state_code, classification_code, product_type))
        return self.hits.get((state_code, classification_code))


class BlockingLookup:
    """Rate lookup that never answers until cancelled."""

    def __init__(self):
        self.started = asyncio.Event()

    async def get_rate(self, state_code, classification_code, product_type, as_of=None):
        self.started.set()
        await asyncio.Event().wait()


def _entry(state: str, code: str, rate: str = "1.00") -> RateTableEntry:
    return RateTableEntry(
        state_code=state,
        classification_code=code,
        product_type=ProductType.WORKERS_COMPENSATION,
        base_rate=Decimal(rate),
        min_premium=Decimal("100"),
        state_tax_rate=Decimal("0.02"),
        effective_date=date(2024, 1, 1),
    )


class TestRateResolverFallback:
    """Test the three-level fallback chain."""

    @pytest.mark.asyncio
    async def test_exact_match(self, resolver):
        """Test that an exact state/class/product hit is returned."""
        entry = await resolver.resolve("CA", "8810", ProductType.WORKERS_COMPENSATION)

        assert entry.state_code == "CA"
        assert entry.classification_code == "8810"
        assert entry.base_rate == Decimal("2.50")
        assert entry.min_premium == Decimal("1000")
        assert not entry.is_synthetic

    @pytest.mark.asyncio
    async def test_state_default_classification(self, resolver):
        """Test fallback to the state's DEFAULT classification."""
        entry = await resolver.resolve("CA", "9999", ProductType.WORKERS_COMPENSATION)

        assert entry.state_code == "CA"
        assert entry.classification_code == DEFAULT_CODE
        assert entry.base_rate == Decimal("2.00")

    @pytest.mark.asyncio
    async def test_global_default(self, resolver):
        """Test fallback to the DEFAULT/DEFAULT entry for an unknown state."""
        entry = await resolver.resolve("ZZ", "8810", ProductType.WORKERS_COMPENSATION)

        assert entry.state_code == DEFAULT_CODE
        assert entry.classification_code == DEFAULT_CODE
        assert entry.base_rate == Decimal("2.00")
        assert entry.state_tax_rate == Decimal("0.02")

    @pytest.mark.asyncio
    async def test_case_insensitive_codes(self, resolver):
        """Test that lower-case and padded codes resolve like upper-case."""
        upper = await resolver.resolve("CA", "8810", ProductType.WORKERS_COMPENSATION)
        lower = await resolver.resolve(" ca ", "8810", ProductType.WORKERS_COMPENSATION)

        assert lower == upper

    @pytest.mark.asyncio
    async def test_full_miss_returns_sentinel(self):
        """Test that a miss at every level returns a zero-rate sentinel."""
        resolver = RateResolver(InMemoryRateTable())

        entry = await resolver.resolve("tx", "41677", ProductType.GENERAL_LIABILITY)

        assert entry.is_synthetic
        assert entry.base_rate == Decimal("0")
        assert entry.min_premium == Decimal("0")
        assert entry.state_tax_rate == Decimal("0")
        assert not entry.is_active
        assert entry.state_code == "TX"
        assert entry.classification_code == "41677"
        assert entry.product_type == ProductType.GENERAL_LIABILITY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state_code", ["", "CALIFORNIA"])
    async def test_full_miss_with_malformed_state(self, state_code):
        """Test that codes no stored entry could carry still yield the sentinel."""
        resolver = RateResolver(InMemoryRateTable())

        entry = await resolver.resolve(
            state_code, "8810" * 4, ProductType.WORKERS_COMPENSATION
        )

        assert entry.is_synthetic
        assert entry.state_code == state_code.upper()
        assert entry.classification_code == "8810" * 4
        assert entry.base_rate == Decimal("0")

    @pytest.mark.asyncio
    async def test_lookup_order(self):
        """Test that keys are tried from most to least specific."""
        lookup = RecordingLookup()
        resolver = RateResolver(lookup)

        await resolver.resolve("NY", "5183", ProductType.WORKERS_COMPENSATION)

        assert [(s, c) for s, c, _ in lookup.calls] == [
            ("NY", "5183"),
            ("NY", DEFAULT_CODE),
            (DEFAULT_CODE, DEFAULT_CODE),
        ]

    @pytest.mark.asyncio
    async def test_stops_at_first_hit(self):
        """Test that resolution stops at the first level that answers."""
        lookup = RecordingLookup({("NY", DEFAULT_CODE): _entry("NY", DEFAULT_CODE)})
        resolver = RateResolver(lookup)

        entry = await resolver.resolve("NY", "5183", ProductType.WORKERS_COMPENSATION)

        assert entry.state_code == "NY"
        assert len(lookup.calls) == 2

    def test_fallback_keys_deduplicated(self):
        """Test that a DEFAULT request does not repeat lookups."""
        keys = RateResolver.fallback_keys("CA", DEFAULT_CODE)

        assert keys == [("CA", DEFAULT_CODE), (DEFAULT_CODE, DEFAULT_CODE)]

    def test_in_memory_table_is_rate_lookup(self, rate_table):
        """Test that the in-memory table satisfies the lookup protocol."""
        assert isinstance(rate_table, RateLookup)


class TestRateResolverEffectiveDates:
    """Test effective-dated rate selection."""

    @pytest.mark.asyncio
    async def test_rate_not_yet_effective(self, resolver):
        """Test that seed rates effective 2024-01-01 do not apply in 2023."""
        entry = await resolver.resolve(
            "CA", "8810", ProductType.WORKERS_COMPENSATION, as_of=date(2023, 6, 1)
        )

        assert entry.is_synthetic

    @pytest.mark.asyncio
    async def test_newest_version_wins(self):
        """Test that the most recent applicable rate version is chosen."""
        old = _entry("CA", "8810", "2.00")
        new = old.model_copy(
            update={"base_rate": Decimal("2.40"), "effective_date": date(2025, 1, 1)}
        )
        resolver = RateResolver(InMemoryRateTable([old, new]))

        before = await resolver.resolve(
            "CA", "8810", ProductType.WORKERS_COMPENSATION, as_of=date(2024, 7, 1)
        )
        after = await resolver.resolve(
            "CA", "8810", ProductType.WORKERS_COMPENSATION, as_of=date(2025, 7, 1)
        )

        assert before.base_rate == Decimal("2.00")
        assert after.base_rate == Decimal("2.40")

    @pytest.mark.asyncio
    async def test_inactive_rate_skipped(self):
        """Test that inactive entries fall through to the next level."""
        inactive = _entry("CA", "8810").model_copy(update={"is_active": False})
        fallback = _entry(DEFAULT_CODE, DEFAULT_CODE, "3.00")
        resolver = RateResolver(InMemoryRateTable([inactive, fallback]))

        entry = await resolver.resolve("CA", "8810", ProductType.WORKERS_COMPENSATION)

        assert entry.base_rate == Decimal("3.00")


class TestRateResolverCancellation:
    """Test cooperative cancellation of lookups."""

    @pytest.mark.asyncio
    async def test_cancel_aborts_resolution(self):
        """Test that cancelling the caller aborts the pending lookup."""
        lookup = BlockingLookup()
        resolver = RateResolver(lookup)

        task = asyncio.create_task(
            resolver.resolve("CA", "8810", ProductType.WORKERS_COMPENSATION)
        )
        await lookup.started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestRateResolverCoverage:
    """Test that every seeded combination resolves to a real rate."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product", list(ProductType))
    async def test_every_state_and_product_resolves(self, resolver, product):
        """Test non-null, non-synthetic resolution across states and classes."""
        for state in ("CA", "TX", "NY", "FL", "IL", "PA", "OH", "GA", "NC", "MI", "ZZ"):
            for classification in ("8810", "41677", "UNKNOWN", DEFAULT_CODE):
                entry = await resolver.resolve(state, classification, product)

                assert entry is not None
                assert not entry.is_synthetic
                assert entry.product_type == product
