# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rate table storage.

The rating services only depend on the ``RateLookup`` protocol. Any store
that can answer "the active entry for this exact key, or None" plugs in;
the in-memory table below is populated once at startup and is read-only
afterwards, so concurrent reads need no locking.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Final, Protocol, runtime_checkable

from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.rating import (
    DEFAULT_CODE,
    ClassificationCode,
    ProductType,
    RateTableEntry,
)

logger = get_logger(__name__)

RateKey = tuple[str, str, ProductType]

SEED_EFFECTIVE_DATE: Final = date(2024, 1, 1)

SEEDED_STATES: Final = (
    "CA",
    "TX",
    "NY",
    "FL",
    "IL",
    "PA",
    "OH",
    "GA",
    "NC",
    "MI",
    DEFAULT_CODE,
)

STATE_TAX_RATES: Final[dict[str, Decimal]] = {
    "CA": Decimal("0.0328"),
    "TX": Decimal("0.018"),
    "NY": Decimal("0.035"),
    "FL": Decimal("0.015"),
    "IL": Decimal("0.035"),
    "PA": Decimal("0.02"),
    "OH": Decimal("0.015"),
    "GA": Decimal("0.025"),
    "NC": Decimal("0.02"),
    "MI": Decimal("0.025"),
}
DEFAULT_STATE_TAX_RATE: Final = Decimal("0.02")


@runtime_checkable
class RateLookup(Protocol):
    """Upstream reference-data interface used by the resolver.

    Implementations return ``None`` when no entry exists for the exact key;
    they never apply fallback themselves. A remote implementation is expected
    to honour asyncio cancellation of the awaiting task.
    """

    async def get_rate(
        self,
        state_code: str,
        classification_code: str,
        product_type: ProductType,
        as_of: date | None = None,
    ) -> RateTableEntry | None: ...


@beartype
class InMemoryRateTable:
    """Rate table held in process memory."""

    def __init__(
        self,
        entries: Iterable[RateTableEntry] = (),
        classification_codes: Iterable[ClassificationCode] = (),
    ) -> None:
        """Index entries by their exact lookup key."""
        self._entries: dict[RateKey, list[RateTableEntry]] = {}
        for entry in entries:
            key = (entry.state_code, entry.classification_code, entry.product_type)
            self._entries.setdefault(key, []).append(entry)
        # Newest rate first so the first applicable version wins.
        for versions in self._entries.values():
            versions.sort(key=lambda e: e.effective_date, reverse=True)
        self._classification_codes = list(classification_codes)

    @property
    def entry_count(self) -> int:
        """Number of stored entries across all keys."""
        return sum(len(v) for v in self._entries.values())

    @beartype
    async def get_rate(
        self,
        state_code: str,
        classification_code: str,
        product_type: ProductType,
        as_of: date | None = None,
    ) -> RateTableEntry | None:
        """Return the active entry for the exact key, or None."""
        key = (state_code.upper(), classification_code.upper(), product_type)
        for entry in self._entries.get(key, ()):
            if entry.applies_on(as_of):
                return entry
        return None

    @beartype
    def list_rates(
        self,
        state_code: str | None = None,
        product_type: ProductType | None = None,
    ) -> list[RateTableEntry]:
        """List stored entries, optionally filtered by state and product."""
        state = state_code.upper() if state_code else None
        rates = [
            entry
            for versions in self._entries.values()
            for entry in versions
            if (state is None or entry.state_code == state)
            and (product_type is None or entry.product_type == product_type)
        ]
        return sorted(
            rates,
            key=lambda e: (e.state_code, e.product_type.value, e.classification_code),
        )

    @beartype
    def get_classification_codes(
        self, product_type: ProductType
    ) -> list[ClassificationCode]:
        """Active classification codes for a product, ordered by code."""
        codes = [
            c
            for c in self._classification_codes
            if c.product_type == product_type and c.is_active
        ]
        return sorted(codes, key=lambda c: c.code)


@beartype
def state_tax_rate(state_code: str) -> Decimal:
    """Premium tax rate for a state, with the default for unlisted states."""
    return STATE_TAX_RATES.get(state_code.upper(), DEFAULT_STATE_TAX_RATE)


def _entry(
    state: str,
    code: str,
    product: ProductType,
    base_rate: str,
    min_premium: str,
) -> RateTableEntry:
    return RateTableEntry(
        state_code=state,
        classification_code=code,
        product_type=product,
        base_rate=Decimal(base_rate),
        min_premium=Decimal(min_premium),
        state_tax_rate=state_tax_rate(state),
        effective_date=SEED_EFFECTIVE_DATE,
    )


@beartype
def seed_rate_entries(states: Iterable[str] = SEEDED_STATES) -> list[RateTableEntry]:
    """Build the standard rate table for the given states.

    Workers' compensation rates are per $1,000 of payroll; liability rates
    are per $1,000 of revenue; commercial auto rates are per vehicle.
    """
    entries: list[RateTableEntry] = []
    for state in states:
        is_ca = state == "CA"
        entries.extend(
            [
                # Workers' Compensation
                _entry(state, "8810", ProductType.WORKERS_COMPENSATION,
                       "2.50" if is_ca else "1.85", "1000"),
                _entry(state, "8742", ProductType.WORKERS_COMPENSATION,
                       "1.20" if is_ca else "0.95", "800"),
                _entry(state, "5183", ProductType.WORKERS_COMPENSATION,
                       "8.50" if is_ca else "6.25", "2500"),
                _entry(state, DEFAULT_CODE, ProductType.WORKERS_COMPENSATION,
                       "2.00", "1000"),
                # General Liability
                _entry(state, "41677", ProductType.GENERAL_LIABILITY, "5.50", "500"),
                _entry(state, "91111", ProductType.GENERAL_LIABILITY, "12.00", "750"),
                _entry(state, DEFAULT_CODE, ProductType.GENERAL_LIABILITY, "7.50", "500"),
                # Package, auto, professional and cyber price from defaults only
                _entry(state, DEFAULT_CODE, ProductType.BUSINESS_OWNERS_POLICY,
                       "9.00", "750"),
                _entry(state, DEFAULT_CODE, ProductType.COMMERCIAL_AUTO,
                       "1200", "1500"),
                _entry(state, DEFAULT_CODE, ProductType.PROFESSIONAL_LIABILITY,
                       "4.25", "1000"),
                _entry(state, DEFAULT_CODE, ProductType.CYBER_LIABILITY, "2.50", "500"),
            ]
        )
    return entries


@beartype
def seed_classification_codes() -> list[ClassificationCode]:
    """Reference classification codes offered per product."""
    wc = ProductType.WORKERS_COMPENSATION
    gl = ProductType.GENERAL_LIABILITY
    rows = [
        ("8810", "Clerical Office Employees", wc, "A"),
        ("8742", "Salespersons - Outside", wc, "A"),
        ("8820", "Attorneys - All Employees", wc, "A"),
        ("8832", "Physicians - All Employees", wc, "B"),
        ("5183", "Plumbing - Residential", wc, "D"),
        ("5190", "Electrical Work", wc, "D"),
        ("5403", "Carpentry - Residential", wc, "D"),
        ("9015", "Building Operation", wc, "C"),
        ("9586", "Parking Lots - Attended", wc, "C"),
        ("41677", "Restaurant - No Liquor", gl, "B"),
        ("41675", "Restaurant - With Liquor", gl, "C"),
        ("91111", "Retail Store", gl, "B"),
        ("41650", "Office - Professional", gl, "A"),
        ("91302", "Contractor - General", gl, "D"),
        ("91340", "Manufacturer - Light", gl, "C"),
        ("91341", "Manufacturer - Heavy", gl, "D"),
    ]
    return [
        ClassificationCode(
            code=code, description=desc, product_type=product, hazard_group=group
        )
        for code, desc, product, group in rows
    ]


@beartype
def build_default_rate_table() -> InMemoryRateTable:
    """Rate table loaded with the standard seed data."""
    table = InMemoryRateTable(seed_rate_entries(), seed_classification_codes())
    logger.info("Loaded %d rate table entries", table.entry_count)
    return table
