# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Hierarchical rate resolution."""

from datetime import date

from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.rating import DEFAULT_CODE, ProductType, RateTableEntry
from .rate_tables import RateLookup

logger = get_logger(__name__)


@beartype
class RateResolver:
    """Resolve a state/class/product triple to a rate entry.

    Lookup degrades from the most specific key to the least specific one:

    1. ``(state, classification, product)``
    2. ``(state, DEFAULT, product)``
    3. ``(DEFAULT, DEFAULT, product)``

    A miss at every level yields the ``RateTableEntry.no_rate`` sentinel,
    never an exception. Cancelling the awaiting task aborts the lookup; the
    resolver keeps no state between calls.
    """

    def __init__(self, rate_lookup: RateLookup) -> None:
        """Initialize resolver with the upstream rate store."""
        self._rate_lookup = rate_lookup

    @staticmethod
    @beartype
    def fallback_keys(
        state_code: str, classification_code: str
    ) -> list[tuple[str, str]]:
        """Ordered ``(state, classification)`` keys tried for a request."""
        keys = [
            (state_code, classification_code),
            (state_code, DEFAULT_CODE),
            (DEFAULT_CODE, DEFAULT_CODE),
        ]
        # Drop repeats, e.g. a request that already asks for DEFAULT.
        return list(dict.fromkeys(keys))

    @beartype
    async def resolve(
        self,
        state_code: str,
        classification_code: str,
        product_type: ProductType,
        as_of: date | None = None,
    ) -> RateTableEntry:
        """Return the first active entry along the fallback chain."""
        state = state_code.strip().upper()
        classification = classification_code.strip().upper()

        for level, (key_state, key_class) in enumerate(
            self.fallback_keys(state, classification), start=1
        ):
            entry = await self._rate_lookup.get_rate(
                key_state, key_class, product_type, as_of
            )
            if entry is not None:
                logger.debug(
                    "Resolved rate for %s/%s/%s at level %d (%s/%s): base_rate=%s",
                    state,
                    classification,
                    product_type.value,
                    level,
                    key_state,
                    key_class,
                    entry.base_rate,
                )
                return entry

        logger.warning(
            "No rate entry found for State: %s, Class: %s, Product: %s",
            state,
            classification,
            product_type.value,
        )
        return RateTableEntry.no_rate(state, classification, product_type)
