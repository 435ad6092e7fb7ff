"""Reject decodes that are almost entirely missing values.

Wrong-template or partially corrupt payloads can unpack without a
structural error yet yield nearly all sentinels.
"""

import logging
from typing import TYPE_CHECKING

from rala.contracts.failure import LowValidity
from rala.grib.types import DenseValueGrid

if TYPE_CHECKING:
    from rala.schemas import InternalConfig

__all__ = ['ValidityGate']

logger = logging.getLogger(__name__)


class ValidityGate:
    """Accept a grid only if its valid fraction exceeds the configured minimum."""

    def __init__(self, config: "InternalConfig"):
        self.min_valid_fraction = config.validity.min_valid_fraction

    def check(self, grid: DenseValueGrid) -> float:
        """Return the valid fraction of ``grid``.

        Raises
        ------
        LowValidity
            If the fraction is at or below ``validity.min_valid_fraction``.
        """
        valid = grid.valid_count
        total = len(grid)
        fraction = grid.valid_fraction
        logger.info("Valid data points: %d / %d (%.1f%%)", valid, total, fraction * 100)

        if total == 0 or fraction <= self.min_valid_fraction:
            raise LowValidity(
                f"Insufficient valid data points: {valid} / {total}",
                valid_count=valid,
                total_count=total,
                valid_fraction=fraction,
                min_valid_fraction=self.min_valid_fraction,
            )
        return fraction

    def is_valid(self, grid: DenseValueGrid) -> bool:
        try:
            self.check(grid)
        except LowValidity:
            return False
        return True
