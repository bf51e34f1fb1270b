"""Tax identification number (10-digit checksum identifier) service.

A tax ID is nine base digits followed by a control digit. The control digit
is the weighted sum of the base digits modulo 11; a remainder of 10 has no
single-digit representation, so such bases are never issued.
"""

import random
import re
from typing import Optional

# Weight applied to each of the nine base digits
WEIGHTS = (6, 5, 7, 2, 3, 4, 5, 6, 7)

CHECKSUM_MODULUS = 11
INVALID_CONTROL_DIGIT = 10
TAX_ID_LENGTH = 10

_TAX_ID_PATTERN = re.compile(r"[0-9]{%d}" % TAX_ID_LENGTH)
_ALL_ZEROS = "0" * TAX_ID_LENGTH


class TaxIdService:
    """Generate and validate tax identification numbers."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    @staticmethod
    def control_digit(base: str) -> int:
        """Weighted checksum of the nine base digits, modulo 11."""
        total = sum(int(digit) * weight for digit, weight in zip(base, WEIGHTS))
        return total % CHECKSUM_MODULUS

    def generate(self) -> str:
        """
        Generate a random, valid tax ID.

        Draws a zero-padded 9-digit base and appends its control digit,
        drawing again whenever the control digit would be 10.
        """
        while True:
            base = f"{self._rng.randint(0, 999_999_999):09d}"
            control = self.control_digit(base)
            if control != INVALID_CONTROL_DIGIT:
                return f"{base}{control}"

    @staticmethod
    def is_valid(value) -> bool:
        """
        Check whether ``value`` is a valid tax ID.

        Anything that is not a string of exactly ten ASCII digits is rejected
        before the checksum is computed, as is the all-zeros string.
        """
        if not isinstance(value, str) or not _TAX_ID_PATTERN.fullmatch(value):
            return False
        if value == _ALL_ZEROS:
            return False
        return TaxIdService.control_digit(value[:-1]) == int(value[-1])
