# ==============================================================================
# BARCODE SERVICE
# ==============================================================================
# Every product gets a 12-digit numeric barcode derived from its id:
#
#   hash_identifier(id, attempt)   → pure, deterministic candidate
#   BarcodeAllocator.allocate(id)  → first candidate no other product uses
#
# The hash folds the id into a signed 32-bit integer (h = h*31 + char with
# 32-bit wraparound on every step). Barcodes already printed on labels depend
# on that exact arithmetic, so it must not change.
#
# The unique index on product.barcode is the real guard against duplicates;
# the existence check here only avoids failing inserts.
# ==============================================================================

import logging
import re
import time

from thrift_pos.repositories.interfaces import IBarcodeLookup

logger = logging.getLogger(__name__)

BARCODE_LENGTH = 12
MAX_ATTEMPTS = 100

_MODULUS = 10 ** BARCODE_LENGTH
_NON_ALNUM = re.compile(r'[^0-9A-Za-z]')
_BARCODE_SHAPE = re.compile(r'^\d{12}$')


def _wrap_int32(value):
    """Reduces an integer to the signed 32-bit range."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _truncated_mod(value, modulus):
    """Remainder with the sign of the dividend."""
    remainder = abs(value) % modulus
    return -remainder if value < 0 else remainder


def _fit_barcode(text):
    return text.zfill(BARCODE_LENGTH)[-BARCODE_LENGTH:]


def hash_identifier(identifier, attempt=0):
    """
    Maps an identifier and an attempt counter to a 12-digit string.

    Args:
        identifier: Non-empty id, usually a UUID. Non-alphanumeric
                    characters are ignored.
        attempt: Collision counter, 0 for the first candidate.

    Returns:
        Exactly 12 ASCII digits.
    """
    if not isinstance(identifier, str) or not identifier:
        raise ValueError("identifier must be a non-empty string")
    if attempt < 0:
        raise ValueError("attempt must be >= 0")

    h = 0
    for char in _NON_ALNUM.sub('', identifier):
        h = _wrap_int32(h * 31 + ord(char))

    if attempt > 0:
        h = _truncated_mod(h + attempt, _MODULUS)

    return _fit_barcode(str(abs(h)))


def looks_like_barcode(text):
    """True for a string of exactly 12 digits."""
    return bool(_BARCODE_SHAPE.match((text or '').strip()))


class BarcodeAllocator:
    """
    Finds a barcode for a new product that no other product uses.

    Tries hash_identifier(product_id, 0..max_attempts-1) against the lookup.
    If every candidate is taken it falls back to a time-based code, which
    is not guaranteed unique.
    """

    def __init__(self, lookup: IBarcodeLookup, max_attempts=MAX_ATTEMPTS, clock=None):
        """
        Args:
            lookup: Anything with barcode_exists(barcode, excluding_product_id)
            max_attempts: Number of hashed candidates to try
            clock: Returns epoch milliseconds (default: current time)
        """
        self.lookup = lookup
        self.max_attempts = max_attempts
        self._clock = clock or (lambda: int(time.time() * 1000))

    def allocate(self, product_id):
        for attempt in range(self.max_attempts):
            candidate = hash_identifier(product_id, attempt)
            if not self.lookup.barcode_exists(candidate, product_id):
                if attempt:
                    logger.info("Barcode for product %s allocated after %d collisions",
                                product_id, attempt)
                return candidate

        fallback = self.fallback_barcode(product_id)
        if self.lookup.barcode_exists(fallback, product_id):
            logger.warning("Fallback barcode %s for product %s is also taken; "
                           "the unique index will reject it", fallback, product_id)
        else:
            logger.warning("All %d barcode candidates taken for product %s, using fallback %s",
                           self.max_attempts, product_id, fallback)
        return fallback

    def fallback_barcode(self, product_id):
        """First 6 alphanumerics of the id + last 6 digits of the clock."""
        id_part = _NON_ALNUM.sub('', product_id)[:6]
        time_part = str(self._clock())[-6:]
        return _fit_barcode(id_part + time_part)
