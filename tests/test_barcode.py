import random
import uuid

import pytest

from thrift_pos.services.barcode_service import (
    BarcodeAllocator,
    hash_identifier,
    looks_like_barcode,
)


class FakeLookup:
    """Barcode lookup that reports a fixed set as taken and counts queries."""

    def __init__(self, taken=()):
        self.taken = set(taken)
        self.queries = []

    def barcode_exists(self, barcode, excluding_product_id):
        self.queries.append(barcode)
        return barcode in self.taken


def test_hash_is_twelve_digits():
    for _ in range(200):
        code = hash_identifier(str(uuid.uuid4()))
        assert len(code) == 12
        assert code.isdigit()


def test_hash_is_deterministic():
    pid = 'c0ffee00-1234-4abc-9def-001122334455'
    assert hash_identifier(pid) == hash_identifier(pid)
    assert hash_identifier(pid, 3) == hash_identifier(pid, 3)


def test_hash_ignores_punctuation():
    assert hash_identifier('ab-cd_12') == hash_identifier('abcd12')


def test_hash_known_values():
    # h = 97 for "a", h = 97*31 + 98 = 3105 for "ab"
    assert hash_identifier('a') == '000000000097'
    assert hash_identifier('ab') == '000000003105'
    assert hash_identifier('ab', 1) == '000000003106'


def test_hash_wraps_to_signed_32_bits():
    # A long id overflows 32 bits many times and still yields 12 digits
    code = hash_identifier('z' * 500)
    assert len(code) == 12
    assert int(code) <= 2 ** 31


@pytest.mark.parametrize('pid, attempt, expected', [
    ('00000000-0000-0000-0000-000000000000', 0, '000057909248'),
    ('550e8400-e29b-41d4-a716-446655440000', 0, '001822259919'),
    ('550e8400-e29b-41d4-a716-446655440000', 1, '001822259920'),
    ('f47ac10b-58cc-4372-a567-0e02b2c3d479', 7, '001463598330'),
    ('ffffffff-ffff-ffff-ffff-ffffffffffff', 0, '002024426496'),
    # Negative 32-bit hashes move towards zero as the attempt grows
    ('c0ffee00-1234-4abc-9def-001122334455', 0, '002080793911'),
    ('c0ffee00-1234-4abc-9def-001122334455', 1, '002080793910'),
    ('c0ffee00-1234-4abc-9def-001122334455', 7, '002080793904'),
])
def test_hash_full_uuid_values(pid, attempt, expected):
    assert hash_identifier(pid, attempt) == expected


def _uuids(count, seed=20240630):
    rng = random.Random(seed)
    return [str(uuid.UUID(int=rng.getrandbits(128), version=4)) for _ in range(count)]


def test_hash_attempts_differ():
    pid = str(uuid.uuid4())
    candidates = {hash_identifier(pid, attempt) for attempt in range(10)}
    assert len(candidates) == 10


def test_hash_attempts_distinct_over_many_uuids():
    for pid in _uuids(10000):
        candidates = {hash_identifier(pid, attempt) for attempt in range(10)}
        assert len(candidates) == 10, pid


def test_hash_distinct_over_many_uuids():
    codes = {hash_identifier(pid) for pid in _uuids(10000)}
    # 32-bit hash space: a handful of collisions at most
    assert len(codes) >= 9990


@pytest.mark.parametrize('bad', ['', None, 123])
def test_hash_rejects_bad_identifier(bad):
    with pytest.raises(ValueError):
        hash_identifier(bad)


def test_hash_rejects_negative_attempt():
    with pytest.raises(ValueError):
        hash_identifier('abc', -1)


def test_looks_like_barcode():
    assert looks_like_barcode('123456789012')
    assert looks_like_barcode(' 123456789012 ')
    assert not looks_like_barcode('12345678901')
    assert not looks_like_barcode('12345678901a')
    assert not looks_like_barcode('')


def test_allocator_returns_first_candidate_when_free():
    pid = str(uuid.uuid4())
    lookup = FakeLookup()
    assert BarcodeAllocator(lookup).allocate(pid) == hash_identifier(pid, 0)
    assert len(lookup.queries) == 1


def test_allocator_skips_taken_candidates():
    pid = str(uuid.uuid4())
    lookup = FakeLookup(taken=[hash_identifier(pid, 0), hash_identifier(pid, 1)])
    assert BarcodeAllocator(lookup).allocate(pid) == hash_identifier(pid, 2)
    assert len(lookup.queries) == 3


def test_allocator_falls_back_after_max_attempts():
    pid = 'abcdef12-0000-0000-0000-000000000000'
    taken = [hash_identifier(pid, attempt) for attempt in range(5)]
    lookup = FakeLookup(taken=taken)
    allocator = BarcodeAllocator(lookup, max_attempts=5, clock=lambda: 1700000123456)

    code = allocator.allocate(pid)

    assert code == 'abcdef123456'
    assert len(code) == 12
    # 5 candidates plus the single fallback check
    assert len(lookup.queries) == 6


def test_allocator_fallback_never_raises_when_taken():
    pid = 'abcdef12-0000-0000-0000-000000000000'
    allocator = BarcodeAllocator(
        FakeLookup(taken=[hash_identifier(pid, 0), 'abcdef123456']),
        max_attempts=1,
        clock=lambda: 123456,
    )
    assert allocator.allocate(pid) == 'abcdef123456'


def test_fallback_pads_short_ids():
    allocator = BarcodeAllocator(FakeLookup(), clock=lambda: 42)
    assert allocator.fallback_barcode('x-y') == '00000000xy42'
