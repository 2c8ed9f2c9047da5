import random

from telemetry_core.domain.push_ids import PUSH_CHARS, PushIdGenerator, decode_push_time


def test_generated_key_shape_and_time():
    gen = PushIdGenerator(rng=random.Random(1))
    key = gen(now_ms=1_741_944_600_000)
    assert len(key) == 20
    assert all(ch in PUSH_CHARS for ch in key)
    assert decode_push_time(key) == 1_741_944_600_000


def test_keys_in_same_millisecond_are_increasing():
    gen = PushIdGenerator(rng=random.Random(2))
    keys = [gen(now_ms=1_700_000_000_000) for _ in range(50)]
    assert keys == sorted(keys)
    assert len(set(keys)) == 50


def test_keys_follow_clock():
    ticks = iter([1.0, 2.0, 3.0])
    gen = PushIdGenerator(clock=lambda: next(ticks))
    keys = [gen() for _ in range(3)]
    assert [decode_push_time(k) for k in keys] == [1000, 2000, 3000]


def test_decode_rejects_other_keys():
    assert decode_push_time("short") is None
    assert decode_push_time("!" * 20) is None
    assert decode_push_time(None) is None
