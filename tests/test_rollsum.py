import pytest

from rsyncsig.rollsum import Rollsum

BUF = bytes(range(256))


def test_init():
    r = Rollsum()
    assert r.count == 0
    assert r.s1 == 0
    assert r.s2 == 0
    assert r.digest() == 0x00000000


def test_rollin_rotate_rollout_sequence():
    r = Rollsum()
    r.rollin(0)
    assert r.count == 1
    assert r.digest() == 0x001F001F
    r.rollin(1)
    r.rollin(2)
    r.rollin(3)
    assert r.count == 4
    assert r.digest() == 0x01400082

    r.rotate(0, 4)
    assert r.count == 4
    assert r.digest() == 0x014A0086
    r.rotate(1, 5)
    r.rotate(2, 6)
    r.rotate(3, 7)
    assert r.count == 4
    assert r.digest() == 0x01680092

    r.rollout(4)
    assert r.count == 3
    assert r.digest() == 0x00DC006F
    r.rollout(5)
    r.rollout(6)
    r.rollout(7)
    assert r.count == 0
    assert r.digest() == 0x00000000

    r.update(BUF)
    assert r.digest() == 0x3A009E80


def test_update_fresh():
    r = Rollsum()
    r.update(BUF)
    assert r.count == 256
    assert r.digest() == 0x3A009E80


def test_reset():
    r = Rollsum()
    r.update(BUF)
    r.reset()
    assert r.count == 0
    assert r.digest() == 0x00000000


@pytest.mark.parametrize("split", [0, 1, 15, 16, 17, 128, 255, 256])
def test_update_in_pieces_matches_single_update(split):
    whole = Rollsum()
    whole.update(BUF)
    parts = Rollsum()
    parts.update(BUF[:split])
    parts.update(BUF[split:])
    assert parts.digest() == whole.digest()
    assert parts.count == whole.count


def test_rollin_matches_update():
    a = Rollsum()
    for byte in BUF:
        a.rollin(byte)
    b = Rollsum()
    b.update(BUF)
    assert a.digest() == b.digest()


def test_rolling_window_matches_fresh_sum():
    data = bytes((i * 37 + 11) % 256 for i in range(200))
    window = 16
    r = Rollsum()
    r.update(data[:window])
    for start in range(1, len(data) - window + 1):
        r.rotate(data[start - 1], data[start + window - 1])
        fresh = Rollsum()
        fresh.update(data[start:start + window])
        assert r.digest() == fresh.digest()