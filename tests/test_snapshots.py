import pytest

from atpnet.snapshots import SnapshotStore, nearest_snapshot_height


@pytest.mark.parametrize(
    "height, expected",
    [(0, 0), (999, 0), (1000, 1000), (1999, 1000), (2000, 2000)],
)
def test_snapshot_height_calculation(height, expected):
    assert nearest_snapshot_height(height) == expected


def test_save_only_on_interval():
    meta = {}
    store = SnapshotStore(meta)
    assert store.save_if_needed(999, b"x") is False
    assert meta == {}
    assert store.save_if_needed(2000, b"state") is True
    assert meta == {"utxo_snapshot_2000": b"state"}


def test_load_nearest_picks_highest_not_above():
    store = SnapshotStore({})
    store.save_if_needed(0, b"zero")
    store.save_if_needed(2000, b"two")
    assert store.load_nearest(2500) == (2000, b"two")
    assert store.load_nearest(1999) == (0, b"zero")


def test_load_nearest_none_when_missing():
    store = SnapshotStore({})
    store.save_if_needed(3000, b"three")
    assert store.load_nearest(2999) is None


def test_cleanup_keeps_latest():
    meta = {}
    store = SnapshotStore(meta)
    for h in (0, 1000, 2000, 3000):
        store.save_if_needed(h, str(h).encode())
    assert store.cleanup(3500) == 3
    assert meta == {"utxo_snapshot_3000": b"3000"}
    assert store.cleanup(3500) == 0


def test_negative_height_rejected():
    with pytest.raises(ValueError):
        nearest_snapshot_height(-1)