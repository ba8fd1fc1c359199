import pytest

from photosynth.core.accumulator import Accumulator
from photosynth.core.history import HistoryBuffer, HistoryPoint


def _point(ts: int) -> HistoryPoint:
    return HistoryPoint(timestamp=ts, glucose=float(ts), oxygen=float(ts) / 2)


def test_history_evicts_oldest_first():
    buffer = HistoryBuffer()
    for ts in range(1, 52):
        buffer.append(_point(ts))

    snapshot = buffer.snapshot()
    assert len(buffer) == 50
    assert snapshot[0].timestamp == 2
    assert snapshot[-1].timestamp == 51
    assert [p.timestamp for p in snapshot] == list(range(2, 52))


def test_history_custom_capacity_and_clear():
    buffer = HistoryBuffer(capacity=3)
    for ts in range(1, 6):
        buffer.append(_point(ts))
    assert buffer.capacity == 3
    assert [p.timestamp for p in buffer] == [3, 4, 5]
    assert buffer.latest().timestamp == 5

    buffer.clear()
    assert len(buffer) == 0
    assert buffer.snapshot() == ()
    with pytest.raises(IndexError):
        buffer.latest()


def test_history_rejects_zero_capacity():
    with pytest.raises(ValueError):
        HistoryBuffer(capacity=0)


def test_snapshot_is_detached_from_buffer():
    buffer = HistoryBuffer()
    buffer.append(_point(1))
    snapshot = buffer.snapshot()
    buffer.append(_point(2))
    assert len(snapshot) == 1


def test_history_to_dataframe():
    buffer = HistoryBuffer()
    assert list(buffer.to_dataframe().columns) == ["timestamp", "glucose", "oxygen"]
    assert buffer.to_dataframe().empty

    buffer.append(_point(1))
    buffer.append(_point(2))
    df = buffer.to_dataframe()
    assert df["timestamp"].tolist() == [1, 2]
    assert df["oxygen"].tolist() == [0.5, 1.0]


def test_accumulator_adds_and_resets():
    acc = Accumulator()
    assert acc.value() == 0.0
    acc.add(0.5)
    acc.add(0.25)
    assert acc.value() == pytest.approx(0.75)
    assert float(acc) == pytest.approx(0.75)

    acc.reset()
    assert acc.value() == 0.0


def test_accumulator_rejects_negative_delta():
    acc = Accumulator()
    acc.add(1.0)
    with pytest.raises(ValueError, match="NEGATIVE_DELTA_ERROR"):
        acc.add(-0.1)
    assert acc.value() == 1.0
