from __future__ import annotations

from collections import deque
from dataclasses import dataclass, asdict
from typing import Deque, Dict, Tuple, Union

import pandas as pd

HISTORY_CAPACITY = 50


@dataclass(frozen=True)
class HistoryPoint:
    timestamp: int  # tick index
    glucose: float
    oxygen: float

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return asdict(self)


class HistoryBuffer:
    """
    Sliding window of the most recent HistoryPoints, oldest first.

    Appending past capacity evicts from the head.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._points: Deque[HistoryPoint] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._points.maxlen or 0

    def append(self, point: HistoryPoint) -> None:
        self._points.append(point)

    def snapshot(self) -> Tuple[HistoryPoint, ...]:
        return tuple(self._points)

    def clear(self) -> None:
        self._points.clear()

    def latest(self) -> HistoryPoint:
        if not self._points:
            raise IndexError("history is empty")
        return self._points[-1]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [point.to_dict() for point in self._points],
            columns=["timestamp", "glucose", "oxygen"],
        )

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self.snapshot())
