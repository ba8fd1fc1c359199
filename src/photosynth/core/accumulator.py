class Accumulator:
    """Running glucose total. Only grows between resets."""

    def __init__(self) -> None:
        self._total = 0.0

    def add(self, delta: float) -> float:
        if delta < 0:
            raise ValueError(f"NEGATIVE_DELTA_ERROR: accumulator delta {delta} cannot be negative.")
        self._total += delta
        return self._total

    def reset(self) -> None:
        self._total = 0.0

    def value(self) -> float:
        return self._total

    def __float__(self) -> float:
        return self._total
