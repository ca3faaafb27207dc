from __future__ import annotations


class IntervalTracker:
    """Lets an interstitial through on every Nth request.

    `can_show(None)` always allows and leaves the counter alone.
    """

    def __init__(self) -> None:
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def can_show(self, interval: int | None) -> bool:
        if interval is None:
            return True
        if interval < 1:
            raise ValueError(f"interval must be >= 1, got {interval}")

        self._counter += 1
        if self._counter < interval:
            return False

        self._counter = 0
        return True

    def reset(self) -> None:
        self._counter = 0
