from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

OpenCallback = Callable[[], None]
CloseCallback = Callable[[], None]
ErrorCallback = Callable[[BaseException], None]
RewardCallback = Callable[[int], None]


@dataclass(frozen=True, slots=True)
class PresentationCallbacks:
    """Callbacks bound by a single `show()` call.

    The slot swaps the whole instance on every `show()`, so a reader never sees
    `on_open` from one call paired with `on_close` from another.
    """

    on_open: OpenCallback | None = None
    on_close: CloseCallback | None = None
    on_error: ErrorCallback | None = None
    on_reward: RewardCallback | None = None


NO_CALLBACKS = PresentationCallbacks()
