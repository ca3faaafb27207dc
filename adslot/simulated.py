from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field

from adslot.network import (
    AdLoadError,
    AdReward,
    FullScreenEventSink,
    PresentationContext,
    PresentationError,
    RewardHandler,
)
from adslot.request import AdRequest

_FILL = "fill"
_UNPRESENTABLE = "unpresentable"


@dataclass(slots=True)
class SimulatedAd:
    """In-memory ad handle.

    Behaves like a network SDK ad: single-use, and lifecycle notifications are only
    delivered while a sink is attached. Tests (or a dev harness) drive the
    notifications explicitly via `record_impression`, `dismiss`, `fail_to_present`,
    and `earn_reward`.
    """

    ad_unit_id: str
    request: AdRequest
    presentable: bool = True
    sink: FullScreenEventSink | None = None
    presented_on: list[PresentationContext] = field(default_factory=list)
    reward_handler: RewardHandler | None = None

    @property
    def was_presented(self) -> bool:
        return bool(self.presented_on)

    def set_event_sink(self, sink: FullScreenEventSink | None) -> None:
        self.sink = sink

    def can_present(self, context: PresentationContext) -> None:
        if self.was_presented:
            raise PresentationError("Ad has already been presented")
        if not self.presentable:
            raise PresentationError(f"Ad cannot be presented from {context!r}")
        if context is None:
            raise PresentationError("No presentation context")

    def present(self, context: PresentationContext, *, reward_handler: RewardHandler | None = None) -> None:
        self.presented_on.append(context)
        self.reward_handler = reward_handler
        if self.sink is not None:
            self.sink.ad_will_present(self)

    def record_impression(self) -> None:
        if self.sink is not None:
            self.sink.ad_did_record_impression(self)

    def earn_reward(self, amount: int, type: str = "coins") -> None:
        if self.reward_handler is not None:
            self.reward_handler(AdReward(amount=amount, type=type))

    def dismiss(self) -> None:
        if self.sink is not None:
            self.sink.ad_did_dismiss(self)

    def fail_to_present(self, error: BaseException) -> None:
        if self.sink is not None:
            self.sink.ad_did_fail_to_present(self, error)


class SimulatedAdNetwork:
    """Scriptable stand-in for an ad network client.

    Contract:
      - every `load_ad` call is recorded in `requests`.
      - queued outcomes (`queue_failure`, `queue_unpresentable`) are consumed in order;
        with nothing queued the call fills when `fill` is True, else raises AdLoadError.
      - `pause()` holds every load until `resume()` so tests can observe in-flight state.
    """

    def __init__(self, *, fill: bool = True) -> None:
        self.fill = fill
        self.requests: list[tuple[str, AdRequest]] = []
        self.ads: list[SimulatedAd] = []
        self._outcomes: deque[BaseException | str] = deque()
        self._gate = asyncio.Event()
        self._gate.set()

    @property
    def load_count(self) -> int:
        return len(self.requests)

    @property
    def last_ad(self) -> SimulatedAd:
        if not self.ads:
            raise LookupError("No ad has been served yet")
        return self.ads[-1]

    def queue_failure(self, error: BaseException | None = None) -> None:
        self._outcomes.append(error or AdLoadError("No fill"))

    def queue_unpresentable(self) -> None:
        self._outcomes.append(_UNPRESENTABLE)

    def pause(self) -> None:
        self._gate.clear()

    def resume(self) -> None:
        self._gate.set()

    async def load_ad(self, *, ad_unit_id: str, request: AdRequest) -> SimulatedAd:
        self.requests.append((ad_unit_id, request))
        if self._outcomes:
            outcome = self._outcomes.popleft()
        else:
            outcome = _FILL if self.fill else AdLoadError("No fill")

        await self._gate.wait()

        if isinstance(outcome, BaseException):
            raise outcome

        ad = SimulatedAd(ad_unit_id=ad_unit_id, request=request, presentable=outcome != _UNPRESENTABLE)
        self.ads.append(ad)
        return ad
