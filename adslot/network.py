from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from adslot.request import AdRequest

# Opaque UI surface (e.g. a root view controller); passed through unexamined.
PresentationContext = Any


class AdLoadError(RuntimeError):
    """Raised by a network client when a request yields no servable ad."""


class PresentationError(RuntimeError):
    """Raised by `AdHandle.can_present` when the ad cannot be shown."""


@dataclass(frozen=True, slots=True)
class AdReward:
    amount: int
    type: str = ""


RewardHandler = Callable[[AdReward], None]


class FullScreenEventSink(Protocol):
    """Receiver for a handle's full-screen lifecycle notifications."""

    def ad_did_record_impression(self, ad: "AdHandle") -> None:  # pragma: no cover
        ...

    def ad_will_present(self, ad: "AdHandle") -> None:  # pragma: no cover
        ...

    def ad_did_dismiss(self, ad: "AdHandle") -> None:  # pragma: no cover
        ...

    def ad_did_fail_to_present(self, ad: "AdHandle", error: BaseException) -> None:  # pragma: no cover
        ...


class AdHandle(Protocol):
    def can_present(self, context: PresentationContext) -> None:  # pragma: no cover
        ...

    def present(self, context: PresentationContext, *, reward_handler: RewardHandler | None = None) -> None:  # pragma: no cover
        ...

    def set_event_sink(self, sink: FullScreenEventSink | None) -> None:  # pragma: no cover
        ...


class AdNetworkClient(Protocol):
    async def load_ad(self, *, ad_unit_id: str, request: AdRequest) -> AdHandle:  # pragma: no cover
        ...
