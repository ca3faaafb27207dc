from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from adslot.core.callbacks import (
    NO_CALLBACKS,
    CloseCallback,
    ErrorCallback,
    OpenCallback,
    PresentationCallbacks,
    RewardCallback,
)
from adslot.core.fsm import AdSlotFSM, SlotState
from adslot.errors import AdNotLoaded, LoadFailed, PresentationFailed, PresentationValidationFailed
from adslot.models import AdEnvironment, AdKind, AdSlotPhase
from adslot.network import AdHandle, AdNetworkClient, AdReward, PresentationContext, PresentationError
from adslot.request import AdRequest, RequestFactory

logger = logging.getLogger(__name__)


class _FullScreenDelegate:
    """Event sink registered on every handle the slot loads.

    Forwards SDK notifications into the controller; hosts never see this object.
    """

    def __init__(self, controller: AdSlotController) -> None:
        self._controller = controller

    def ad_did_record_impression(self, ad: AdHandle) -> None:
        self._controller._handle_impression(ad)

    def ad_will_present(self, ad: AdHandle) -> None:
        self._controller._handle_will_present(ad)

    def ad_did_dismiss(self, ad: AdHandle) -> None:
        self._controller._handle_dismiss(ad)

    def ad_did_fail_to_present(self, ad: AdHandle, error: BaseException) -> None:
        self._controller._handle_presentation_failure(ad, error)


class AdSlotController:
    """Owns one full-screen ad placement from load to dismissal.

    Contract:
      - `await load()` fetches an ad with a fresh request; a later success replaces the held ad.
      - `show(context, ...)` presents the held ad or raises; lifecycle events arrive later
        through the callbacks bound by the most recent `show()`.
      - every path that consumes or invalidates the held ad schedules exactly one
        background reload; failures of those reloads are logged, never raised.
      - `stop_loading()` drops the held ad and detaches event delivery. Loads already
        in flight still run, but their results are discarded.

    `show()` must be called on the event loop thread; SDK notifications are expected
    on that thread too.
    """

    def __init__(
        self,
        *,
        ad_unit_id: str,
        network: AdNetworkClient,
        environment: AdEnvironment = AdEnvironment.production,
        request_factory: RequestFactory = AdRequest.new,
        kind: AdKind = AdKind.interstitial,
    ) -> None:
        self._ad_unit_id = ad_unit_id
        self._network = network
        self._environment = environment
        self._request_factory = request_factory
        self._kind = kind

        self._slot = SlotState(ad_unit_id=ad_unit_id)
        self._fsm = AdSlotFSM(self._slot)
        self._callbacks: PresentationCallbacks = NO_CALLBACKS
        self._delegate = _FullScreenDelegate(self)
        self._background: set[asyncio.Task[None]] = set()

    @property
    def ad_unit_id(self) -> str:
        return self._ad_unit_id

    @property
    def environment(self) -> AdEnvironment:
        return self._environment

    @property
    def kind(self) -> AdKind:
        return self._kind

    @property
    def is_ready(self) -> bool:
        return self._slot.loaded_ad is not None

    @property
    def phase(self) -> AdSlotPhase:
        return self._fsm.phase

    @property
    def pending_reloads(self) -> int:
        return len(self._background)

    # ---- public operations ----

    async def load(self) -> None:
        """Load a new ad into the slot.

        Raises LoadFailed if the network call fails. Never retries on its own.
        """

        await self._load(generation=self._slot.generation)

    def stop_loading(self) -> None:
        slot = self._slot
        for ad in (slot.loaded_ad, slot.presenting_ad):
            if ad is not None:
                ad.set_event_sink(None)

        slot.loaded_ad = None
        slot.presenting_ad = None
        slot.pending_loads = 0
        slot.generation += 1
        self._callbacks = NO_CALLBACKS
        self._fsm.send("discard")

    def show(
        self,
        context: PresentationContext,
        *,
        on_open: OpenCallback | None = None,
        on_close: CloseCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_reward: RewardCallback | None = None,
    ) -> None:
        """Present the loaded ad on `context`.

        Returns once presentation has been attempted; open/close/error/reward events
        arrive later via the callbacks bound here.

        Raises:
            AdNotLoaded: nothing is loaded; a background reload has been scheduled.
            PresentationValidationFailed: another ad is still on screen (the held ad is kept),
                or the ad refused `context` (it was discarded and a background reload scheduled).
        """

        _require_event_loop()

        self._callbacks = PresentationCallbacks(
            on_open=on_open,
            on_close=on_close,
            on_error=on_error,
            on_reward=on_reward,
        )

        ad = self._slot.loaded_ad
        if ad is None:
            self._schedule_reload()
            raise AdNotLoaded(self._ad_unit_id)

        if self._slot.presenting_ad is not None:
            # The held ad stays loaded for the next show(); the on-screen ad reports to the new callbacks.
            raise PresentationValidationFailed(
                self._ad_unit_id, PresentationError("Another ad is already on screen")
            )

        try:
            ad.can_present(context)
        except Exception as e:
            self._invalidate(ad)
            self._schedule_reload()
            raise PresentationValidationFailed(self._ad_unit_id, e) from e

        self._slot.presenting_ad = ad
        self._fsm.send("present")
        if self._kind.is_rewarded:
            ad.present(context, reward_handler=self._reward_handler(on_reward))
        else:
            ad.present(context)

    async def drain(self) -> None:
        """Wait until every background reload scheduled so far has finished."""

        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- loading ----

    async def _load(self, *, generation: int) -> None:
        slot = self._slot
        request = self._request_factory()

        slot.pending_loads += 1
        self._fsm.send("begin_load")

        try:
            ad = await self._network.load_ad(ad_unit_id=self._ad_unit_id, request=request)
        except Exception as e:
            if generation == slot.generation:
                slot.pending_loads -= 1
                self._fsm.send("fail_load")
            raise LoadFailed(self._ad_unit_id, e) from e

        if generation != slot.generation:
            # stop_loading() ran while this request was in flight.
            logger.debug("Discarding ad for unit %s loaded after stop_loading()", self._ad_unit_id)
            return

        previous = slot.loaded_ad
        if previous is not None and previous is not ad and previous is not slot.presenting_ad:
            previous.set_event_sink(None)

        ad.set_event_sink(self._delegate)
        slot.loaded_ad = ad
        slot.pending_loads -= 1
        self._fsm.send("finish_load")

    def _schedule_reload(self) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._reload(generation=self._slot.generation),
            name=f"adslot-reload:{self._ad_unit_id}",
        )
        self._background.add(task)
        task.add_done_callback(self._on_reload_done)

    async def _reload(self, *, generation: int) -> None:
        if generation != self._slot.generation:
            return
        try:
            await self._load(generation=generation)
        except LoadFailed as e:
            logger.warning("Background reload failed for ad unit %s: %s", self._ad_unit_id, e.cause)

    def _on_reload_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background reload for ad unit %s crashed", self._ad_unit_id, exc_info=exc)

    def _invalidate(self, ad: AdHandle) -> None:
        ad.set_event_sink(None)
        self._slot.loaded_ad = None
        self._fsm.send("invalidate")

    # ---- SDK notifications ----

    def _handle_impression(self, ad: AdHandle) -> None:
        if self._environment is AdEnvironment.development:
            logger.info("Ad slot %s did record impression for ad: %r", self._ad_unit_id, ad)

    def _handle_will_present(self, ad: AdHandle) -> None:
        if self._slot.presenting_ad is not ad:
            logger.debug("Ignoring will-present for ad unit %s: ad is not on screen", self._ad_unit_id)
            return
        _fire(self._callbacks.on_open)

    def _handle_dismiss(self, ad: AdHandle) -> None:
        slot = self._slot
        if slot.presenting_ad is not ad:
            logger.debug("Ignoring dismiss for ad unit %s: ad is not on screen", self._ad_unit_id)
            return

        # A presented ad is single-use.
        slot.presenting_ad = None
        if slot.loaded_ad is ad:
            slot.loaded_ad = None
        ad.set_event_sink(None)

        callbacks = self._callbacks
        self._callbacks = NO_CALLBACKS
        self._fsm.send("dismiss")

        _fire(callbacks.on_close)
        self._schedule_reload()

    def _handle_presentation_failure(self, ad: AdHandle, error: BaseException) -> None:
        slot = self._slot
        if slot.presenting_ad is not ad:
            logger.debug("Ignoring presentation failure for ad unit %s: ad is not on screen", self._ad_unit_id)
            return

        slot.presenting_ad = None
        if slot.loaded_ad is not ad:
            ad.set_event_sink(None)
        self._fsm.send("presentation_failed")

        logger.warning("Ad for unit %s failed to present: %s", self._ad_unit_id, error)
        _fire(self._callbacks.on_error, PresentationFailed(self._ad_unit_id, error))

    def _reward_handler(self, on_reward: RewardCallback | None) -> Callable[[AdReward], None]:
        # Bound per presentation; may fire after dismissal.
        def _on_reward(reward: AdReward) -> None:
            if self._environment is AdEnvironment.development:
                logger.info("Ad slot %s rewarded user with %s %s", self._ad_unit_id, reward.amount, reward.type)
            _fire(on_reward, reward.amount)

        return _on_reward


def _require_event_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise RuntimeError("show() must be called from the event loop thread") from e


def _fire(callback: Callable[..., None] | None, *args: Any) -> None:
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        # Never let a host callback raise into the SDK.
        logger.exception("Ad slot callback %r raised", callback)
