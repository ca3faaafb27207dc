from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from adslot.config import AdsConfiguration
from adslot.core.callbacks import CloseCallback, ErrorCallback, OpenCallback, RewardCallback
from adslot.core.controller import AdSlotController
from adslot.errors import AdNotLoaded, AdSlotError
from adslot.interval import IntervalTracker
from adslot.models import AdKind
from adslot.network import AdNetworkClient, PresentationContext
from adslot.request import AdRequest, RequestFactory

logger = logging.getLogger(__name__)

# Kinds the user did not explicitly opt into; these stop loading while ads are disabled.
_DISABLEABLE_KINDS = frozenset({AdKind.interstitial, AdKind.rewarded_interstitial})


class AdsManager:
    """One slot controller per configured ad kind, behind a host-friendly API.

    Unlike the controllers, the `show_*` methods never raise slot errors: they are
    routed to `on_error` (or `on_not_ready` for rewarded ads).
    """

    def __init__(
        self,
        *,
        configuration: AdsConfiguration,
        network: AdNetworkClient,
        request_factory: RequestFactory = AdRequest.new,
    ) -> None:
        self._configuration = configuration
        self._interval_tracker = IntervalTracker()
        self._disabled = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._slots: dict[AdKind, AdSlotController] = {
            kind: AdSlotController(
                ad_unit_id=unit_id,
                network=network,
                environment=configuration.environment,
                request_factory=request_factory,
                kind=kind,
            )
            for kind, unit_id in configuration.ad_unit_ids().items()
        }

    @property
    def configuration(self) -> AdsConfiguration:
        return self._configuration

    @property
    def is_disabled(self) -> bool:
        return self._disabled

    @property
    def is_interstitial_ready(self) -> bool:
        return self._is_ready(AdKind.interstitial)

    @property
    def is_rewarded_ready(self) -> bool:
        return self._is_ready(AdKind.rewarded)

    @property
    def is_rewarded_interstitial_ready(self) -> bool:
        return self._is_ready(AdKind.rewarded_interstitial)

    def slot(self, kind: AdKind) -> AdSlotController | None:
        return self._slots.get(kind)

    async def load_ads(self) -> None:
        """Load every configured slot concurrently. Failures are logged, not raised."""

        kinds = [k for k in self._slots if not (self._disabled and k in _DISABLEABLE_KINDS)]
        results = await asyncio.gather(*(self._slots[k].load() for k in kinds), return_exceptions=True)
        for kind, result in zip(kinds, results):
            if isinstance(result, AdSlotError):
                logger.warning("Initial %s load failed: %s", kind.value, result)
            elif isinstance(result, BaseException):
                raise result

    def show_interstitial(
        self,
        context: PresentationContext,
        *,
        after_interval: int | None = None,
        on_open: OpenCallback | None = None,
        on_close: CloseCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        if self._disabled:
            return
        slot = self._slots.get(AdKind.interstitial)
        if slot is None:
            logger.debug("show_interstitial() called without an interstitial ad unit configured")
            return

        interval = after_interval if after_interval is not None else self._configuration.interstitial_interval
        if not self._interval_tracker.can_show(interval):
            return

        self._show(slot, context, on_open=on_open, on_close=on_close, on_error=on_error)

    def show_rewarded(
        self,
        context: PresentationContext,
        *,
        on_open: OpenCallback | None = None,
        on_close: CloseCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_not_ready: Callable[[], None] | None = None,
        on_reward: RewardCallback | None = None,
    ) -> None:
        slot = self._slots.get(AdKind.rewarded)
        if slot is None:
            logger.debug("show_rewarded() called without a rewarded ad unit configured")
            return

        self._show(
            slot,
            context,
            on_open=on_open,
            on_close=on_close,
            on_error=on_error,
            on_not_ready=on_not_ready,
            on_reward=on_reward,
        )

    def show_rewarded_interstitial(
        self,
        context: PresentationContext,
        *,
        on_open: OpenCallback | None = None,
        on_close: CloseCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_reward: RewardCallback | None = None,
    ) -> None:
        if self._disabled:
            return
        slot = self._slots.get(AdKind.rewarded_interstitial)
        if slot is None:
            logger.debug("show_rewarded_interstitial() called without an ad unit configured")
            return

        self._show(slot, context, on_open=on_open, on_close=on_close, on_error=on_error, on_reward=on_reward)

    def set_disabled(self, disabled: bool) -> None:
        """Disable or re-enable interstitial-style ads.

        Rewarded ads stay available since the user asks for them.
        Must be called on the event loop thread when re-enabling.
        """

        if disabled == self._disabled:
            return
        self._disabled = disabled
        if disabled:
            self._interval_tracker.reset()

        for kind in _DISABLEABLE_KINDS:
            slot = self._slots.get(kind)
            if slot is None:
                continue
            if disabled:
                slot.stop_loading()
            else:
                task = asyncio.get_running_loop().create_task(self._reload_quietly(slot))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

        logger.info("Ads %s", "disabled" if disabled else "enabled")

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        await asyncio.gather(*(s.drain() for s in self._slots.values()))

    def _is_ready(self, kind: AdKind) -> bool:
        slot = self._slots.get(kind)
        return slot is not None and slot.is_ready

    def _show(
        self,
        slot: AdSlotController,
        context: PresentationContext,
        *,
        on_open: OpenCallback | None,
        on_close: CloseCallback | None,
        on_error: ErrorCallback | None,
        on_not_ready: Callable[[], None] | None = None,
        on_reward: RewardCallback | None = None,
    ) -> None:
        try:
            slot.show(context, on_open=on_open, on_close=on_close, on_error=on_error, on_reward=on_reward)
        except AdNotLoaded as e:
            if on_not_ready is not None:
                on_not_ready()
            elif on_error is not None:
                on_error(e)
        except AdSlotError as e:
            if on_error is not None:
                on_error(e)

    @staticmethod
    async def _reload_quietly(slot: AdSlotController) -> None:
        try:
            await slot.load()
        except AdSlotError as e:
            logger.warning("Reload after re-enabling ads failed for %s: %s", slot.ad_unit_id, e)
