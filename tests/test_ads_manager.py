from __future__ import annotations

import logging

import pytest

from adslot.config import AdsConfiguration
from adslot.errors import AdNotLoaded
from adslot.manager import AdsManager
from adslot.models import AdKind
from adslot.simulated import SimulatedAdNetwork


@pytest.mark.asyncio
async def test_load_ads_loads_every_configured_slot(manager: AdsManager, network: SimulatedAdNetwork) -> None:
    await manager.load_ads()

    assert manager.is_interstitial_ready
    assert manager.is_rewarded_ready
    assert manager.is_rewarded_interstitial_ready
    assert sorted(unit for unit, _ in network.requests) == sorted(manager.configuration.ad_unit_ids().values())


@pytest.mark.asyncio
async def test_load_ads_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="adslot.manager")
    manager = AdsManager(configuration=AdsConfiguration.debug(), network=SimulatedAdNetwork(fill=False))

    await manager.load_ads()

    assert not manager.is_interstitial_ready
    assert "Initial interstitial load failed" in caplog.text


def test_unconfigured_kinds_have_no_slot(network: SimulatedAdNetwork) -> None:
    manager = AdsManager(configuration=AdsConfiguration(rewarded_ad_unit_id="rw-1"), network=network)

    assert manager.slot(AdKind.rewarded) is not None
    assert manager.slot(AdKind.interstitial) is None
    assert manager.is_interstitial_ready is False

    # Showing an unconfigured kind is a no-op.
    manager.show_interstitial("root-view")


@pytest.mark.asyncio
async def test_show_interstitial_respects_interval(manager: AdsManager, network: SimulatedAdNetwork) -> None:
    await manager.load_ads()
    slot = manager.slot(AdKind.interstitial)
    assert slot is not None
    opened: list[str] = []

    manager.show_interstitial("root-view", after_interval=2, on_open=lambda: opened.append("open"))
    assert opened == []
    assert slot.is_ready

    manager.show_interstitial("root-view", after_interval=2, on_open=lambda: opened.append("open"))
    assert opened == ["open"]


@pytest.mark.asyncio
async def test_show_interstitial_uses_configured_interval(network: SimulatedAdNetwork) -> None:
    manager = AdsManager(configuration=AdsConfiguration.debug(interstitial_interval=3), network=network)
    await manager.load_ads()
    opened: list[str] = []

    for _ in range(3):
        manager.show_interstitial("root-view", on_open=lambda: opened.append("open"))

    assert opened == ["open"]


@pytest.mark.asyncio
async def test_show_interstitial_routes_errors_to_on_error(manager: AdsManager) -> None:
    errors: list[BaseException] = []

    manager.show_interstitial("root-view", on_error=errors.append)

    assert len(errors) == 1
    assert isinstance(errors[0], AdNotLoaded)
    await manager.drain()
    assert manager.is_interstitial_ready


@pytest.mark.asyncio
async def test_rewarded_not_ready_prefers_on_not_ready(manager: AdsManager) -> None:
    calls: list[str] = []

    manager.show_rewarded(
        "root-view",
        on_error=lambda e: calls.append("error"),
        on_not_ready=lambda: calls.append("not_ready"),
    )

    assert calls == ["not_ready"]
    await manager.drain()
    assert manager.is_rewarded_ready


@pytest.mark.asyncio
async def test_rewarded_delivers_reward_amount(manager: AdsManager, network: SimulatedAdNetwork) -> None:
    await manager.load_ads()
    rewards: list[int] = []

    manager.show_rewarded("root-view", on_reward=rewards.append)
    shown = next(ad for ad in network.ads if ad.was_presented)
    shown.earn_reward(5)

    assert rewards == [5]


@pytest.mark.asyncio
async def test_disabling_stops_interstitials_but_keeps_rewarded(
    manager: AdsManager, network: SimulatedAdNetwork
) -> None:
    await manager.load_ads()

    manager.set_disabled(True)

    assert manager.is_disabled
    assert not manager.is_interstitial_ready
    assert not manager.is_rewarded_interstitial_ready
    assert manager.is_rewarded_ready

    opened: list[str] = []
    manager.show_interstitial("root-view", on_open=lambda: opened.append("open"))
    manager.show_rewarded_interstitial("root-view", on_open=lambda: opened.append("open"))
    assert opened == []

    loads_before = network.load_count
    await manager.load_ads()
    # Only the rewarded slot is reloaded while disabled.
    assert network.load_count == loads_before + 1


@pytest.mark.asyncio
async def test_reenabling_reloads_interstitials(manager: AdsManager) -> None:
    await manager.load_ads()
    manager.set_disabled(True)

    manager.set_disabled(False)
    await manager.drain()

    assert not manager.is_disabled
    assert manager.is_interstitial_ready
    assert manager.is_rewarded_interstitial_ready


@pytest.mark.asyncio
async def test_disabling_resets_interstitial_interval(manager: AdsManager) -> None:
    await manager.load_ads()
    opened: list[str] = []

    manager.show_interstitial("root-view", after_interval=2, on_open=lambda: opened.append("open"))
    manager.set_disabled(True)
    manager.set_disabled(False)
    await manager.drain()

    # The count restarts after re-enabling.
    manager.show_interstitial("root-view", after_interval=2, on_open=lambda: opened.append("open"))
    assert opened == []

    manager.show_interstitial("root-view", after_interval=2, on_open=lambda: opened.append("open"))
    assert opened == ["open"]
