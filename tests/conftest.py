from __future__ import annotations

import pytest

from adslot.config import AdsConfiguration
from adslot.core.controller import AdSlotController
from adslot.manager import AdsManager
from adslot.models import AdEnvironment, AdKind
from adslot.simulated import SimulatedAdNetwork


@pytest.fixture()
def network() -> SimulatedAdNetwork:
    return SimulatedAdNetwork()


@pytest.fixture()
def controller(network: SimulatedAdNetwork) -> AdSlotController:
    return AdSlotController(ad_unit_id="unit-1", network=network, environment=AdEnvironment.development)


@pytest.fixture()
def rewarded_controller(network: SimulatedAdNetwork) -> AdSlotController:
    return AdSlotController(
        ad_unit_id="unit-rewarded",
        network=network,
        environment=AdEnvironment.development,
        kind=AdKind.rewarded,
    )


@pytest.fixture()
def manager(network: SimulatedAdNetwork) -> AdsManager:
    return AdsManager(configuration=AdsConfiguration.debug(), network=network)
