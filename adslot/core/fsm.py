from __future__ import annotations

import logging
from dataclasses import dataclass

from statemachine import State, StateMachine

from adslot.models import AdSlotPhase
from adslot.network import AdHandle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SlotState:
    """Mutable slot data owned by a single controller.

    - `loaded_ad`: the handle ready to present (None when empty).
    - `presenting_ad`: the handle currently on screen, if any.
    - `pending_loads`: loads of the current generation still awaiting the network.
    - `generation`: bumped by `stop_loading()`; stale load results are dropped.
    """

    ad_unit_id: str
    loaded_ad: AdHandle | None = None
    presenting_ad: AdHandle | None = None
    pending_loads: int = 0
    generation: int = 0


class AdSlotFSM(StateMachine):
    """FSM wrapper around SlotState.

    Guards phase transitions only; the controller mutates SlotState before sending events:
    - empty -> loading -> ready -> presenting -> empty (dismissed, reload follows)
    - load/discard events are accepted from every phase since `load()` and `stop_loading()`
      are callable at any time.
    """

    empty = State(AdSlotPhase.empty.value, value=AdSlotPhase.empty.value, initial=True)
    loading = State(AdSlotPhase.loading.value, value=AdSlotPhase.loading.value)
    ready = State(AdSlotPhase.ready.value, value=AdSlotPhase.ready.value)
    presenting = State(AdSlotPhase.presenting.value, value=AdSlotPhase.presenting.value)

    begin_load = empty.to(loading) | loading.to.itself() | ready.to.itself() | presenting.to.itself()
    finish_load = empty.to(ready) | loading.to(ready) | ready.to.itself() | presenting.to.itself()
    fail_load = (
        loading.to.itself(cond="loads_pending")
        | loading.to(empty)
        | empty.to.itself()
        | ready.to.itself()
        | presenting.to.itself()
    )

    present = ready.to(presenting)
    presentation_failed = (
        presenting.to(ready, cond="holds_ad")
        | presenting.to(loading, cond="loads_pending")
        | presenting.to(empty)
    )
    dismiss = (
        presenting.to(ready, cond="holds_ad")
        | presenting.to(loading, cond="loads_pending")
        | presenting.to(empty)
    )

    # Handle refused at show time.
    invalidate = ready.to(loading, cond="loads_pending") | ready.to(empty)
    discard = empty.to.itself() | loading.to(empty) | ready.to(empty) | presenting.to(empty)

    def __init__(self, slot: SlotState):
        self.slot = slot
        super().__init__()

    def holds_ad(self) -> bool:
        return self.slot.loaded_ad is not None

    def loads_pending(self) -> bool:
        return self.slot.pending_loads > 0

    @property
    def phase(self) -> AdSlotPhase:
        return AdSlotPhase(str(self.current_state.value))

    def after_transition(self, event: str, source: State | None, target: State) -> None:
        if source is not None and source is not target:
            logger.debug("Ad slot %s: %s -> %s (%s)", self.slot.ad_unit_id, source.value, target.value, event)
