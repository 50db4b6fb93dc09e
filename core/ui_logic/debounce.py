"""
Button debouncing for the front panel.

Converts raw pin samples into click events. Each button keeps its own
stabilized state; only a released->pressed transition produces a click.

The filter is cadence based: one sample is enough to change state, so a
held level fires once, but contact bounce that shows up on consecutive
samples is not filtered and can fire again (known limitation). ``hold_off``
adds an optional minimum time between clicks of the same button.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..data_models import ButtonId

logger = logging.getLogger(__name__)

ClickCallback = Callable[[ButtonId], None]


@dataclass(slots=True)
class DebounceState:
    """Per-button state, owned by the sampling loop."""
    stable_pressed: bool = False
    last_raw_level: bool = False
    last_transition: float = 0.0
    last_click: Optional[float] = None


class Debouncer:
    """
    Edge-triggered debouncer for a fixed set of buttons.

    Not thread safe: ``update`` must only be called from the sampling loop.
    """

    def __init__(
        self,
        normally_closed: bool = False,
        hold_off: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize debouncer.

        Args:
            normally_closed: If True, a low level means pressed
            hold_off: Minimum seconds between clicks of one button, 0 to disable
            clock: Monotonic time source in seconds
        """
        self.normally_closed = normally_closed
        self.hold_off = hold_off
        self.clock = clock
        self.states: Dict[ButtonId, DebounceState] = {}
        self._callbacks: Dict[ButtonId, List[ClickCallback]] = {}
        self.reset()

    def reset(self) -> None:
        """Forget all button history."""
        idle_level = self.normally_closed
        self.states = {
            button: DebounceState(last_raw_level=idle_level) for button in ButtonId
        }

    def register(self, button: ButtonId, callback: ClickCallback) -> None:
        """
        Register callback for clicks of one button.

        Args:
            button: Button to watch
            callback: Called with the button on each click
        """
        callbacks = self._callbacks.setdefault(button, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def is_pressed(self, button: ButtonId) -> bool:
        return self.states[button].stable_pressed

    def update(self, button: ButtonId, raw_level: bool) -> bool:
        """
        Feed one raw sample.

        Args:
            button: Button the sample belongs to
            raw_level: True if the pin read high

        Returns:
            True if this sample produced a click
        """
        state = self.states[button]
        state.last_raw_level = raw_level
        pressed = raw_level != self.normally_closed

        if pressed == state.stable_pressed:
            return False

        now = self.clock()
        state.stable_pressed = pressed
        state.last_transition = now

        if not pressed:
            return False

        if (
            self.hold_off > 0
            and state.last_click is not None
            and now - state.last_click < self.hold_off
        ):
            logger.debug("Ignored %s press inside hold-off window", button.value)
            return False

        state.last_click = now
        self._fire(button)
        return True

    def _fire(self, button: ButtonId) -> None:
        for callback in list(self._callbacks.get(button, [])):
            callback(button)
