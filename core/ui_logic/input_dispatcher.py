"""
Maps front panel buttons to media commands.
"""
import logging
from typing import Dict

from ..data_models import ButtonId, MediaAction
from ..media_source import MediaSource, MediaSourceError
from .debounce import Debouncer

logger = logging.getLogger(__name__)

BUTTON_ACTIONS: Dict[ButtonId, MediaAction] = {
    ButtonId.PLAY_PAUSE: MediaAction.TOGGLE,
    ButtonId.FORWARD: MediaAction.NEXT,
    ButtonId.BACKWARD: MediaAction.PREVIOUS,
    ButtonId.HEART: MediaAction.SAVE,
}

BUTTON_LABELS: Dict[ButtonId, str] = {
    ButtonId.PLAY_PAUSE: "Play/Pause",
    ButtonId.FORWARD: "Forward",
    ButtonId.BACKWARD: "Backward",
    ButtonId.HEART: "Heart",
}

FAILURE_MESSAGES: Dict[MediaAction, str] = {
    MediaAction.TOGGLE: "Could not play / pause song",
    MediaAction.NEXT: "Could not play next song",
    MediaAction.PREVIOUS: "Could not play previous song",
    MediaAction.SAVE: "Could not heart / unheart song",
}


class InputDispatcher:
    """
    Fire-and-forget command dispatch for button clicks.

    Commands run synchronously on the caller's thread, which is the sampling
    loop: a slow command delays sampling of every button until it returns.
    """

    def __init__(self, media_source: MediaSource) -> None:
        self.media_source = media_source

    def bind(self, debouncer: Debouncer) -> None:
        """Register for clicks of every button."""
        for button in BUTTON_ACTIONS:
            debouncer.register(button, self.fire)

    def fire(self, button: ButtonId) -> bool:
        """
        Run the command mapped to a button.

        Args:
            button: Clicked button

        Returns:
            True if the command succeeded
        """
        action = BUTTON_ACTIONS[button]
        logger.info("Clicked %s.", BUTTON_LABELS[button])
        try:
            self.media_source.command(action)
        except MediaSourceError as e:
            logger.warning("%s: %s", FAILURE_MESSAGES[action], e)
            return False
        return True
