"""Scan mode state machine gating camera capture against browsing."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from common.logging import get_logger
from common.notifications import NotificationService

from .resolution import Outcome, ResolutionPipeline

LOGGER = get_logger(__name__)


class ScanMode(str, Enum):
    BROWSING = "browsing"
    SCANNING = "scanning"
    RESOLVING = "resolving"


TRANSITIONS: Dict[ScanMode, FrozenSet[ScanMode]] = {
    ScanMode.BROWSING: frozenset({ScanMode.SCANNING}),
    ScanMode.SCANNING: frozenset({ScanMode.BROWSING, ScanMode.RESOLVING}),
    # Resolution always ends in browsing; re-scanning needs a new activate().
    ScanMode.RESOLVING: frozenset({ScanMode.BROWSING}),
}

ModeListener = Callable[[ScanMode, ScanMode], None]


class ScanModeController:
    """Owns the scan mode and feeds accepted captures to the pipeline.

    Leaving ``SCANNING`` the moment a capture is accepted makes any later or
    duplicate capture callback inert, so at most one resolution runs.
    """

    def __init__(self, pipeline: ResolutionPipeline, notifier: NotificationService) -> None:
        self._pipeline = pipeline
        self._notifier = notifier
        self._mode = ScanMode.BROWSING
        self._listeners: List[ModeListener] = []

    @property
    def mode(self) -> ScanMode:
        return self._mode

    def on_mode_change(self, listener: ModeListener) -> None:
        self._listeners.append(listener)

    def _transition(self, target: ScanMode) -> bool:
        current = self._mode
        if target not in TRANSITIONS[current]:
            LOGGER.debug("Ignored scan mode transition", current=current.value, target=target.value)
            return False
        self._mode = target
        for listener in list(self._listeners):
            listener(current, target)
        return True

    def activate(self) -> bool:
        return self._transition(ScanMode.SCANNING)

    def deactivate(self) -> bool:
        if self._mode is not ScanMode.SCANNING:
            return False
        return self._transition(ScanMode.BROWSING)

    async def on_capture(self, text: str) -> Optional[Outcome]:
        """Handle captured text. Returns None when the capture was not accepted."""
        if self._mode is not ScanMode.SCANNING or not (text or "").strip():
            return None
        self._transition(ScanMode.RESOLVING)
        try:
            return await self._pipeline.resolve(text)
        finally:
            self._transition(ScanMode.BROWSING)

    async def on_detected(self, raw_values: Sequence[Optional[str]]) -> Optional[Outcome]:
        """Barcode callback form: only the first detection is considered."""
        if not raw_values:
            return None
        return await self.on_capture(raw_values[0] or "")

    def on_capture_error(self, error: object) -> None:
        """A failed frame is reported but scanning continues."""
        if self._mode is not ScanMode.SCANNING:
            return
        message = str(error) if isinstance(error, Exception) and str(error) else "Unknown error"
        LOGGER.warning("Capture error", error=message)
        self._notifier.error(message)


__all__ = ["ModeListener", "ScanMode", "ScanModeController", "TRANSITIONS"]
