"""Headless map surface that records camera commands instead of animating."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from feed311.common.config_loader import MapSettings
from feed311.common.logging import log_event


@dataclass(frozen=True)
class CameraCommand:
    latitude: float
    longitude: float
    zoom: float
    duration_ms: int


class LoggingMapSurface:
    def __init__(self, settings: MapSettings | None = None, logger: logging.Logger | None = None) -> None:
        self.settings = settings or MapSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.commands: list[CameraCommand] = []

    @property
    def camera(self) -> CameraCommand:
        """Current camera target; the configured centre until the first focus."""
        if self.commands:
            return self.commands[-1]
        return CameraCommand(
            latitude=self.settings.center_lat,
            longitude=self.settings.center_lon,
            zoom=self.settings.zoom,
            duration_ms=0,
        )

    def focus_on_location(self, latitude: float, longitude: float) -> None:
        # A new command simply retargets the camera.
        command = CameraCommand(
            latitude=latitude,
            longitude=longitude,
            zoom=self.settings.focus_zoom,
            duration_ms=self.settings.focus_duration_ms,
        )
        self.commands.append(command)
        log_event(self.logger, f"camera focus {latitude:.6f},{longitude:.6f}", stage="select", event="CAMERA_FOCUS", status="ok")
