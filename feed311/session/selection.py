"""Selection state shared by the incident list, the map and the detail overlay.

States:

* ``no-selection``: nothing selected, overlay closed.
* ``selected-collapsed``: one record selected, overlay closed.
* ``selected-expanded``: one record selected, overlay open.

The overlay is never open without a selection. Views subscribe to the
coordinator and re-render from the ``SelectionState`` they are handed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from feed311.common.models import IncidentRecord, record_key
from feed311.pipeline.coordinates import resolve_coordinates

NO_SELECTION = "no-selection"
SELECTED_COLLAPSED = "selected-collapsed"
SELECTED_EXPANDED = "selected-expanded"

ORIGIN_LIST = "list"
ORIGIN_MAP = "map"


class MapSurface(Protocol):
    def focus_on_location(self, latitude: float, longitude: float) -> None: ...


@dataclass(frozen=True)
class SelectionState:
    selected: IncidentRecord | None = None
    overlay_open: bool = False

    @property
    def phase(self) -> str:
        if self.selected is None:
            return NO_SELECTION
        if self.overlay_open:
            return SELECTED_EXPANDED
        return SELECTED_COLLAPSED


SelectionListener = Callable[[SelectionState], None]


class SelectionCoordinator:
    def __init__(self, map_surface: MapSurface | None = None) -> None:
        self.map_surface = map_surface
        self._state = SelectionState()
        self._listeners: list[SelectionListener] = []

    @property
    def state(self) -> SelectionState:
        return self._state

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def is_selected(self, record: IncidentRecord) -> bool:
        selected = self._state.selected
        return selected is not None and record_key(selected) == record_key(record)

    def _set(self, selected: IncidentRecord | None, overlay_open: bool) -> SelectionState:
        if selected is None:
            overlay_open = False
        self._state = SelectionState(selected=selected, overlay_open=overlay_open)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _focus(self, record: IncidentRecord) -> bool:
        if self.map_surface is None:
            return False
        coordinates = resolve_coordinates(record)
        if coordinates is None:
            return False
        self.map_surface.focus_on_location(*coordinates)
        return True

    def activate(self, record: IncidentRecord, *, origin: str = ORIGIN_LIST) -> SelectionState:
        """Select ``record``; an open overlay stays open and follows the new record.

        List activations move the camera before anything else changes. Marker
        activations (``origin="map"``) never move the camera: the marker that
        was clicked is already on screen.
        """
        if origin == ORIGIN_LIST:
            self._focus(record)
        return self._set(record, self._state.overlay_open)

    def request_details(self, record: IncidentRecord) -> SelectionState:
        return self._set(record, True)

    def dismiss(self) -> SelectionState:
        """Close the overlay and keep the selection highlighted."""
        if not self._state.overlay_open:
            return self._state
        return self._set(self._state.selected, False)

    def focus_map(self) -> SelectionState:
        selected = self._state.selected
        if selected is None:
            return self._state
        self._focus(selected)
        return self._set(selected, False)

    def clear(self) -> SelectionState:
        if self._state.selected is None:
            return self._state
        return self._set(None, False)
