"""Standalone Leaflet map page with workout markers and a sidebar list."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from mapty_cli.core.constants import DEFAULT_PAN_DURATION, DEFAULT_ZOOM, TILE_ATTRIBUTION, TILE_URL
from mapty_cli.core.models import Coords, Workout
from mapty_cli.core.session import ClickHandler
from mapty_cli.utils.formatting import workout_details

LEAFLET_VERSION = "1.9.4"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>mapty // Map your workouts</title>
  <link rel="stylesheet" href="https://unpkg.com/leaflet@{version}/dist/leaflet.css" />
  <script defer src="https://unpkg.com/leaflet@{version}/dist/leaflet.js"></script>
  <style>
    body {{ display: flex; height: 100vh; margin: 0; font-family: sans-serif; background: #aaa; }}
    .sidebar {{ flex-basis: 34rem; padding: 1.5rem; background: #2d3439; color: #ececec; overflow-y: auto; }}
    .workouts {{ list-style: none; padding: 0; }}
    .workout {{ background: #42484d; border-radius: 5px; padding: 1rem 1.5rem; margin-bottom: 1rem; cursor: pointer; }}
    .workout--running {{ border-left: 5px solid #00c46a; }}
    .workout--cycling {{ border-left: 5px solid #ffb545; }}
    .workout__title {{ font-size: 1.1rem; margin: 0 0 0.5rem; }}
    .workout__details {{ display: inline-block; margin-right: 1rem; }}
    .workout__unit {{ color: #aaa; font-size: 0.8rem; text-transform: uppercase; }}
    #map {{ flex: 1; height: 100%; }}
    .running-popup .leaflet-popup-content-wrapper {{ border-left: 5px solid #00c46a; }}
    .cycling-popup .leaflet-popup-content-wrapper {{ border-left: 5px solid #ffb545; }}
  </style>
</head>
<body>
  <div class="sidebar">
    <ul class="workouts">
{entries}
    </ul>
  </div>
  <div id="map"></div>
  <script>
    const state = {state};
    window.addEventListener("load", function () {{
      const map = L.map("map").setView(state.center, state.zoom);
      L.tileLayer(state.tileUrl, {{ attribution: state.attribution }}).addTo(map);
      state.markers.forEach(function (marker) {{
        L.marker(marker.coords)
          .addTo(map)
          .bindPopup(L.popup({{
            maxWidth: 250,
            minWidth: 100,
            autoClose: false,
            closeOnClick: false,
            className: marker.className,
          }}))
          .setPopupContent(marker.popup)
          .openPopup();
      }});
      if (state.view) {{
        map.setView(state.view.coords, state.view.zoom, {{
          animate: state.view.animate,
          pan: {{ duration: state.view.panDuration }},
        }});
      }}
      document.querySelector(".workouts").addEventListener("click", function (event) {{
        const el = event.target.closest(".workout");
        if (!el) return;
        const coords = state.positions[el.dataset.id];
        if (!coords) return;
        map.setView(coords, state.zoom, {{ animate: true, pan: {{ duration: state.panDuration }} }});
      }});
      map.on("click", function (event) {{
        const lat = event.latlng.lat.toFixed(5);
        const lng = event.latlng.lng.toFixed(5);
        L.popup()
          .setLatLng(event.latlng)
          .setContent("mapty add --lat " + lat + " --lng " + lng)
          .openOn(map);
      }});
    }});
  </script>
</body>
</html>
"""

ENTRY_TEMPLATE = """      <li class="workout workout--{type}" data-id="{id}">
        <h2 class="workout__title">{title}</h2>
{details}
      </li>"""

DETAIL_TEMPLATE = """        <div class="workout__details">
          <span class="workout__icon">{icon}</span>
          <span class="workout__value">{value}</span>
          <span class="workout__unit">{unit}</span>
        </div>"""


def workout_to_html(workout: Workout) -> str:
    """Render one sidebar entry; ``data-id`` carries the workout id."""
    details = "\n".join(
        DETAIL_TEMPLATE.format(icon=icon, value=html.escape(value), unit=html.escape(unit))
        for icon, value, unit in workout_details(workout)
    )
    return ENTRY_TEMPLATE.format(
        type=html.escape(workout.type),
        id=html.escape(workout.id, quote=True),
        title=html.escape(workout.description),
        details=details,
    )


class LeafletMap:
    """Collects map calls and renders them as a Leaflet page.

    Serves as both the map view and the HTML list renderer of a session.
    """

    def __init__(
        self,
        tile_url: str = TILE_URL,
        attribution: str = TILE_ATTRIBUTION,
        pan_duration: float = DEFAULT_PAN_DURATION,
    ) -> None:
        self.tile_url = tile_url
        self.attribution = attribution
        self.pan_duration = pan_duration
        self.center: Optional[Coords] = None
        self.zoom = DEFAULT_ZOOM
        self.markers: List[Dict[str, Any]] = []
        self.entries: List[str] = []
        self.positions: Dict[str, List[float]] = {}
        self.view: Optional[Dict[str, Any]] = None
        self.click_handler: Optional[ClickHandler] = None

    @property
    def initialized(self) -> bool:
        return self.center is not None

    def initialize(self, coords: Coords, zoom: int) -> None:
        """Center the map and drop its markers.

        Sidebar entries are kept: they are rendered before the map loads.
        """
        self.center = coords
        self.zoom = zoom
        self.markers = []
        self.view = None

    def add_marker(self, coords: Coords, popup: str, style_class: str) -> None:
        self.markers.append(
            {
                "coords": [coords[0], coords[1]],
                "popup": popup,
                "className": style_class,
            }
        )

    def set_view(self, coords: Coords, zoom: int, animate: bool, pan_duration: float) -> None:
        self.view = {
            "coords": [coords[0], coords[1]],
            "zoom": zoom,
            "animate": animate,
            "panDuration": pan_duration,
        }

    def on_click(self, handler: ClickHandler) -> None:
        self.click_handler = handler

    def click(self, coords: Coords) -> None:
        """Feed a click at ``coords`` to the subscribed handler."""
        if self.click_handler is not None:
            self.click_handler(coords)

    def render_entry(self, workout: Workout) -> None:
        self.entries.insert(0, workout_to_html(workout))
        self.positions[workout.id] = [workout.coords[0], workout.coords[1]]

    def clear(self) -> None:
        """Forget every drawn workout: sidebar entries, positions and markers."""
        self.entries = []
        self.positions = {}
        self.markers = []
        self.view = None

    def render_page(self) -> str:
        if self.center is None:
            raise RuntimeError("Map has not been initialized")
        state = {
            "center": [self.center[0], self.center[1]],
            "zoom": self.zoom,
            "tileUrl": self.tile_url,
            "attribution": self.attribution,
            "panDuration": self.pan_duration,
            "markers": self.markers,
            "positions": self.positions,
            "view": self.view,
        }
        # Keep "</script>" in popups from closing the inline script.
        state_json = json.dumps(state, ensure_ascii=False).replace("</", "<\\/")
        return PAGE_TEMPLATE.format(
            version=LEAFLET_VERSION,
            entries="\n".join(self.entries),
            state=state_json,
        )

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render_page(), encoding="utf-8")
        return path
