"""Sources for the user's current position."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Optional, Protocol

import requests

from mapty_cli.core.config import configured_location
from mapty_cli.core.constants import LOCATION_LOOKUP_URL
from mapty_cli.core.models import Coords

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Coords], None]
FailureCallback = Callable[[], None]


class Geolocator(Protocol):
    """One-shot position request; exactly one callback fires per call."""

    def request_current_position(self, on_success: SuccessCallback, on_failure: FailureCallback) -> None: ...


class StaticGeolocator:
    """Always reports a fixed coordinate."""

    def __init__(self, coords: Coords) -> None:
        self.coords = coords

    def request_current_position(self, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        on_success(self.coords)


class UnavailableGeolocator:
    """Position lookup is disabled or unsupported."""

    def request_current_position(self, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        on_failure()


class IPGeolocator:
    """Approximate the position through an IP geolocation JSON endpoint."""

    def __init__(self, url: str = LOCATION_LOOKUP_URL, timeout_seconds: float = 10) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds

    def _lookup(self) -> Optional[Coords]:
        try:
            response = requests.get(self.url, timeout=self.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Location lookup via %s failed: %s", self.url, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Location lookup returned %s, expected an object", type(data).__name__)
            return None
        try:
            coords = (float(data["latitude"]), float(data["longitude"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Location lookup response has no usable latitude/longitude")
            return None
        if not all(math.isfinite(part) for part in coords):
            return None
        return coords

    def request_current_position(self, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        coords = self._lookup()
        if coords is None:
            on_failure()
            return
        logger.debug("Located at %s", coords)
        on_success(coords)


def geolocator_from_config(config: Dict[str, Any], override: Optional[Coords] = None) -> Geolocator:
    """Pick a geolocator: explicit override, configured home, IP lookup, or none."""
    if override is not None:
        return StaticGeolocator(override)
    home = configured_location(config)
    if home is not None:
        return StaticGeolocator(home)
    location = config.get("location", {})
    if location.get("lookup", False):
        return IPGeolocator(
            url=str(location.get("lookup_url") or LOCATION_LOOKUP_URL),
            timeout_seconds=float(location.get("timeout_seconds", 10)),
        )
    return UnavailableGeolocator()
