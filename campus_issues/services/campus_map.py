# File: campus_issues/services/campus_map.py
"""Pin placement on the illustrative campus map.

The map is not georeferenced. A click is expressed as a percentage of the
map surface and turned into a synthetic lat/lng by a fixed linear transform
around the campus center; the inverse places stored coordinates back on the
surface.
"""

import threading
import uuid
from dataclasses import dataclass, asdict
from typing import Iterable, Literal, Optional

from campus_issues.core.config import settings
from campus_issues.core.errors import ValidationError

PinType = Literal["issue", "custom"]


@dataclass(frozen=True)
class MapPin:
    id: str
    lat: float
    lng: float
    title: str
    description: str
    type: PinType


class CampusMap:
    def __init__(self, center_lat: float, center_lng: float, scale: float):
        if scale <= 0:
            raise ValueError("map scale must be positive")
        self.center_lat = center_lat
        self.center_lng = center_lng
        self.scale = scale

    @classmethod
    def from_settings(cls) -> "CampusMap":
        return cls(settings.campus_center_lat, settings.campus_center_lng, settings.map_scale)

    def to_coordinates(self, x: float, y: float) -> tuple[float, float]:
        lat = self.center_lat + (50 - y) * self.scale
        lng = self.center_lng + (x - 50) * self.scale
        return lat, lng

    def to_percent(self, lat: float, lng: float) -> tuple[float, float]:
        x = (lng - self.center_lng) / self.scale + 50
        y = 50 - (lat - self.center_lat) / self.scale
        return x, y

    @staticmethod
    def describe(lat: float, lng: float) -> str:
        return f"Location: {lat:.4f}, {lng:.4f}"

    def issue_pins(self, issues: Iterable) -> list[MapPin]:
        """Read-only pins for every issue that carries both coordinates."""
        return [
            MapPin(
                id=str(i.id),
                lat=i.latitude,
                lng=i.longitude,
                title=i.title,
                description=i.description or "",
                type="issue",
            )
            for i in issues
            if i.latitude is not None and i.longitude is not None
        ]

    def place(self, pin: MapPin) -> dict:
        x, y = self.to_percent(pin.lat, pin.lng)
        return {**asdict(pin), "x": x, "y": y}


class PinBoard:
    """Client-side custom pins. Lives in memory only and is never persisted."""

    def __init__(self, campus_map: CampusMap):
        self.map = campus_map
        self.adding = False
        self.pending: Optional[tuple[float, float]] = None
        self.selected: Optional[MapPin] = None
        self._pins: list[MapPin] = []
        self._lock = threading.RLock()

    def pins(self) -> list[MapPin]:
        with self._lock:
            return list(self._pins)

    def start_adding(self) -> None:
        with self._lock:
            self.adding = True

    def cancel(self) -> None:
        with self._lock:
            self.adding = False
            self.pending = None

    def stage(self, x: float, y: float) -> Optional[tuple[float, float]]:
        """Stage a pin at ``(x, y)``; ignored unless the board is in add mode."""
        with self._lock:
            if not self.adding:
                return None
            self.pending = (x, y)
            return self.map.to_coordinates(x, y)

    def commit(self, title: str, description: str = "") -> MapPin:
        with self._lock:
            title = (title or "").strip()
            if self.pending is None or not title:
                raise ValidationError("Please provide a title for the pin.")
            lat, lng = self.map.to_coordinates(*self.pending)
            pin = MapPin(
                id=f"custom-{uuid.uuid4().hex[:12]}",
                lat=lat,
                lng=lng,
                title=title,
                description=(description or "").strip(),
                type="custom",
            )
            self._pins.append(pin)
            self.pending = None
            self.adding = False
            return pin

    def add(self, x: float, y: float, title: str, description: str = "") -> MapPin:
        with self._lock:
            self.start_adding()
            self.stage(x, y)
            try:
                return self.commit(title, description)
            except ValidationError:
                self.cancel()
                raise

    def select(self, pin_id: str) -> Optional[MapPin]:
        with self._lock:
            self.selected = next((p for p in self._pins if p.id == pin_id), None)
            return self.selected

    def remove(self, pin_id: str) -> bool:
        with self._lock:
            before = len(self._pins)
            self._pins = [p for p in self._pins if p.id != pin_id]
            if self.selected and self.selected.id == pin_id:
                self.selected = None
            return len(self._pins) != before
