import math
from dataclasses import dataclass

EARTH_RADIUS_METERS = 6_371_000


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters (haversine, spherical earth)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push a slightly outside [0, 1]
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_within_radius(lat: float, lon: float, ref_lat: float, ref_lon: float, max_meters: float) -> bool:
    return distance_meters(lat, lon, ref_lat, ref_lon) <= max_meters


@dataclass(frozen=True)
class LocationCheck:
    allowed: bool
    distance: float
    max_meters: float
    place_name: str

    @property
    def message(self) -> str:
        if self.allowed:
            return f"Location Verified - You're at {self.place_name}"
        return f"Location Restricted - {self.distance:.1f}m away from {self.place_name}"


class DistanceGate:
    """Admits coordinates within ``max_meters`` of a fixed reference point."""

    def __init__(self, ref_lat: float, ref_lon: float, max_meters: float, place_name: str = "the cafe"):
        self.ref_lat = ref_lat
        self.ref_lon = ref_lon
        self.max_meters = max_meters
        self.place_name = place_name

    def check(self, lat: float, lon: float) -> LocationCheck:
        distance = distance_meters(lat, lon, self.ref_lat, self.ref_lon)
        return LocationCheck(
            allowed=distance <= self.max_meters,
            distance=distance,
            max_meters=self.max_meters,
            place_name=self.place_name,
        )
