"""Geographic helpers: distances, bounding boxes, circles and location keys."""

import math

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def point_on_circle(
    lat: float,
    lng: float,
    radius_km: float,
    index: int,
    total: int,
) -> tuple[float, float]:
    """Place item `index` of `total` evenly on a circle around a center.

    Used to give venue-less events plausible coordinates; the result always
    stays within `radius_km` of the center.
    """
    total = max(total, 1)
    angle = 2 * math.pi * (index % total) / total
    # Alternate rings so consecutive items do not overlap
    ring = 0.5 + 0.5 * ((index % 2) == 0)
    distance = radius_km * ring
    dlat = (distance * math.cos(angle)) / KM_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    dlng = (distance * math.sin(angle)) / (KM_PER_DEGREE_LAT * cos_lat)
    new_lat = max(-90.0, min(90.0, lat + dlat))
    new_lng = ((lng + dlng + 180.0) % 360.0) - 180.0
    return round(new_lat, 6), round(new_lng, 6)


def location_hash(lat: float, lng: float, radius_km: float) -> str:
    """Key for the single-location job lock."""
    return f"{lat:.4f}_{lng:.4f}_{radius_km:g}"


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """(lat_min, lat_max, lng_min, lng_max) enclosing the circle.

    A box that would wrap the antimeridian or reach a pole spans every
    longitude instead.
    """
    dlat = radius_km / KM_PER_DEGREE_LAT
    lat_min, lat_max = lat - dlat, lat + dlat
    cos_lat = math.cos(math.radians(max(abs(lat_min), abs(lat_max))))
    if lat_min <= -90 or lat_max >= 90 or cos_lat <= 1e-6:
        return max(lat_min, -90.0), min(lat_max, 90.0), -180.0, 180.0
    dlng = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    if lng - dlng < -180 or lng + dlng > 180:
        return lat_min, lat_max, -180.0, 180.0
    return lat_min, lat_max, lng - dlng, lng + dlng
