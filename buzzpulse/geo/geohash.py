"""Geohash encode/decode and approximate cell size.

Pure functions, no database access. Longitude is bisected first; each
character carries five bits, most significant first.
"""

from buzzpulse.core.errors import InvalidInput

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {c: i for i, c in enumerate(BASE32)}

# [precision]: (height, width) in meters at the equator
_CELL_SIZE_METERS = {
    1: (5000000, 5000000),
    2: (1250000, 625000),
    3: (156000, 156000),
    4: (39100, 19500),
    5: (4890, 4890),
    6: (1220, 610),
    7: (153, 153),
    8: (38.2, 19.1),
    9: (4.77, 4.77),
    10: (1.19, 0.596),
}
_FALLBACK_PRECISION = 7


def encode(lat: float, lon: float, precision: int = 7) -> str:
    if precision < 1:
        raise InvalidInput("precision must be >= 1")

    lat_min, lat_max = -90.0, 90.0
    lon_min, lon_max = -180.0, 180.0

    idx = 0
    bit = 0
    even = True
    out: list[str] = []

    while len(out) < precision:
        if even:
            mid = (lon_min + lon_max) / 2
            if lon >= mid:
                idx = (idx << 1) + 1
                lon_min = mid
            else:
                idx = idx << 1
                lon_max = mid
        else:
            mid = (lat_min + lat_max) / 2
            if lat >= mid:
                idx = (idx << 1) + 1
                lat_min = mid
            else:
                idx = idx << 1
                lat_max = mid
        even = not even

        bit += 1
        if bit == 5:
            out.append(BASE32[idx])
            bit = 0
            idx = 0

    return "".join(out)


def decode_bbox(geohash: str) -> tuple[float, float, float, float]:
    """Return (lat_min, lat_max, lon_min, lon_max) for geohash."""
    if not geohash:
        raise InvalidInput("geohash must be non-empty")

    lat_min, lat_max = -90.0, 90.0
    lon_min, lon_max = -180.0, 180.0
    even = True

    for ch in geohash.lower():
        try:
            bits = _DECODE_MAP[ch]
        except KeyError as e:
            raise InvalidInput(f"Invalid geohash char: {ch!r}") from e

        for n in range(4, -1, -1):
            bit = (bits >> n) & 1
            if even:
                mid = (lon_min + lon_max) / 2
                if bit:
                    lon_min = mid
                else:
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2
                if bit:
                    lat_min = mid
                else:
                    lat_max = mid
            even = not even

    return lat_min, lat_max, lon_min, lon_max


def decode(geohash: str) -> tuple[float, float]:
    """Return the (lat, lng) midpoint of the geohash cell."""
    lat_min, lat_max, lon_min, lon_max = decode_bbox(geohash)
    return (lat_min + lat_max) / 2, (lon_min + lon_max) / 2


def cell_radius_meters(precision: int) -> float:
    # Equatorial approximation, no latitude correction.
    height, width = _CELL_SIZE_METERS.get(precision, _CELL_SIZE_METERS[_FALLBACK_PRECISION])
    return max(height, width) / 2
