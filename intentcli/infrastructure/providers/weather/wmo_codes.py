"""WMO weather interpretation codes as returned by Open-Meteo.

Descriptions are looked up by exact code. Icons are picked by code range
so that unlisted codes inside a band still land in the right category.
"""

from bisect import bisect_left
from typing import Optional

DEFAULT_DESCRIPTION = "Unknown conditions"

WMO_DESCRIPTIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

# Upper bound (inclusive) of each band and its icon category
_ICON_BAND_LIMITS = [0, 1, 2, 3, 48, 57, 67, 77, 82, 86]
_ICON_BAND_CODES = ["01", "02", "03", "04", "50", "09", "10", "13", "09", "13", "11"]


def describe(code: Optional[int]) -> str:
    """Returns the text description for ``code`` or the default."""
    if code is None:
        return DEFAULT_DESCRIPTION
    return WMO_DESCRIPTIONS.get(int(code), DEFAULT_DESCRIPTION)


def icon_for(code: Optional[int], is_day: bool = True) -> str:
    """Maps ``code`` to an icon id such as '10d' using range bands."""
    suffix = "d" if is_day else "n"
    if code is None:
        return "03" + suffix
    band = bisect_left(_ICON_BAND_LIMITS, int(code))
    return _ICON_BAND_CODES[band] + suffix
