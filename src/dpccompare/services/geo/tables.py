"""Static geography tables.

County FIPS identifiers are 5-character strings: 2-digit state FIPS followed
by the 3-digit county code.
"""

from __future__ import annotations

import re

DEFAULT_STATE = "NC"
DEFAULT_COUNTY_FIPS = "37063"  # Durham County, NC

_ZIP_PATTERN = re.compile(r"^(\d{5})(?:-\d{4})?$", re.ASCII)

# Major-metro ZIP codes with a known county.
ZIP_COUNTY_FALLBACK: dict[str, str] = {
    # North Carolina
    "27360": "37057",  # Thomasville - Davidson County
    "27701": "37063",  # Durham - Durham County
    "27511": "37183",  # Cary - Wake County
    # California
    "90001": "06037",  # Los Angeles County
    "90210": "06037",  # Beverly Hills - Los Angeles County
    "94102": "06075",  # San Francisco County
    "92101": "06073",  # San Diego County
    # New York
    "10001": "36061",  # New York County (Manhattan)
    "11201": "36047",  # Kings County (Brooklyn)
    # Texas
    "75201": "48113",  # Dallas County
    "77001": "48201",  # Harris County (Houston)
    "78701": "48453",  # Travis County (Austin)
    # Florida
    "33101": "12086",  # Miami-Dade County
    "32801": "12095",  # Orange County (Orlando)
    "33601": "12057",  # Hillsborough County (Tampa)
}

# Most populous county of each state.
STATE_COUNTY_DEFAULTS: dict[str, str] = {
    "AL": "01073",
    "AK": "02020",
    "AZ": "04013",
    "AR": "05119",
    "CA": "06037",
    "CO": "08031",
    "CT": "09001",
    "DE": "10003",
    "DC": "11001",
    "FL": "12086",
    "GA": "13121",
    "HI": "15003",
    "ID": "16001",
    "IL": "17031",
    "IN": "18097",
    "IA": "19153",
    "KS": "20091",
    "KY": "21111",
    "LA": "22033",
    "ME": "23005",
    "MD": "24510",
    "MA": "25025",
    "MI": "26163",
    "MN": "27053",
    "MS": "28049",
    "MO": "29189",
    "MT": "30111",
    "NE": "31055",
    "NV": "32003",
    "NH": "33011",
    "NJ": "34013",
    "NM": "35001",
    "NY": "36061",
    "NC": "37063",
    "ND": "38017",
    "OH": "39035",
    "OK": "40109",
    "OR": "41051",
    "PA": "42101",
    "RI": "44007",
    "SC": "45045",
    "SD": "46099",
    "TN": "47157",
    "TX": "48201",
    "UT": "49035",
    "VT": "50007",
    "VA": "51760",
    "WA": "53033",
    "WV": "54039",
    "WI": "55079",
    "WY": "56021",
}

# First two ZIP digits -> state. Prefixes shared by several states are omitted.
ZIP_PREFIX_STATES: dict[str, str] = {
    "01": "MA",
    "04": "ME",
    "05": "VT",
    "06": "CT",
    "07": "NJ",
    "08": "NJ",
    **{str(p): "NY" for p in range(10, 15)},
    **{str(p): "PA" for p in range(15, 19)},
    "21": "MD",
    "22": "VA",
    "23": "VA",
    "25": "WV",
    "26": "WV",
    "27": "NC",
    "28": "NC",
    "29": "SC",
    "30": "GA",
    "31": "GA",
    "32": "FL",
    "33": "FL",
    "34": "FL",
    "35": "AL",
    "36": "AL",
    "37": "TN",
    "39": "MS",
    "40": "KY",
    "41": "KY",
    "42": "KY",
    "43": "OH",
    "44": "OH",
    "45": "OH",
    "46": "IN",
    "47": "IN",
    "48": "MI",
    "49": "MI",
    "50": "IA",
    "51": "IA",
    "52": "IA",
    "53": "WI",
    "54": "WI",
    "55": "MN",
    "56": "MN",
    "57": "SD",
    "58": "ND",
    "59": "MT",
    "60": "IL",
    "61": "IL",
    "62": "IL",
    "63": "MO",
    "64": "MO",
    "65": "MO",
    "66": "KS",
    "67": "KS",
    "68": "NE",
    "69": "NE",
    "70": "LA",
    "72": "AR",
    "73": "OK",
    "74": "OK",
    **{str(p): "TX" for p in range(75, 80)},
    "80": "CO",
    "81": "CO",
    "82": "WY",
    "84": "UT",
    "85": "AZ",
    "86": "AZ",
    "87": "NM",
    "89": "NV",
    **{str(p): "CA" for p in range(90, 97)},
    "97": "OR",
    "98": "WA",
}

STATE_FIPS_TO_ABBREV: dict[str, str] = {
    "01": "AL", "02": "AK", "04": "AZ", "05": "AR", "06": "CA",
    "08": "CO", "09": "CT", "10": "DE", "11": "DC", "12": "FL",
    "13": "GA", "15": "HI", "16": "ID", "17": "IL", "18": "IN",
    "19": "IA", "20": "KS", "21": "KY", "22": "LA", "23": "ME",
    "24": "MD", "25": "MA", "26": "MI", "27": "MN", "28": "MS",
    "29": "MO", "30": "MT", "31": "NE", "32": "NV", "33": "NH",
    "34": "NJ", "35": "NM", "36": "NY", "37": "NC", "38": "ND",
    "39": "OH", "40": "OK", "41": "OR", "42": "PA", "44": "RI",
    "45": "SC", "46": "SD", "47": "TN", "48": "TX", "49": "UT",
    "50": "VT", "51": "VA", "53": "WA", "54": "WV", "55": "WI",
    "56": "WY", "72": "PR", "78": "VI",
}  # fmt: skip


def normalize_zip(raw: str | None) -> str | None:
    """Return the 5-digit ZIP for ``NNNNN`` or ``NNNNN-NNNN``, else None."""
    if raw is None:
        return None
    match = _ZIP_PATTERN.match(raw.strip())
    return match.group(1) if match else None


def state_for_zip(zip_code: str | None) -> str | None:
    """Infer the state from the first two digits of a ZIP code."""
    if not zip_code or len(zip_code) < 2:
        return None
    return ZIP_PREFIX_STATES.get(zip_code[:2])


def state_default_county(state: str | None) -> str | None:
    if not state:
        return None
    return STATE_COUNTY_DEFAULTS.get(state.strip().upper())
