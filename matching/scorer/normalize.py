"""
Attribute normalization for driver, job and candidate fields.

Free-form values coming from profile forms and job postings are mapped to
canonical lowercase tokens before rule scoring. Unknown values pass through
lowercased so they can still match exactly.
"""

import re
from typing import Dict, List, Optional

DRIVER_TYPE_MAP: Dict[str, str] = {
    "company": "company",
    "company driver": "company",
    "company-driver": "company",
    "owner-operator": "owner-operator",
    "owner operator": "owner-operator",
    "owneroperator": "owner-operator",
    "lease": "lease",
    "lease operator": "lease",
    "lease-operator": "lease",
    "student": "student",
    "student / trainee": "student",
    "trainee": "student",
}

LICENSE_MAP: Dict[str, str] = {
    "a": "a", "class a": "a", "class-a": "a",
    "b": "b", "class b": "b", "class-b": "b",
    "c": "c", "class c": "c", "class-c": "c",
    "permit": "permit", "permit only": "permit",
}

EXPERIENCE_ORDINAL: Dict[str, int] = {
    "none": 0,
    "less-1": 1,
    "< 1 year": 1,
    "1-3": 2,
    "1–3 years": 2,
    "3-5": 3,
    "3–5 years": 3,
    "5+": 4,
    "5+ years": 4,
}

ROUTE_MAP: Dict[str, str] = {
    "otr": "otr", "over the road": "otr",
    "local": "local",
    "regional": "regional",
    "dedicated": "dedicated",
    "ltl": "ltl", "less than truckload": "ltl",
}

FREIGHT_MAP: Dict[str, str] = {
    "box": "box",
    "car hauler": "carHaul", "carhauler": "carHaul", "car haul": "carHaul", "carhaul": "carHaul",
    "drop and hook": "dropAndHook", "drop & hook": "dropAndHook", "dropandhook": "dropAndHook",
    "dry bulk": "dryBulk", "drybulk": "dryBulk",
    "dry van": "dryVan", "dryvan": "dryVan",
    "flatbed": "flatbed",
    "hopper bottom": "hopperBottom", "hopperbottom": "hopperBottom",
    "intermodal": "intermodal",
    "oil field": "oilField", "oilfield": "oilField",
    "oversize load": "oversizeLoad", "oversizeload": "oversizeLoad", "oversize": "oversizeLoad",
    "refrigerated": "refrigerated", "reefer": "refrigerated",
    "tanker": "tanker",
}

TEAM_MAP: Dict[str, str] = {
    "solo": "solo",
    "team": "team",
    "both": "both",
    "either": "both",
}

STATE_ABBREVIATIONS: Dict[str, str] = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas", "ca": "california",
    "co": "colorado", "ct": "connecticut", "de": "delaware", "fl": "florida", "ga": "georgia",
    "hi": "hawaii", "id": "idaho", "il": "illinois", "in": "indiana", "ia": "iowa",
    "ks": "kansas", "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota", "ms": "mississippi",
    "mo": "missouri", "mt": "montana", "ne": "nebraska", "nv": "nevada",
    "nh": "new hampshire", "nj": "new jersey", "nm": "new mexico", "ny": "new york",
    "nc": "north carolina", "nd": "north dakota", "oh": "ohio", "ok": "oklahoma",
    "or": "oregon", "pa": "pennsylvania", "ri": "rhode island", "sc": "south carolina",
    "sd": "south dakota", "tn": "tennessee", "tx": "texas", "ut": "utah", "vt": "vermont",
    "va": "virginia", "wa": "washington", "wv": "west virginia", "wi": "wisconsin",
    "wy": "wyoming",
}

US_STATES = frozenset(STATE_ABBREVIATIONS.values())

NEIGHBORS: Dict[str, List[str]] = {
    "alabama": ["florida", "georgia", "mississippi", "tennessee"],
    "alaska": [],
    "arizona": ["california", "colorado", "nevada", "new mexico", "utah"],
    "arkansas": ["louisiana", "mississippi", "missouri", "oklahoma", "tennessee", "texas"],
    "california": ["arizona", "nevada", "oregon"],
    "colorado": ["arizona", "kansas", "nebraska", "new mexico", "oklahoma", "utah", "wyoming"],
    "connecticut": ["massachusetts", "new york", "rhode island"],
    "delaware": ["maryland", "new jersey", "pennsylvania"],
    "florida": ["alabama", "georgia"],
    "georgia": ["alabama", "florida", "north carolina", "south carolina", "tennessee"],
    "hawaii": [],
    "idaho": ["montana", "nevada", "oregon", "utah", "washington", "wyoming"],
    "illinois": ["indiana", "iowa", "kentucky", "missouri", "wisconsin"],
    "indiana": ["illinois", "kentucky", "michigan", "ohio"],
    "iowa": ["illinois", "minnesota", "missouri", "nebraska", "south dakota", "wisconsin"],
    "kansas": ["colorado", "missouri", "nebraska", "oklahoma"],
    "kentucky": ["illinois", "indiana", "missouri", "ohio", "tennessee", "virginia", "west virginia"],
    "louisiana": ["arkansas", "mississippi", "texas"],
    "maine": ["new hampshire"],
    "maryland": ["delaware", "pennsylvania", "virginia", "west virginia"],
    "massachusetts": ["connecticut", "new hampshire", "new york", "rhode island", "vermont"],
    "michigan": ["indiana", "ohio", "wisconsin"],
    "minnesota": ["iowa", "north dakota", "south dakota", "wisconsin"],
    "mississippi": ["alabama", "arkansas", "louisiana", "tennessee"],
    "missouri": ["arkansas", "illinois", "iowa", "kansas", "kentucky", "nebraska", "oklahoma", "tennessee"],
    "montana": ["idaho", "north dakota", "south dakota", "wyoming"],
    "nebraska": ["colorado", "iowa", "kansas", "missouri", "south dakota", "wyoming"],
    "nevada": ["arizona", "california", "idaho", "oregon", "utah"],
    "new hampshire": ["maine", "massachusetts", "vermont"],
    "new jersey": ["delaware", "new york", "pennsylvania"],
    "new mexico": ["arizona", "colorado", "oklahoma", "texas", "utah"],
    "new york": ["connecticut", "massachusetts", "new jersey", "pennsylvania", "vermont"],
    "north carolina": ["georgia", "south carolina", "tennessee", "virginia"],
    "north dakota": ["minnesota", "montana", "south dakota"],
    "ohio": ["indiana", "kentucky", "michigan", "pennsylvania", "west virginia"],
    "oklahoma": ["arkansas", "colorado", "kansas", "missouri", "new mexico", "texas"],
    "oregon": ["california", "idaho", "nevada", "washington"],
    "pennsylvania": ["delaware", "maryland", "new jersey", "new york", "ohio", "west virginia"],
    "rhode island": ["connecticut", "massachusetts"],
    "south carolina": ["georgia", "north carolina"],
    "south dakota": ["iowa", "minnesota", "montana", "nebraska", "north dakota", "wyoming"],
    "tennessee": ["alabama", "arkansas", "georgia", "kentucky", "mississippi", "missouri",
                  "north carolina", "virginia"],
    "texas": ["arkansas", "louisiana", "new mexico", "oklahoma"],
    "utah": ["arizona", "colorado", "idaho", "nevada", "new mexico", "wyoming"],
    "vermont": ["massachusetts", "new hampshire", "new york"],
    "virginia": ["kentucky", "maryland", "north carolina", "tennessee", "west virginia"],
    "washington": ["idaho", "oregon"],
    "west virginia": ["kentucky", "maryland", "ohio", "pennsylvania", "virginia"],
    "wisconsin": ["illinois", "iowa", "michigan", "minnesota"],
    "wyoming": ["colorado", "idaho", "montana", "nebraska", "south dakota", "utah"],
}


def _lookup(mapping: Dict[str, str], raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    key = str(raw).lower().strip()
    if not key:
        return None
    return mapping.get(key, key)


def normalize_driver_type(raw: Optional[str]) -> Optional[str]:
    return _lookup(DRIVER_TYPE_MAP, raw)


def normalize_license_class(raw: Optional[str]) -> Optional[str]:
    return _lookup(LICENSE_MAP, raw)


def normalize_route_type(raw: Optional[str]) -> Optional[str]:
    return _lookup(ROUTE_MAP, raw)


def normalize_team_pref(raw: Optional[str]) -> Optional[str]:
    return _lookup(TEAM_MAP, raw)


def normalize_freight_type(raw: Optional[str]) -> Optional[str]:
    """Map a freight label to its camelCase key, e.g. "Dry Van" -> "dryVan"."""
    if raw is None:
        return None
    key = str(raw).lower().strip()
    if not key:
        return None
    if key in FREIGHT_MAP:
        return FREIGHT_MAP[key]
    # Already canonical keys arrive camelCased ("dryVan")
    for canonical in FREIGHT_MAP.values():
        if canonical.lower() == key:
            return canonical
    return key


def experience_ordinal(raw: Optional[str]) -> int:
    """Ordinal 0..4 for none, <1, 1-3, 3-5, 5+; -1 when unknown."""
    if raw is None:
        return -1
    key = str(raw).lower().strip()
    if key in EXPERIENCE_ORDINAL:
        return EXPERIENCE_ORDINAL[key]
    normalized = normalize_experience(raw)
    return EXPERIENCE_ORDINAL.get(normalized, -1) if normalized else -1


def normalize_experience(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    lower = str(raw).lower().strip()
    if not lower:
        return None
    if "5+" in lower or "5 +" in lower:
        return "5+"
    if "3-5" in lower or "3–5" in lower:
        return "3-5"
    if "1-3" in lower or "1–3" in lower:
        return "1-3"
    if "less" in lower or "< 1" in lower:
        return "less-1"
    if lower == "none":
        return "none"
    return str(raw).strip()


def normalize_flags(flags: Optional[Dict[str, bool]], normalizer=None) -> Dict[str, bool]:
    """Normalize the keys of a {label: bool} preference map, keeping truthy entries."""
    if not flags:
        return {}
    result: Dict[str, bool] = {}
    for key, value in flags.items():
        if not value:
            continue
        canonical = normalizer(key) if normalizer else key
        if canonical:
            result[canonical] = True
    return result


def extract_state(location: Optional[str]) -> Optional[str]:
    """Extract a canonical lowercase US state name from a location or state string."""
    if not location:
        return None
    lower = location.lower().strip()

    if lower in US_STATES:
        return lower
    if lower in STATE_ABBREVIATIONS:
        return STATE_ABBREVIATIONS[lower]

    # "Dallas, TX" style
    for part in lower.split(","):
        part = part.strip()
        if part in US_STATES:
            return part
        if part in STATE_ABBREVIATIONS:
            return STATE_ABBREVIATIONS[part]

    # Longest names first so "west virginia" wins over "virginia"
    for state in sorted(US_STATES, key=len, reverse=True):
        if re.search(r"\b%s\b" % re.escape(state), lower):
            return state

    # Bare abbreviations last; "in", "or" and "me" are also English words
    for token in re.split(r"[\s,]+", location.strip()):
        if len(token) == 2 and token.isupper() and token.lower() in STATE_ABBREVIATIONS:
            return STATE_ABBREVIATIONS[token.lower()]

    return None


def are_neighboring_states(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return b.lower().strip() in NEIGHBORS.get(a.lower().strip(), [])
