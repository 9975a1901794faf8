from __future__ import annotations
import re

DEFAULT_REGION = "in"

# Keywords match on word boundaries; the strongest, then longest, match wins and
# table order only breaks exact ties.
REGION_TABLE: list[tuple[tuple[str, ...], str]] = [
    (
        (
            "india", "hyderabad", "secunderabad", "telangana", "bangalore", "bengaluru", "karnataka",
            "mumbai", "maharashtra", "pune", "delhi", "new delhi", "noida", "gurgaon", "gurugram",
            "chennai", "tamil nadu", "kolkata", "ahmedabad",
        ),
        "in",
    ),
    (
        (
            "united kingdom", "uk", "england", "scotland", "wales", "london", "manchester",
            "birmingham", "edinburgh", "glasgow", "leeds", "bristol", "york",
        ),
        "gb",
    ),
    (("australia", "sydney", "melbourne", "brisbane", "perth", "adelaide", "nsw", "new south wales", "queensland", "victoria"), "au"),
    (("canada", "toronto", "vancouver", "montreal", "ontario", "calgary", "ottawa", "british columbia"), "ca"),
    (("germany", "deutschland", "berlin", "munich", "münchen", "hamburg", "frankfurt", "cologne", "stuttgart"), "de"),
    (
        (
            "united states", "usa", "us", "america", "new york", "san francisco", "los angeles", "chicago",
            "boston", "seattle", "austin", "denver", "miami", "atlanta", "dallas", "houston", "california",
            "texas", "washington", "indiana", "indianapolis",
        ),
        "us",
    ),
]

SUPPORTED_REGIONS = tuple(code for _, code in REGION_TABLE)


def sanitize_location(location: str | None) -> str:
    """Strip postal codes and hyphenated suffixes: "Secunderabad - 500017" -> "Secunderabad"."""
    text = (location or "").strip()
    if not text:
        return ""
    text = text.split("-", 1)[0]
    text = re.sub(r"\d+", "", text)
    return " ".join(text.split()).strip(" ,")


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def _match_strength(needle: str, keyword: str) -> int:
    """3 = equal, 2 = keyword inside the input, 1 = input inside the keyword, 0 = no match."""
    if needle == keyword:
        return 3
    if _contains_phrase(needle, keyword):
        return 2
    if len(needle) > 3 and _contains_phrase(keyword, needle):
        return 1
    return 0


def match_region(location: str | None) -> str | None:
    needle = sanitize_location(location).lower()
    if not needle:
        return None
    best: tuple[int, int] = (0, 0)
    code_found = None
    for keywords, code in REGION_TABLE:
        for keyword in keywords:
            strength = _match_strength(needle, keyword)
            # Stronger match first, then the longer keyword ("new south wales" over "wales").
            if strength and (strength, len(keyword)) > best:
                best = (strength, len(keyword))
                code_found = code
    return code_found


def resolve_region(location: str | None = None, ip_detected_city: str | None = None, default: str = DEFAULT_REGION) -> str:
    return match_region(location) or match_region(ip_detected_city) or default
