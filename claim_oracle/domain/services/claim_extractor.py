"""Pattern-based extraction of verifiable claims from free text.

Extraction is gated: a text must first contain one of a fixed set of tokens
associated with verifiable domains, then satisfy every gate of a claim type
before a number is parsed. Price claims are tried first, then weather, then
protocol metrics. Anything that does not pass resolves to an unknown claim;
the extractor never raises and never performs I/O.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from ..models.claim import (
    MAX_CLAIM_TEXT,
    ClaimType,
    Comparison,
    FeedPost,
    ParsedClaim,
    ProtocolMetric,
)

PRICE_ASSETS = [
    "ETH", "BTC", "SOL", "BNB", "MATIC", "AVAX", "DOT", "LINK", "UNI", "AAVE",
]

PRE_FILTER_TOKENS = (
    "$", "USD", "%", "gwei", "TVL", "precipitation", "flooding", "price",
) + tuple(PRICE_ASSETS)

_ASSETS = "|".join(PRICE_ASSETS)
_NUMBER = r"\d[\d,]*(?:\.\d+)?"
_SUFFIX = r"[kKmM](?![A-Za-z])"
_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}

_ABOVE_VERBS = (
    r"exceed(?:s|ed)?|above|over|surpass(?:es|ed)?|greater\s+than|reach(?:es)?|hits?"
)
_BELOW_VERBS = r"below|under|drops?\s+(?:to|below)|falls?\s+below|less\s+than"
_WEATHER_KEYWORDS = r"precipitation|rain(?:fall)?|flooding|snow|humidity"

# Gates
_ASSET_RE = re.compile(rf"\b(?:{_ASSETS})\b")
_DOLLAR_RE = re.compile(r"\$[0-9]")
_VERB_RE = re.compile(rf"\b(?:will\s+)?(?:{_ABOVE_VERBS}|{_BELOW_VERBS})\b|[<>]", re.IGNORECASE)
_PERCENT_RE = re.compile(r"[0-9]+\s*%")
_WEATHER_RE = re.compile(rf"\b(?:{_WEATHER_KEYWORDS})\b", re.IGNORECASE)

# Price parsing
_PRICE_RE = re.compile(
    rf"\b(?P<asset>(?-i:{_ASSETS}))(?:/USD)?\b[^.!?\n]*?"
    rf"(?P<verb>\b(?:{_ABOVE_VERBS}|{_BELOW_VERBS})\b|[<>])"
    rf"\s*\$?(?P<number>{_NUMBER})(?P<suffix>{_SUFFIX})?",
    re.IGNORECASE,
)
_REVERSE_PRICE_RE = re.compile(
    rf"\$(?P<number>{_NUMBER})(?P<suffix>{_SUFFIX})?\s*(?:for|on)?\s*(?P<asset>(?-i:{_ASSETS}))\b",
    re.IGNORECASE,
)
_ABOVE_RE = re.compile(rf"\b(?:{_ABOVE_VERBS})\b|>", re.IGNORECASE)
_BELOW_RE = re.compile(rf"\b(?:{_BELOW_VERBS})\b|<", re.IGNORECASE)
_ABOVE_WITH_AMOUNT_RE = re.compile(rf"(?:\b(?:{_ABOVE_VERBS})\b|>)\s*\$?\d", re.IGNORECASE)
_BELOW_WITH_AMOUNT_RE = re.compile(rf"(?:\b(?:{_BELOW_VERBS})\b|<)\s*\$?\d", re.IGNORECASE)
_NEGATED_VERB_RE = re.compile(
    rf"\b(?:not|never|won't|wont|cannot|can't|isn't|unlikely\s+to)\s+(?:\w+\s+){{0,2}}"
    rf"(?:{_ABOVE_VERBS}|{_BELOW_VERBS})\b",
    re.IGNORECASE,
)

# Weather parsing
_WEATHER_VALUE_RE = re.compile(
    rf"\b(?:{_WEATHER_KEYWORDS})\b"
    r"(?:\s+(?:probability|chance|risk|likelihood|of|is|at|will\s+be))*"
    r"\s*(?:>|above|over|exceeds?)?\s*(?P<a>\d+(?:\.\d+)?)\s*%"
    r"|(?P<b>\d+(?:\.\d+)?)\s*%\s*(?:chance|probability|risk|likelihood)\s*(?:of\s+)?"
    rf"(?:{_WEATHER_KEYWORDS})",
    re.IGNORECASE,
)
_CITY_BEFORE_KEYWORD_RE = re.compile(
    rf"\b(?P<city>[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s+(?i:{_WEATHER_KEYWORDS}|weather)\b"
)
_CITY_AFTER_PREPOSITION_RE = re.compile(r"\b(?:in|for|at|over)\s+(?P<city>[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)")
_NOT_PLACES = {
    "The", "Heavy", "Light", "Chance", "No", "Any", "Some", "Will", "High", "Low",
    "Next", "This", "Today", "Tomorrow", "Monday", "Tuesday", "Wednesday",
    "Thursday", "Friday", "Saturday", "Sunday",
}

# Protocol-metric parsing
_TVL_RE = re.compile(
    r"\bTVL\s+(?:dropped|fell|decreased|down|fell\s+by)\s+(?:by\s+)?(?P<value>\d+(?:\.\d+)?)\s*%",
    re.IGNORECASE,
)
_GAS_RE = re.compile(
    r"\bgas\s+(?:fees?|prices?)\s+(?:will\s+(?:be\s+)?)?(?:above|over|exceeds?)\s+"
    r"(?P<value>\d+(?:\.\d+)?)\s*gwei",
    re.IGNORECASE,
)


def parse_number(number: str, suffix: Optional[str] = None) -> Optional[float]:
    """Normalize a numeral: strip thousands separators, apply k/M multipliers."""
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        return None
    if suffix:
        value *= _MULTIPLIERS[suffix.lower()]
    return value


def passes_pre_filter(text: str) -> bool:
    """Check for at least one token associated with a verifiable domain."""
    return any(token in text for token in PRE_FILTER_TOKENS)


def is_explicit_price_claim(text: str) -> bool:
    """Known asset ticker, a dollar amount and a comparison verb or symbol."""
    return bool(_ASSET_RE.search(text) and _DOLLAR_RE.search(text) and _VERB_RE.search(text))


def is_explicit_weather_claim(text: str) -> bool:
    """A percentage together with a weather term (not just the word "weather")."""
    return bool(_PERCENT_RE.search(text) and _WEATHER_RE.search(text))


def is_explicit_protocol_claim(text: str) -> bool:
    """An explicit "TVL dropped N%" or "gas fees above N gwei" statement."""
    return bool(_TVL_RE.search(text) or _GAS_RE.search(text))


def _polarity(verb: str) -> Comparison:
    return Comparison.BELOW if _BELOW_RE.fullmatch(verb.strip()) else Comparison.ABOVE


def _is_ambiguous_direction(text: str) -> bool:
    if _NEGATED_VERB_RE.search(text):
        return True
    return bool(_ABOVE_WITH_AMOUNT_RE.search(text) and _BELOW_WITH_AMOUNT_RE.search(text))


def _parse_price(text: str) -> Optional[Dict[str, Any]]:
    if not is_explicit_price_claim(text) or _is_ambiguous_direction(text):
        return None

    match = _PRICE_RE.search(text)
    if match:
        value = parse_number(match.group("number"), match.group("suffix"))
        comparison = _polarity(match.group("verb"))
    else:
        match = _REVERSE_PRICE_RE.search(text)
        if not match:
            return None
        value = parse_number(match.group("number"), match.group("suffix"))
        comparison = Comparison.BELOW if _BELOW_RE.search(text) and not _ABOVE_RE.search(text) else Comparison.ABOVE

    if value is None:
        return None
    return {
        "claim_type": ClaimType.PRICE,
        "extracted_value": value,
        "subject": match.group("asset").upper(),
        "comparison": comparison,
    }


def extract_location(text: str) -> Optional[str]:
    """Find a capitalized place name next to a weather term, if any."""
    for pattern in (_CITY_BEFORE_KEYWORD_RE, _CITY_AFTER_PREPOSITION_RE):
        for match in pattern.finditer(text):
            words = [w for w in match.group("city").split() if w not in _NOT_PLACES]
            if words:
                return " ".join(words)
    return None


def _parse_weather(text: str) -> Optional[Dict[str, Any]]:
    if not is_explicit_weather_claim(text):
        return None
    match = _WEATHER_VALUE_RE.search(text)
    if not match:
        return None
    value = parse_number(match.group("a") or match.group("b"))
    if value is None:
        return None
    return {
        "claim_type": ClaimType.WEATHER,
        "extracted_value": value,
        "subject": extract_location(text),
        "comparison": Comparison.ABOVE,
    }


def _parse_protocol(text: str) -> Optional[Dict[str, Any]]:
    if not is_explicit_protocol_claim(text):
        return None
    tvl = _TVL_RE.search(text)
    if tvl:
        return {
            "claim_type": ClaimType.PROTOCOL_METRIC,
            "extracted_value": parse_number(tvl.group("value")),
            "subject": "TVL",
            "metric": ProtocolMetric.TVL_DROP,
        }
    gas = _GAS_RE.search(text)
    if gas:
        return {
            "claim_type": ClaimType.PROTOCOL_METRIC,
            "extracted_value": parse_number(gas.group("value")),
            "subject": "GAS",
            "metric": ProtocolMetric.GAS_PRICE,
            "comparison": Comparison.ABOVE,
        }
    return None


def extract(raw_text: str, claim_id: str = "", agent_label: str = "unknown") -> ParsedClaim:
    """Classify text into a typed claim.

    Args:
        raw_text: Free text of the post
        claim_id: Identifier of the source post
        agent_label: Author label carried onto the verdict record

    Returns:
        The parsed claim; ``ClaimType.UNKNOWN`` when no gate is satisfied
    """
    text = raw_text or ""
    base = {
        "claim_id": claim_id,
        "raw_text": text[:MAX_CLAIM_TEXT],
        "agent_label": agent_label,
    }

    if passes_pre_filter(text):
        for parser in (_parse_price, _parse_weather, _parse_protocol):
            fields = parser(text)
            if fields is not None and fields.get("extracted_value") is not None:
                return ParsedClaim(**base, **fields)

    return ParsedClaim(claim_type=ClaimType.UNKNOWN, **base)


def extract_from_post(post: FeedPost) -> ParsedClaim:
    """Extract a claim from a feed post."""
    return extract(post.content, claim_id=post.id, agent_label=post.agent_label)


def extract_claims(posts: Iterable[FeedPost]) -> List[ParsedClaim]:
    """Extract claims from posts, keeping only the verifiable ones in feed order."""
    claims = [extract_from_post(post) for post in posts]
    return [claim for claim in claims if claim.is_verifiable]
