"""Tests for the claim extractor."""

import pytest

from claim_oracle.domain.models.claim import ClaimType, Comparison, FeedPost, ProtocolMetric
from claim_oracle.domain.services.claim_extractor import (
    extract,
    extract_claims,
    extract_from_post,
    parse_number,
    passes_pre_filter,
)


def test_price_claim_with_thousands_separator():
    """Test the canonical price claim."""
    claim = extract("ETH will exceed $3,500 by Sunday", claim_id="p1")

    assert claim.claim_type == ClaimType.PRICE
    assert claim.extracted_value == 3500
    assert claim.subject == "ETH"
    assert claim.comparison == Comparison.ABOVE
    assert claim.claim_id == "p1"


def test_text_without_domain_tokens_is_unknown():
    claim = extract("The weather is nice today")

    assert claim.claim_type == ClaimType.UNKNOWN
    assert claim.extracted_value is None
    assert not claim.is_verifiable


@pytest.mark.parametrize(
    "text,value",
    [
        ("BTC will surpass $1.2M this cycle", 1_200_000),
        ("SOL will reach $250 this month", 250),
        ("ETH/USD above $4k before the merge anniversary", 4000),
        ("LINK hits $30.5 tomorrow", 30.5),
    ],
)
def test_price_values_are_normalised(text, value):
    claim = extract(text)

    assert claim.claim_type == ClaimType.PRICE
    assert claim.extracted_value == pytest.approx(value)


def test_below_verb_sets_polarity():
    claim = extract("BTC will drop below $50k next week")

    assert claim.claim_type == ClaimType.PRICE
    assert claim.subject == "BTC"
    assert claim.extracted_value == 50_000
    assert claim.comparison == Comparison.BELOW


@pytest.mark.parametrize(
    "text,subject,value,comparison",
    [
        ("SOL > $200", "SOL", 200, Comparison.ABOVE),
        ("BTC < $50k", "BTC", 50_000, Comparison.BELOW),
    ],
)
def test_comparison_symbol_sets_polarity(text, subject, value, comparison):
    claim = extract(text)

    assert claim.claim_type == ClaimType.PRICE
    assert claim.subject == subject
    assert claim.extracted_value == value
    assert claim.comparison == comparison


def test_reverse_price_form():
    claim = extract("Next stop $4.2k for ETH, it will hit soon")

    assert claim.claim_type == ClaimType.PRICE
    assert claim.subject == "ETH"
    assert claim.extracted_value == pytest.approx(4200)
    assert claim.comparison == Comparison.ABOVE


@pytest.mark.parametrize(
    "text",
    [
        "ETH will not exceed $4,000 this year",
        "BTC won't reach $100k",
        "ETH will be above $3,000 or below $2,500 by Friday",
    ],
)
def test_negated_or_conflicting_direction_is_unknown(text):
    assert extract(text).claim_type == ClaimType.UNKNOWN


def test_ticker_must_be_uppercase_word():
    """Lowercase words that happen to spell a ticker are not assets."""
    assert extract("eth will exceed $3,500").claim_type == ClaimType.UNKNOWN
    assert extract("ETHER will exceed $3,500").claim_type == ClaimType.UNKNOWN


def test_price_gate_requires_dollar_amount():
    assert extract("ETH will exceed 3500 soon").claim_type == ClaimType.UNKNOWN


def test_weather_claim_with_location():
    claim = extract("Stockholm precipitation probability >70% next 48h", claim_id="w1")

    assert claim.claim_type == ClaimType.WEATHER
    assert claim.extracted_value == 70
    assert claim.subject == "Stockholm"


def test_weather_claim_percent_first():
    claim = extract("70% chance of rain in London tomorrow")

    assert claim.claim_type == ClaimType.WEATHER
    assert claim.extracted_value == 70
    assert claim.subject == "London"


def test_weather_word_alone_is_not_a_claim():
    assert extract("Great weather, 100% vibes").claim_type == ClaimType.UNKNOWN


def test_tvl_drop_claim():
    claim = extract("Aave V3 TVL dropped 20% in 6h, circuit breaker threshold approaching")

    assert claim.claim_type == ClaimType.PROTOCOL_METRIC
    assert claim.metric == ProtocolMetric.TVL_DROP
    assert claim.extracted_value == 20
    assert claim.subject == "TVL"


def test_gas_claim():
    claim = extract("Gas fees above 50 gwei all week")

    assert claim.claim_type == ClaimType.PROTOCOL_METRIC
    assert claim.metric == ProtocolMetric.GAS_PRICE
    assert claim.extracted_value == 50


def test_raw_text_is_truncated():
    text = "ETH will exceed $3,500 " + "x" * 400
    claim = extract(text)

    assert len(claim.raw_text) == 280
    assert claim.claim_type == ClaimType.PRICE


def test_pre_filter_tokens():
    assert passes_pre_filter("gas is 30 gwei")
    assert passes_pre_filter("TVL is up")
    assert not passes_pre_filter("gm frens")


def test_parse_number():
    assert parse_number("3,500") == 3500
    assert parse_number("2.5", "k") == 2500
    assert parse_number("1", "M") == 1_000_000
    assert parse_number(",") is None


def test_extract_from_post_carries_author():
    post = FeedPost(id="42", author={"name": "AlphaTrader_AI"}, content="ETH will exceed $3,500 by end of week")

    claim = extract_from_post(post)

    assert claim.claim_id == "42"
    assert claim.agent_label == "AlphaTrader_AI"


def test_extract_claims_drops_unknown_and_keeps_order():
    posts = [
        FeedPost(id="1", content="gm"),
        FeedPost(id="2", content="Gas fees above 50 gwei all week"),
        FeedPost(id="3", content="ETH will exceed $3,500 by end of week"),
    ]

    claims = extract_claims(posts)

    assert [c.claim_id for c in claims] == ["2", "3"]
