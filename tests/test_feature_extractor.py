"""Tests for feature extraction and lenient parsing."""

import pytest

from churnstream.features import FEATURE_DEFS, FeatureDef, FeatureExtractor, hash_text, to_bool_yes, to_num
from churnstream.features.feature_extractor import cohort_tier

from conftest import SEGMENTS, make_record


@pytest.fixture
def extractor(test_config):
    return FeatureExtractor(test_config)


@pytest.mark.parametrize("value,expected", [
    ("3.5", 3.5),
    ("  42 ", 42.0),
    ("-7", -7.0),
    ("1e2", 100.0),
    ("", 0.0),
    ("abc", 0.0),
    ("12abc", 0.0),
    (None, 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    ("1e999", 0.0),
    ("1_000", 0.0),
    ("0x1F", 0.0),
    (".5", 0.5),
    ("5.", 5.0),
    ("+2", 2.0),
])
def test_to_num_is_lenient(value, expected):
    assert to_num(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("yes", 1),
    (" YES ", 1),
    ("Yes", 1),
    ("no", 0),
    ("y", 0),
    ("", 0),
    (None, 0),
])
def test_to_bool_yes(value, expected):
    assert to_bool_yes(value) == expected


def test_hash_text_matches_polynomial_rolling_hash():
    assert hash_text("") == 0
    assert hash_text("a") == 97
    assert hash_text("ab") == 97 * 31 + 98

    expected = 0
    for char in "KS-415-0":
        expected = (expected * 31 + ord(char)) % 2147483647
    assert hash_text("KS-415-0") == expected


def test_hash_text_stays_below_modulus():
    assert 0 <= hash_text("x" * 500) < 2147483647


def test_hash_text_uses_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert hash_text("\U0001F600") == 0xD83D * 31 + 0xDE00
    assert hash_text("\u00e9") == 0xE9


@pytest.mark.parametrize("day,eve,tier", [
    (250, 200, "Premium"),
    (215, 100, "Standard"),
    (210, 210, "Mobile"),
    (100, 100, "Mobile"),
    (100, 321, "Premium"),
])
def test_cohort_tier_thresholds(day, eve, tier):
    assert cohort_tier(day, eve) == tier


def test_extract_derives_row_attributes(extractor):
    raw = make_record(**{"total day calls": "100", "total eve calls": "101", "total night calls": "102"})
    row = extractor.extract(raw, 0)

    assert row.id == "382-4657"
    assert row.state == "KS"
    assert row.tier == "Premium"
    assert row.actual_churn == 0
    assert row.minutes == pytest.approx(265.1 + 197.4 + 244.7 + 10)
    assert row.service_calls == 1
    assert row.interaction_pulse == 101
    assert row.segment == SEGMENTS[hash_text("KS-415-0") % len(SEGMENTS)]


def test_extract_reads_churn_label(extractor):
    assert extractor.extract(make_record(churn="True"), 0).actual_churn == 1
    assert extractor.extract(make_record(churn=" true "), 0).actual_churn == 1
    assert extractor.extract(make_record(churn="1"), 0).actual_churn == 0


def test_extract_never_raises_on_malformed_record(extractor):
    row = extractor.extract({"total day minutes": "lots", "customer service calls": "??"}, 3)

    assert row.id == "NA-3"
    assert row.state == "NA"
    assert row.segment == SEGMENTS[hash_text("NA-000-3") % len(SEGMENTS)]
    assert row.minutes == 0
    assert row.service_calls == 0
    assert row.tier == "Mobile"
    assert row.actual_churn == 0
    assert extractor.vector(row.raw) == [0.0] * len(FEATURE_DEFS)


def test_segment_assignment_is_deterministic(extractor, records):
    first = [row.segment for row in extractor.extract_all(records)]
    second = [row.segment for row in extractor.extract_all(records)]

    assert first == second
    assert set(first) <= set(SEGMENTS)


def test_segment_depends_on_index(extractor):
    raw = make_record()
    segments = {extractor.extract(raw, i).segment for i in range(50)}
    assert len(segments) > 1


def test_vector_follows_feature_order(extractor):
    raw = make_record(**{"international plan": "yes", "voice mail plan": "no"})
    vector = extractor.vector(raw)

    assert len(vector) == len(FEATURE_DEFS)
    assert vector == [128.0, 1.0, 0.0, 25.0, 265.1, 197.4, 244.7, 10.0, 1.0]


def test_vector_with_custom_defs(test_config):
    defs = (FeatureDef("b", "B", "boolean_yes"), FeatureDef("a", "A"))
    extractor = FeatureExtractor(test_config, feature_defs=defs)

    assert extractor.vector({"a": "2.5", "b": "Yes"}) == [1.0, 2.5]
    assert extractor.feature_names == ["B", "A"]


def test_model_row_raw_is_read_only(extractor):
    row = extractor.extract(make_record(), 0)
    with pytest.raises(TypeError):
        row.raw["state"] = "OH"


def test_empty_segment_list_rejected(test_config):
    with pytest.raises(ValueError):
        FeatureExtractor(test_config, segments=[])
