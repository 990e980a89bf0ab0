"""Tests for field-name resolution and value extraction."""
from __future__ import annotations

import pytest

from channel_chat.tools.fields import (
    METRIC_ALIASES,
    day_bucket,
    field_value,
    normalize_name,
    numeric_value,
    parse_date_ms,
    parse_number,
    release_ms,
    resolve_field,
)

SNAKE_RECORDS = [{"view_count": 1, "like_count": 2, "comment_count": 3, "release_date": "2024-01-01"}]
CAMEL_RECORDS = [{"viewCount": 1, "likeCount": 2, "commentCount": 3, "releaseDate": "2024-01-01"}]


class TestResolveField:
    def test_verbatim_match(self):
        assert resolve_field(SNAKE_RECORDS, "view_count") == "view_count"

    @pytest.mark.parametrize("alias,canonical", [
        ("views", "view_count"),
        ("Views", "view_count"),
        ("likes", "like_count"),
        ("comments", "comment_count"),
        ("view count", "view_count"),
        ("Like-Count", "like_count"),
    ])
    def test_aliases_resolve_to_canonical_key(self, alias, canonical):
        assert resolve_field(SNAKE_RECORDS, alias) == canonical

    def test_every_alias_resolves_when_canonical_key_present(self):
        record = {target: 1 for target in set(METRIC_ALIASES.values())}
        for alias, target in METRIC_ALIASES.items():
            assert resolve_field([record], alias) == target

    def test_alias_bridges_to_camel_case(self):
        assert resolve_field(CAMEL_RECORDS, "views") == "viewCount"
        assert resolve_field(CAMEL_RECORDS, "view_count") == "viewCount"
        assert resolve_field(CAMEL_RECORDS, "release_date") == "releaseDate"

    def test_normalized_key_match(self):
        records = [{"Watch Time": 5}]
        assert resolve_field(records, "watch_time") == "Watch Time"

    def test_unknown_falls_back_to_alias_then_original(self):
        assert resolve_field([{"title": "x"}], "views") == "view_count"
        assert resolve_field([{"title": "x"}], "nonsense") == "nonsense"

    def test_empty_records(self):
        assert resolve_field([], "likes") == "like_count"


class TestNormalizeName:
    def test_collapses_separators(self):
        assert normalize_name("View_Count") == "viewcount"
        assert normalize_name("view - count") == "viewcount"


class TestFieldValue:
    def test_snake_to_camel(self):
        assert field_value({"viewCount": 7}, "view_count") == 7

    def test_camel_to_snake(self):
        assert field_value({"view_count": 7}, "viewCount") == 7

    def test_missing(self):
        assert field_value({}, "view_count") is None


class TestParseNumber:
    @pytest.mark.parametrize("value,expected", [(3, 3), ("12", 12.0), (" 4.5 ", 4.5)])
    def test_numbers(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc", "", "nan", "inf", float("inf")])
    def test_rejected(self, value):
        assert parse_number(value) is None


class TestDates:
    def test_zulu_timestamp(self):
        assert parse_date_ms("1970-01-01T00:00:01Z") == 1000

    def test_date_only(self):
        assert parse_date_ms("1970-01-02") == 86_400_000

    def test_naive_is_utc(self):
        assert parse_date_ms("1970-01-01T00:00:02") == 2000

    def test_offset(self):
        assert parse_date_ms("1970-01-01T01:00:00+01:00") == 0

    def test_epoch_millis_pass_through(self):
        assert parse_date_ms(1_700_000_000_000) == 1_700_000_000_000

    @pytest.mark.parametrize("value", [None, "", "yesterday", True])
    def test_unparseable(self, value):
        assert parse_date_ms(value) is None

    def test_release_ms_checks_alternate_keys(self):
        assert release_ms({"publishedAt": "1970-01-01T00:00:03Z"}) == 3000
        assert release_ms({"title": "no date"}) is None

    def test_day_bucket_is_utc(self):
        assert day_bucket(parse_date_ms("2024-03-05T23:59:59-05:00")) == "2024-03-06"


class TestNumericValue:
    def test_duration_field(self):
        assert numeric_value({"duration": "PT1M"}, "duration") == 60

    def test_non_pt_duration_excluded(self):
        assert numeric_value({"duration": "1:00"}, "duration") is None

    def test_date_field(self):
        assert numeric_value({"release_date": "1970-01-01T00:00:01Z"}, "release_date") == 1000

    def test_numeric_string(self):
        assert numeric_value({"view_count": "42"}, "view_count") == 42.0

    def test_bool_is_not_numeric(self):
        assert numeric_value({"flag": True}, "flag") is None
