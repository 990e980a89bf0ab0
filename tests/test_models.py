"""Tests for the channel document types and duration parsing."""
from __future__ import annotations

import pytest

from channel_chat.models import (
    TRANSCRIPT_UNAVAILABLE,
    ChannelDocument,
    VideoRecord,
    parse_duration,
    records_from,
)


class TestParseDuration:
    @pytest.mark.parametrize("value,expected", [
        ("PT1H2M3S", 3723),
        ("PT15M33S", 933),
        ("PT45S", 45),
        ("PT2H", 7200),
        ("PT", 0),
    ])
    def test_iso_durations(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["1:02:03", "P1D", "", None, 3723])
    def test_not_a_duration(self, value):
        assert parse_duration(value) is None


class TestVideoRecord:
    def test_duration_seconds(self):
        assert VideoRecord("x", duration="PT1M5S").duration_seconds == 65

    def test_watch_url_falls_back_to_id(self):
        assert VideoRecord("abc").watch_url == "https://www.youtube.com/watch?v=abc"
        assert VideoRecord("abc", video_url="https://y/abc").watch_url == "https://y/abc"

    def test_from_dict_keeps_unknown_fields(self):
        video = VideoRecord.from_dict({"video_id": "v1", "title": "T", "viewCount": 9})
        assert video.title == "T"
        assert video.extra == {"viewCount": 9}
        assert video.to_dict()["viewCount"] == 9

    def test_from_dict_ignores_nulls(self):
        video = VideoRecord.from_dict({"video_id": "v1", "view_count": None})
        assert video.view_count == 0

    def test_from_dict_without_id(self):
        video = VideoRecord.from_dict({"title": "Orphan", "video_url": "https://y/o"})
        assert video.video_id == ""
        assert video.watch_url == "https://y/o"

    def test_frozen(self):
        video = VideoRecord("v1")
        with pytest.raises(AttributeError):
            video.title = "changed"


class TestChannelDocument:
    def test_to_dict_shape(self):
        doc = ChannelDocument("UC1", "Chan", [VideoRecord("v1", transcript=TRANSCRIPT_UNAVAILABLE)])
        data = doc.to_dict()
        assert data["channel_id"] == "UC1"
        assert data["channel_title"] == "Chan"
        assert data["videos"][0]["video_id"] == "v1"
        assert data["videos"][0]["transcript"] == "Transcript unavailable."

    def test_from_dict_accepts_bare_list(self):
        doc = ChannelDocument.from_dict([{"video_id": "v1"}, {"video_id": "v2"}])
        assert [v.video_id for v in doc.videos] == ["v1", "v2"]
        assert doc.channel_id == ""


class TestRecordsFrom:
    def test_none(self):
        assert records_from(None) == []

    def test_channel_dict(self, channel, records):
        assert records_from(channel) == records

    def test_raw_dicts_pass_through(self):
        raw = [{"title": "A", "viewCount": "12"}]
        assert records_from(raw)[0] is raw[0]

    def test_document_and_records(self):
        doc = ChannelDocument("UC1", "Chan", [VideoRecord("v1")])
        assert records_from(doc)[0]["video_id"] == "v1"
        assert records_from([VideoRecord("v2")])[0]["video_id"] == "v2"

    def test_junk(self):
        assert records_from("not a channel") == []
        assert records_from([1, "x", {"video_id": "v"}]) == [{"video_id": "v"}]
