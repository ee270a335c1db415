"""Tests for file ingestion and column selection."""

import json

import pandas as pd
import pytest

from sentipulse.core.exceptions import ColumnNotFoundError, InvalidAnalysisFileError, UnsupportedFileError
from sentipulse.core.models import Dataset, ExportedAnalysis
from sentipulse.services.ingestion import (
    build_records,
    default_columns,
    default_text_column,
    detect_column,
    load_file,
    parse_engagement,
    parse_verified,
)
from sentipulse.utils.data_prep import export_to_json


class TestLoadFile:
    """Test reading each supported format."""

    def test_csv(self, tmp_path):
        path = tmp_path / "tweets.csv"
        path.write_text(
            "id,user,date,comment_text,likes,verified\n"
            '1,ann,2024-01-01,"Love it, really",12,true\n'
            "2,bob,2024-01-02,,3,false\n",
            encoding="utf-8",
        )
        dataset = load_file(path)

        assert isinstance(dataset, Dataset)
        assert dataset.columns == ["id", "user", "date", "comment_text", "likes", "verified"]
        assert dataset.rows[0]["comment_text"] == "Love it, really"
        assert dataset.rows[1]["comment_text"] == ""

    def test_csv_windows_arabic_encoding(self, tmp_path):
        path = tmp_path / "arabic.csv"
        path.write_bytes("comment\nجيد جدا\n".encode("cp1256"))
        dataset = load_file(path)
        assert dataset.rows[0]["comment"] == "جيد جدا"

    def test_excel_first_sheet(self, tmp_path):
        path = tmp_path / "reviews.xlsx"
        pd.DataFrame({"review": ["Great", "Bad"], "likes": [3, 5]}).to_excel(path, index=False)
        dataset = load_file(path)

        assert dataset.columns == ["review", "likes"]
        assert [row["review"] for row in dataset.rows] == ["Great", "Bad"]
        assert parse_engagement(dataset.rows[1]["likes"]) == 5.0

    def test_json_rows(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps([{"text": "a", "likes": 1}, {"text": "b", "likes": 2}]), encoding="utf-8")
        dataset = load_file(path)
        assert dataset.columns == ["text", "likes"]
        assert len(dataset.rows) == 2

    def test_json_single_object(self, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps({"message": "hello"}), encoding="utf-8")
        dataset = load_file(path)
        assert dataset.rows == [{"message": "hello"}]
        assert dataset.columns == ["message"]

    def test_json_exported_analysis(self, tmp_path, make_analysis):
        path = tmp_path / "export.json"
        export_to_json(make_analysis(["positive", "negative"]), path)
        loaded = load_file(path)
        assert isinstance(loaded, ExportedAnalysis)
        assert loaded.stats.total == 2

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidAnalysisFileError):
            load_file(path)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(UnsupportedFileError):
            load_file(path)


class TestColumnSelection:
    """Test keyword-based column detection."""

    def test_keyword_order_wins(self):
        assert detect_column(["name", "body", "Review"], ["comment", "text", "review", "body"]) == "Review"

    def test_no_match(self):
        assert detect_column(["a", "b"], ["comment"]) is None

    def test_text_fallbacks(self):
        assert default_text_column(["a", "b", "c", "d", "e"]) == "d"
        assert default_text_column(["a", "b"]) == "a"
        assert default_text_column([]) is None

    def test_default_columns(self):
        columns = ["id", "user", "date", "comment_text", "likes", "is_verified"]
        assert default_columns(columns) == {
            "text": "comment_text",
            "verified": "is_verified",
            "engagement": "likes",
        }


class TestCoercion:
    """Test verified and engagement coercion."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "Yes", "1", 1, True])
    def test_verified_true(self, value):
        assert parse_verified(value) is True

    @pytest.mark.parametrize("value", ["false", "no", "0", "", None, float("nan"), "verified"])
    def test_verified_false(self, value):
        assert parse_verified(value) is False

    @pytest.mark.parametrize("value,expected", [
        ("12", 12.0),
        ("3.5k", 3.5),
        (" 42 likes", 42.0),
        ("1e3", 1000.0),
        (7, 7.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
        ("-4", 0.0),
        (True, 0.0),
    ])
    def test_engagement(self, value, expected):
        assert parse_engagement(value) == expected


class TestBuildRecords:
    """Test building input records from rows."""

    @pytest.fixture
    def dataset(self):
        return Dataset(
            rows=[
                {"text": "  first  ", "verified": "yes", "likes": "10"},
                {"text": "   ", "verified": "yes", "likes": "99"},
                {"text": "second", "verified": "no", "likes": "n/a"},
            ],
            columns=["text", "verified", "likes"],
        )

    def test_records(self, dataset):
        records = build_records(dataset, "text", "verified", "likes")
        assert [(r.text, r.is_verified, r.engagement) for r in records] == [
            ("first", True, 10.0),
            ("second", False, 0.0),
        ]

    def test_optional_columns_absent(self, dataset):
        records = build_records(dataset, "text")
        assert all(not r.is_verified and r.engagement == 0.0 for r in records)

    def test_missing_column(self, dataset):
        with pytest.raises(ColumnNotFoundError) as exc_info:
            build_records(dataset, "comment")
        assert exc_info.value.available == ["text", "verified", "likes"]
