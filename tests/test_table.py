"""
Tests for the table module.
"""

from datetime import datetime

import pytest

from src.outlook_features.table import (
    encode_table,
    escape_csv,
    split_row,
    to_csv_string,
    write_table,
)


class TestEscapeCsv:
    """Tests for escape_csv function."""

    def test_plain_word_is_unquoted(self):
        assert escape_csv("plainword") == "plainword"

    def test_comma_and_quote(self):
        assert escape_csv('a,b"c') == '"a,b\\"c"'

    def test_space_forces_quotes(self):
        assert escape_csv("two words") == '"two words"'

    def test_newline_and_tab_are_escaped(self):
        assert escape_csv("line1\nline2\tend") == '"line1\\nline2\\tend"'

    def test_other_punctuation_unchanged(self):
        assert escape_csv("a.b@c:d;e\\f") == "a.b@c:d;e\\f"

    def test_empty_string(self):
        assert escape_csv("") == ""


class TestToCsvString:
    """Tests for to_csv_string function."""

    def test_none_is_empty_field(self):
        assert to_csv_string(None) == ""

    def test_booleans(self):
        assert to_csv_string(True) == "True"
        assert to_csv_string(False) == "False"

    def test_numbers(self):
        assert to_csv_string(7) == "7"
        assert to_csv_string(0.25) == "0.25"

    def test_datetime_contains_space_so_is_quoted(self):
        assert to_csv_string(datetime(2026, 10, 18, 8, 5)) == '"2026-10-18 08:05:00"'


class TestEncodeTable:
    """Tests for encode_table function."""

    def test_header_and_rows(self):
        records = [
            {"Name": "a,b", "Count": 1, "Flag": True, "Missing": None},
            {"Name": "plain", "Count": 2, "Flag": False, "Missing": "x y"},
        ]

        assert encode_table(records) == (
            "Name,Count,Flag,Missing\n"
            '"a,b",1,True,\n'
            'plain,2,False,"x y"\n'
        )

    def test_empty_records_raise(self):
        with pytest.raises(ValueError):
            encode_table([])

    def test_header_round_trips_and_rows_match_width(self):
        records = [
            {"Subject": 'RE: "Budget", Q4\tdraft', "FolderName": "Inbox", "Result": 0.5},
            {"Subject": "hello\nworld", "FolderName": "Two words", "Result": None},
            {"Subject": "", "FolderName": "x,y,z", "Result": 1.0},
        ]

        lines = encode_table(records).splitlines()

        assert split_row(lines[0]) == ["Subject", "FolderName", "Result"]
        assert len(lines) == 4
        for line in lines[1:]:
            assert len(split_row(line)) == 3

    def test_split_row_unescapes_quoted_fields(self):
        line = encode_table([{"A": 'say "hi",\tbye\n', "B": "b"}]).splitlines()[1]
        assert split_row(line) == ['say "hi",\tbye\n', "b"]


class TestWriteTable:
    """Tests for write_table function."""

    def test_writes_and_replaces_file(self, tmp_path):
        destination = tmp_path / "out" / "EmailDataset.csv"

        write_table([{"A": 1}, {"A": 2}], destination)
        write_table([{"A": 3}], destination)

        assert destination.read_text(encoding="utf-8") == "A\n3\n"

    def test_empty_records_do_not_touch_file(self, tmp_path):
        destination = tmp_path / "EmailDataset.csv"
        destination.write_text("keep", encoding="utf-8")

        with pytest.raises(ValueError):
            write_table([], destination)

        assert destination.read_text(encoding="utf-8") == "keep"
