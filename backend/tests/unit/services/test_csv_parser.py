"""Unit tests for the CSV line splitter and row parser."""

from __future__ import annotations

from datetime import date

import pytest
from surveyadmin.services.imports.parser import RowError, parse_date, parse_row, split_csv_line


class TestSplitCsvLine:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ('John,Doe,"123 Main, Apt 5",30', ["John", "Doe", "123 Main, Apt 5", "30"]),
            ('Smith,"Jane ""JJ"" Middle",x', ["Smith", "Jane JJ Middle", "x"]),
            ("a,,c,", ["a", "", "c", ""]),
            ("single", ["single"]),
            ("", [""]),
        ],
    )
    def test_split(self, line, expected):
        assert split_csv_line(line) == expected

    def test_unterminated_quote_keeps_rest_in_one_field(self):
        assert split_csv_line('a,"b,c') == ["a", "b,c"]


class TestParseDate:
    def test_iso_and_us_formats_are_equivalent(self):
        assert parse_date("1990-05-15") == date(1990, 5, 15)
        assert parse_date("05/15/1990") == date(1990, 5, 15)

    @pytest.mark.parametrize(
        "value",
        [
            "15-05-1990", "1990/05/15", "yesterday", "13/01/1990",
            "1990-5-15", "5/15/1990", "1990-02-30",
        ],
    )
    def test_other_formats_are_rejected(self, value):
        with pytest.raises(RowError, match="Invalid date format"):
            parse_date(value)


class TestParseRow:
    def test_full_row(self):
        req = parse_row(
            "1,John,Doe,Q,1990-05-15,john@example.com,555-123-4567,X001", survey_id=3
        )

        assert req.survey_id == 3
        assert req.department_id == 1
        assert (req.first_name, req.last_name, req.middle_name) == ("John", "Doe", "Q")
        assert req.dob == date(1990, 5, 15)
        assert req.email == "john@example.com"
        assert req.phone == "555-123-4567"
        assert req.xid == "X001"

    def test_minimal_row_leaves_optionals_empty(self):
        req = parse_row(" 2 , Ann , Lee ,,,ann@example.com", survey_id=1)

        assert req.department_id == 2
        assert (req.first_name, req.last_name) == ("Ann", "Lee")
        assert req.middle_name is None
        assert req.dob is None
        assert req.phone is None
        assert req.xid is None

    def test_signed_department_id(self):
        assert parse_row("+7,A,B,,,a@b.co", survey_id=1).department_id == 7

    def test_us_date_in_row(self):
        req = parse_row("1,A,B,,05/15/1990,a@b.co", survey_id=1)
        assert req.dob == date(1990, 5, 15)

    @pytest.mark.parametrize(
        "line, message",
        [
            ("1,John,Doe", "Invalid CSV format. Expected at least 6 fields"),
            ("abc,John,Doe,,,j@x.io", "Invalid department ID format"),
            ("1_0,John,Doe,,,j@x.io", "Invalid department ID format"),
            ("1.0,John,Doe,,,j@x.io", "Invalid department ID format"),
            ("1, ,Doe,,,j@x.io", "First name is required"),
            ("1,John,,,,j@x.io", "Last name is required"),
            ("1,John,Doe,,,", "Email is required"),
            ("1,John,Doe,,15-05-1990,j@x.io", "Invalid date format"),
        ],
    )
    def test_row_errors(self, line, message):
        with pytest.raises(RowError, match=message):
            parse_row(line, survey_id=1)
