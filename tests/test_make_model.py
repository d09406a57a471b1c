"""Tests for make/model parsing."""

import pytest

from valuation_ocr.extraction.make_model import (
    clean_model,
    find_manufacturer,
    parse_make_model,
)


class TestParseMakeModel:
    """Tests for the parse_make_model function."""

    @pytest.mark.parametrize(
        ("description", "expected"),
        [
            ("BMW M3 Competition", ("BMW", "M3 Competition")),
            ("Land Rover Range Rover Sport | HSE", ("Land Rover", "Range Rover Sport")),
            ("Mercedes-Benz GLC 300 | SUV", ("Mercedes-Benz", "GLC 300")),
            ("Dodge Ram 1500", ("Dodge Ram", "1500")),
            ("toyota camry", ("Toyota", "camry")),
        ],
    )
    def test_lexicon_match(self, description: str, expected: tuple[str, str]) -> None:
        assert parse_make_model(description) == expected

    def test_earliest_match_wins(self) -> None:
        assert parse_make_model("Ram 1500 built by Dodge") == ("Ram", "1500 built by Dodge")

    def test_word_boundaries(self) -> None:
        name, start, _ = find_manufacturer("Oxford Ford Focus")
        assert (name, start) == ("Ford", 7)

    def test_ocr_fragment(self) -> None:
        assert parse_make_model("oyota Corolla LE") == ("Toyota", "Corolla LE")

    def test_first_token_fallback(self) -> None:
        assert parse_make_model("Zonda Cinque | Coupe") == ("Zonda", "Cinque")

    def test_make_only(self) -> None:
        assert parse_make_model("Tesla") == ("Tesla", "")

    @pytest.mark.parametrize("description", ["", "   ", "| Sedan", "2022 | x"])
    def test_unusable(self, description: str) -> None:
        assert parse_make_model(description) is None


class TestCleanModel:
    """Tests for model text cleanup."""

    def test_leading_junk_and_special_characters(self) -> None:
        assert clean_model("--*Camry  SE!!") == "Camry SE"

    def test_keeps_hyphens_and_dots(self) -> None:
        assert clean_model(" F-150 XLT 5.0") == "F-150 XLT 5.0"
