"""Tests for OCR text normalization and VIN correction."""

import pytest

from valuation_ocr.preprocessing.text_normalizer import normalize, repair_labels
from valuation_ocr.preprocessing.vin_correction import (
    correct_labeled_vin,
    correct_standalone_vins,
)


class TestLabeledVinCorrection:
    """Tests for VINs printed after a VIN label."""

    def test_valid_vin_unchanged(self) -> None:
        text = "VIN: WBS33AY09NFL79043"
        assert normalize(text) == text

    def test_wmi_fix(self) -> None:
        assert normalize("VIN: W6A5R1C05FD123456") == "VIN: WBA5R1C05FD123456"

    def test_letter_o_becomes_zero(self) -> None:
        assert normalize("VIN 1HGCM82633A0O4352") == "VIN 1HGCM82633A004352"

    def test_misread_nine(self) -> None:
        assert correct_labeled_vin("1FTFW1EIF4MFA12345") == "1FTFW1E94MFA12345"

    def test_inserted_noise_dropped_at_index_five(self) -> None:
        assert correct_labeled_vin("WBS33XAY09NFL79043") == "WBS33AY09NFL79043"

    def test_multi_glyph_fix_skipped_when_too_short(self) -> None:
        assert correct_labeled_vin("1FTFW1EIF4MFA1234") == "1FTFW1E1F4MFA1234"

    def test_lowercase_body_ignored(self) -> None:
        text = "VIN: wbs33ay09nfl79043"
        assert normalize(text) == text

    def test_labeled_token_skips_standalone_fix(self) -> None:
        text = "VIN: JHAGE8H59DC012345"
        assert normalize(text) == text


class TestStandaloneVinCorrection:
    """Tests for bare VIN tokens."""

    def test_documented_prefix_fixed(self) -> None:
        assert correct_standalone_vins("ref JHAGE8H59DC012345") == "ref JH4GE8H59DC012345"

    def test_valid_wmi_untouched(self) -> None:
        text = "Chassis 1GAZG1FG5D1234567 noted"
        assert correct_standalone_vins(text) == text


class TestLabelRepair:
    """Tests for corrupted field labels."""

    @pytest.mark.parametrize(
        "corrupted",
        ["oss vehicle:", "Loss ehicle:", "oss ehicle:"],
    )
    def test_loss_vehicle(self, corrupted: str) -> None:
        assert repair_labels(f"{corrupted} 2019 Toyota Camry |") == (
            "Loss vehicle: 2019 Toyota Camry |"
        )

    def test_settlement_value(self) -> None:
        assert repair_labels("ettle ent Value: $1.00") == "Settlement Value: $1.00"

    def test_correct_labels_untouched(self) -> None:
        text = "Loss vehicle: 2019 Toyota Camry |\nSettlement Value: $1.00"
        assert repair_labels(text) == text


class TestNormalize:
    """Tests for the normalize entry point."""

    def test_empty(self) -> None:
        assert normalize("") == ""

    def test_idempotent_on_clean_report(self, mitchell_text: str) -> None:
        assert normalize(normalize(mitchell_text)) == normalize(mitchell_text)

    @pytest.mark.parametrize(
        "corrupted",
        [
            "oss vehicle: 2022 BMW M3 | Sedan\n"
            "VIN: W6S33XAY09NFL79O43\n"
            "ettle ent Value\n$51,402.67\n"
            "JHAGE8H59DC012345",
            "VIN: WBS33XAY09NFL79O4312",
            "VIN: W6S33XAYZZ09NFL79O43QQ",
            "VIN 1FTFW1EIFF4MFA12345",
            "VIN: 1FTFW1EIF4MFA1234",
            "VIN:\nW6A5R1C05FD123456",
            "Comparable JHAGE8H59DC012345 listed",
            "Loss ehicle: 2019 Honda Civic | Sedan\nVIN: JHAGE8H59DC0I2345",
        ],
    )
    def test_idempotent_on_corrupted_text(self, corrupted: str) -> None:
        once = normalize(corrupted)
        assert normalize(once) == once

    def test_split_label_corrected(self) -> None:
        assert normalize("VIN:\nW6A5R1C05FD123456") == "VIN:\nWBA5R1C05FD123456"

    def test_combined_corrections(self) -> None:
        text = normalize("oss vehicle: 2022 BMW M3 | Sedan\nVIN: W6S33XAY09NFL79O43")
        assert text == "Loss vehicle: 2022 BMW M3 | Sedan\nVIN: WBS33AY09NFL79043"
