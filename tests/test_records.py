"""
Tests for field normalization and identifier helpers.
"""

from credbazar_core.records import (
    FIELD_MAP,
    mask_identifier,
    normalize_record,
    validate_identifier,
)


class TestNormalizeRecord:
    """Tests for canonical column naming."""

    def test_known_fields_renamed(self):
        """Mapped fields take their canonical names."""
        out = normalize_record({"PAN1": "ABCDE1234F", "company": "Acme"})

        assert out == {"PAN": "ABCDE1234F", "Company": "Acme"}

    def test_unknown_fields_pass_through(self):
        """Fields absent from the map keep their names."""
        out = normalize_record({"FavouriteColour": "blue"})

        assert out == {"FavouriteColour": "blue"}

    def test_whitespace_padded_key_is_mapped(self):
        """A key matching the map after trimming is mapped."""
        out = normalize_record({" PAN1 ": "X"})

        assert out == {"PAN": "X"}

    def test_key_order_preserved(self):
        """Output keys follow input order."""
        raw = {"mobile": "9876543210", "LoanAmount": 50000, "company": "Acme"}

        assert list(normalize_record(raw)) == ["mobile", "LoanAmount", "Company"]

    def test_values_untouched(self):
        """Values are not converted."""
        out = normalize_record({"LoanAmount": 50000})

        assert out["LoanAmount"] == 50000

    def test_custom_map(self):
        """A caller-supplied map replaces the default."""
        out = normalize_record({"a": 1}, field_map={"a": "Alpha"})

        assert out == {"Alpha": 1}

    def test_default_map_identity_entries(self):
        """Identity entries in the default map keep their names."""
        assert FIELD_MAP["LoanAmount"] == "LoanAmount"
        assert FIELD_MAP["PAN1"] == "PAN"


class TestIdentifiers:
    """Tests for identifier validation and masking."""

    def test_valid_identifier(self):
        assert validate_identifier("9876543210") is True

    def test_invalid_identifiers(self):
        """Wrong length, letters and non-strings are rejected."""
        assert validate_identifier("12345") is False
        assert validate_identifier("98765432101") is False
        assert validate_identifier("98765abcde") is False
        assert validate_identifier("9876543210\n") is False
        assert validate_identifier("") is False
        assert validate_identifier(None) is False
        assert validate_identifier(9876543210) is False

    def test_mask_identifier(self):
        """Only the last four digits stay visible."""
        assert mask_identifier("9876543210") == "******3210"

    def test_mask_empty(self):
        assert mask_identifier("") == ""
