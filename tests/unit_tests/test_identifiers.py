"""Tests for identifier sanitization."""

import pytest

from tenantdb_api.workflow.exceptions import InvalidIdentifierError
from tenantdb_api.workflow.sql.identifiers import IdentifierSanitizer
from tenantdb_api.workflow.sql.identifiers import quote_identifier
from tenantdb_api.workflow.sql.identifiers import validate_identifier


class TestSanitize:
    """Tests for IdentifierSanitizer.sanitize."""

    @pytest.fixture
    def database_sanitizer(self):
        return IdentifierSanitizer.database()

    @pytest.fixture
    def catalog_sanitizer(self):
        return IdentifierSanitizer.catalog()

    @pytest.mark.parametrize("candidate", ["", "   ", "\t\n", None])
    def test_blank_input_returns_fallback(self, database_sanitizer, candidate):
        assert database_sanitizer.sanitize(candidate) == "DefaultProject"

    def test_fallback_is_truncated_for_catalog_variant(self, catalog_sanitizer):
        assert catalog_sanitizer.sanitize("") == "DefaultPro"

    def test_leading_digit_gets_prefix(self, database_sanitizer):
        result = database_sanitizer.sanitize("123abc")

        assert result == "DB_123abc"
        assert not result[0].isdigit()

    def test_leading_digit_after_punctuation_gets_prefix(self, database_sanitizer):
        assert database_sanitizer.sanitize("!!42 things") == "DB_42_things"

    def test_underscore_runs_collapse(self, database_sanitizer):
        assert database_sanitizer.sanitize("a__b___c") == "a_b_c"

    def test_invalid_characters_replaced_and_trimmed(self, database_sanitizer):
        assert database_sanitizer.sanitize("  My Böse Project!!  ") == "My_B_se_Project"

    def test_catalog_variant_truncates_to_ten(self, catalog_sanitizer):
        assert catalog_sanitizer.sanitize("My Böse Project!!") == "My_B_se_Pr"

    def test_truncation_does_not_leave_trailing_underscore(self, catalog_sanitizer):
        assert catalog_sanitizer.sanitize("Alpha Bet_ Gamma") == "Alpha_Bet"

    @pytest.mark.parametrize("candidate", ["!!!", "@#$%^&*()", "_" * 50, "ö" * 300])
    def test_all_invalid_input_returns_fallback(self, database_sanitizer, candidate):
        assert database_sanitizer.sanitize(candidate) == "DefaultProject"

    @pytest.mark.parametrize("max_length", [1, 3, 10, 128])
    @pytest.mark.parametrize(
        "candidate",
        ["x" * 1000, "9" * 500, "!a" * 400, "Project " * 60, "", "Ω≈ç√∫"],
    )
    def test_result_never_exceeds_max_length(self, max_length, candidate):
        sanitizer = IdentifierSanitizer(max_length=max_length)

        result = sanitizer.sanitize(candidate)

        assert 0 < len(result) <= max_length
        assert validate_identifier(result, max_length) == result

    def test_custom_rules(self):
        sanitizer = IdentifierSanitizer(max_length=20, fallback="Empty", digit_prefix="P", invalid_pattern=r"[^a-z_]")

        assert sanitizer.sanitize("7seas") == "seas"
        assert sanitizer.sanitize("_7seas") == "seas"
        assert sanitizer.sanitize("ABC") == "Empty"

    def test_sanitizer_is_callable(self, database_sanitizer):
        assert database_sanitizer("a b") == "a_b"

    def test_invalid_max_length_rejected(self):
        with pytest.raises(ValueError):
            IdentifierSanitizer(max_length=0)


class TestValidateIdentifier:
    @pytest.mark.parametrize("name", ["", "a b", "x;DROP DATABASE y", "a]b", "x" * 129])
    def test_rejects_unsafe_names(self, name):
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(name)

    def test_accepts_sanitized_name(self):
        assert validate_identifier("DB_123_abc") == "DB_123_abc"


def test_quote_identifier_escapes_closing_bracket():
    assert quote_identifier("a]b") == "[a]]b]"
    assert quote_identifier("Acme") == "[Acme]"


def test_custom_digit_prefix():
    sanitizer = IdentifierSanitizer(max_length=20, digit_prefix="P")

    assert sanitizer.sanitize("7seas") == "P7seas"
