"""Unit tests for ingredient validation."""

import pytest

from src.pipeline.validator import is_valid


class TestBasicRules:
    """Length, alphabetic and blocklist checks."""

    def test_concrete_food_is_valid(self):
        assert is_valid("tomatoes") is True

    def test_single_character_rejected(self):
        assert is_valid("a") is False

    @pytest.mark.parametrize("token", [" a", "a  ", "\tb\n"])
    def test_length_checked_after_trimming(self, token):
        assert is_valid(token) is False

    def test_digits_only_rejected(self):
        assert is_valid("1234") is False

    def test_punctuation_only_rejected(self):
        assert is_valid("--") is False

    @pytest.mark.parametrize("term", ["vegetables", "fruit", "condiments", "container", "fridge", "various", "oil"])
    def test_generic_terms_rejected(self, term):
        assert is_valid(term) is False

    def test_blocklist_is_case_insensitive(self):
        assert is_valid("  Vegetables ") is False

    def test_blocklist_is_exact_match_only(self):
        """Specific items containing a generic word are allowed."""
        assert is_valid("olive oil") is True
        assert is_valid("orange juice") is True

    def test_custom_blocklist(self):
        assert is_valid("kale", blocked_terms=frozenset({"kale"})) is False


class TestDietaryRestrictions:
    """Vegan, vegetarian and gluten-free exclusions."""

    def test_vegan_rejects_meat(self):
        assert is_valid("chicken breast", "vegan") is False

    def test_vegetarian_rejects_meat(self):
        assert is_valid("chicken breast", "vegetarian") is False

    def test_vegan_allows_tofu(self):
        assert is_valid("tofu", "vegan") is True

    def test_vegan_rejects_dairy_and_eggs(self):
        assert is_valid("whole milk", "vegan") is False
        assert is_valid("eggs", "Vegan") is False

    def test_vegetarian_allows_dairy(self):
        assert is_valid("cheddar cheese", "vegetarian") is True

    def test_vegetarian_rejects_ham(self):
        assert is_valid("smoked ham", "vegetarian") is False

    def test_vegan_takes_precedence_over_vegetarian(self):
        """With both words present, the stricter vegan list applies."""
        assert is_valid("greek yogurt", "vegetarian, vegan") is False

    def test_gluten_free_rejects_gluten(self):
        assert is_valid("sourdough bread", "gluten-free") is False
        assert is_valid("soy sauce", "gluten-free") is False

    def test_gluten_free_checked_alongside_vegan(self):
        assert is_valid("whole wheat pasta", "vegan, gluten-free") is False
        assert is_valid("brown rice", "vegan, gluten-free") is True

    def test_no_restrictions(self):
        assert is_valid("bacon", None) is True
        assert is_valid("bacon", "") is True
