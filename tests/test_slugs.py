"""
Tests for slug derivation and collision resolution.
"""

from private_booking.core.slugs import natural_key, next_available_slug, slugify


class TestSlugify:
    def test_basic(self):
        assert slugify("Lake Cabin") == "lake-cabin"

    def test_accents_and_punctuation(self):
        assert slugify("  Château d'Été!  ") == "chateau-d-ete"

    def test_nothing_usable(self):
        assert slugify("!!!") == "item"


class TestNextAvailableSlug:
    def test_free_base(self):
        assert next_available_slug("item-name", []) == "item-name"

    def test_base_taken(self):
        assert next_available_slug("item-name", ["item-name"]) == "item-name-1"

    def test_extrapolates_from_highest_suffix(self):
        # item-name-1 was deleted, item-name-2 still exists
        assert next_available_slug("item-name", ["item-name", "item-name-2"]) == "item-name-3"

    def test_numeric_order_not_lexical(self):
        slugs = ["cabin", "cabin-2", "cabin-10", "cabin-9"]
        assert next_available_slug("cabin", slugs) == "cabin-11"

    def test_base_deleted_family_remains(self):
        assert next_available_slug("cabin", ["cabin-4"]) == "cabin-5"

    def test_other_families_ignored(self):
        slugs = ["cabin-lake", "cabins", "lake-cabin-3"]
        assert next_available_slug("cabin", slugs) == "cabin"

    def test_base_ending_in_digits(self):
        assert next_available_slug("room-101", ["room-101"]) == "room-101-1"
        assert next_available_slug("room-101", ["room-101", "room-101-1"]) == "room-101-2"


def test_natural_key_orders_numbers():
    assert sorted(["a-10", "a-2", "a-1"], key=natural_key) == ["a-1", "a-2", "a-10"]
