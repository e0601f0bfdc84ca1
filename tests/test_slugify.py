"""
Unit tests for slug helpers.
"""
import pytest

from coopcms.utils.slugify import copy_slug, slugify


class TestSlugify:

    @pytest.mark.parametrize("value, expected", [
        ("Energía Solar", "energia-solar"),
        ("  Quiénes   somos  ", "quienes-somos"),
        ("Cooperativa & Comunidad!", "cooperativa-comunidad"),
        ("Año 2024", "ano-2024"),
        ("Àrea d'Influència", "area-d-influencia"),
        ("", ""),
    ])
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    def test_custom_separator(self):
        assert slugify("Energía Solar", separator="_") == "energia_solar"

    def test_none_is_empty(self):
        assert slugify(None) == ""


class TestCopySlug:

    def test_first_copy(self):
        assert copy_slug("servicios", lambda slug: False) == "servicios-copy"

    def test_numbered_when_taken(self):
        taken = {"servicios-copy", "servicios-copy-2"}
        assert copy_slug("servicios", taken.__contains__) == "servicios-copy-3"

    def test_empty_slug(self):
        assert copy_slug("", lambda slug: False) == "copy"
