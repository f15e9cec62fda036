"""Unit tests for the pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pokeshelf.models.catalog import ARTWORK_URL, CatalogEntry
from pokeshelf.models.functions import ImportRequest, NotificationResult
from pokeshelf.models.profile import Profile


class TestCatalogEntry:
    def test_name_is_normalized(self) -> None:
        assert CatalogEntry(id=25, name="  Pikachu ").name == "pikachu"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            CatalogEntry(id=25, name=name)

    def test_id_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CatalogEntry(id=0, name="missingno")

    def test_searchable(self) -> None:
        assert CatalogEntry(id=25, name="pikachu").searchable is True
        assert CatalogEntry(id=150, name="mewtwo", is_hidden=True).searchable is False
        assert CatalogEntry(id=151, name="mew", is_active=False).searchable is False

    def test_image_prefers_official_artwork(self) -> None:
        entry = CatalogEntry(
            id=25,
            name="pikachu",
            sprites={
                "front_default": "https://img.test/front.png",
                "other": {"official-artwork": {"front_default": "https://img.test/art.png"}},
            },
        )
        assert entry.image_url == "https://img.test/art.png"

    def test_image_falls_back_to_sprite_then_artwork_url(self) -> None:
        sprite = CatalogEntry(id=25, name="pikachu", sprites={"front_default": "https://s.test"})
        assert sprite.image_url == "https://s.test"
        assert CatalogEntry(id=25, name="pikachu").image_url == ARTWORK_URL.format(id=25)

    def test_to_row_omits_timestamps(self) -> None:
        row = CatalogEntry(id=25, name="pikachu").to_row()
        assert row["id"] == 25
        assert "created_at" not in row
        assert "updated_at" not in row

    def test_from_api_document(self) -> None:
        entry = CatalogEntry.from_api(
            {
                "id": 25,
                "name": "pikachu",
                "height": 4,
                "weight": 60,
                "types": [{"slot": 1, "type": {"name": "electric"}}],
                "sprites": {"front_default": "https://s.test"},
                "species": {"url": "https://pokeapi.co/api/v2/pokemon-species/25/"},
                "moves": [{"move": {"name": "thunder-shock"}}],
            }
        )
        assert entry.height == 4
        assert entry.types[0]["type"]["name"] == "electric"
        assert entry.species_url == "https://pokeapi.co/api/v2/pokemon-species/25/"
        assert entry.abilities == []


def test_import_request_defaults() -> None:
    assert ImportRequest().model_dump() == {"start": 1, "end": 100}


def test_notification_without_details_counts_zero() -> None:
    result = NotificationResult(success=True)
    assert (result.sent, result.failed) == (0, 0)


def test_profile_admin_role() -> None:
    assert Profile(id="u", role="admin").is_admin is True
    assert Profile(id="u").is_admin is False
