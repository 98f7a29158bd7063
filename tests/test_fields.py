"""Tests for column alias resolution and list splitting."""

import pytest

from ourjourney.parsers.fields import (
    CATEGORY_ALIASES,
    first_present,
    is_blank,
    resolve,
)
from ourjourney.parsers.lists import split_list

# =============================================================================
# List Splitting
# =============================================================================


class TestSplitList:
    """Tests for comma-separated list cells."""

    def test_trims_and_drops_empty_tokens(self) -> None:
        assert split_list("a, b ,c,,d") == ["a", "b", "c", "d"]

    @pytest.mark.parametrize("raw", [None, "", " , ,", float("nan")])
    def test_blank_gives_empty_list(self, raw) -> None:
        assert split_list(raw) == []

    def test_keeps_order_and_duplicates(self) -> None:
        assert split_list("z.jpg, a.jpg, z.jpg") == ["z.jpg", "a.jpg", "z.jpg"]

    def test_single_token(self) -> None:
        assert split_list("photo1.jpg") == ["photo1.jpg"]

    def test_non_string_is_stringified(self) -> None:
        assert split_list(7) == ["7"]


# =============================================================================
# Alias Resolution
# =============================================================================


class TestFirstPresent:
    """Tests for first_present()."""

    def test_categories_beats_tags(self) -> None:
        row = {"categories": "X", "tags": "Y"}
        assert first_present(row, CATEGORY_ALIASES) == "X"

    def test_empty_cell_falls_through(self) -> None:
        row = {"categories": "", "tags": "Y"}
        assert first_present(row, CATEGORY_ALIASES) == "Y"

    def test_capitalised_alias(self) -> None:
        assert first_present({"Tags": "beach"}, CATEGORY_ALIASES) == "beach"

    def test_nothing_present(self) -> None:
        assert first_present({"title": "x"}, CATEGORY_ALIASES) is None

    def test_zero_is_present(self) -> None:
        assert first_present({"latitude": 0}, ("latitude",)) == 0


class TestIsBlank:
    """Tests for is_blank()."""

    @pytest.mark.parametrize("value", [None, "", float("nan")])
    def test_blank(self, value) -> None:
        assert is_blank(value) is True

    @pytest.mark.parametrize("value", [" ", 0, 0.0, "0", False])
    def test_not_blank(self, value) -> None:
        assert is_blank(value) is False


class TestResolve:
    """Tests for resolve()."""

    def test_scalar_columns(self) -> None:
        resolved = resolve({"id": 3, "title": "Trip", "latitude": "1.5"})
        assert resolved.id == 3
        assert resolved.title == "Trip"
        assert resolved.latitude == "1.5"
        assert resolved.country is None

    def test_media_aliases(self) -> None:
        resolved = resolve(
            {"photos": "old.jpg", "photoFiles": "new.jpg", "videos": "v.mp4", "audio": "a.mp3"}
        )
        assert resolved.photo_raw == "new.jpg"
        assert resolved.video_raw == "v.mp4"
        assert resolved.audio_raw == "a.mp3"

    def test_identifier_alias(self) -> None:
        assert resolve({"Identifier": "Alps"}).identifier_raw == "Alps"

    def test_values_are_not_coerced(self) -> None:
        resolved = resolve({"categories": 42})
        assert resolved.categories_raw == 42
