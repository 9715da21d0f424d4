"""Tests for card ids, deck names, breadcrumbs, links and tags."""

import pytest

from obsidian_flashcard_sync.sync.naming import (
    build_breadcrumb,
    build_card_tags,
    build_deck_name,
    card_tag,
    compute_card_id,
    create_obsidian_link,
    fnv1a_32,
    sanitize_path_for_tag,
)


class TestFnv1a:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0x811C9DC5), ("a", 0xE40C292C), ("foobar", 0xBF9CF968)],
    )
    def test_known_vectors(self, text: str, expected: int) -> None:
        assert fnv1a_32(text) == expected

    def test_astral_character_hashes_as_two_code_units(self) -> None:
        value = 0x811C9DC5
        for unit in (0xD83D, 0xDE00):
            value = ((value ^ unit) * 0x01000193) & 0xFFFFFFFF

        assert fnv1a_32("\U0001F600") == value


class TestCardId:
    def test_id_is_base36_of_hash(self) -> None:
        card_id = compute_card_id("a/b.md", "Q", "A")

        assert card_id == card_id.lower()
        assert int(card_id, 36) == fnv1a_32("a/b.md\x00q\x00a")

    def test_whitespace_and_case_do_not_change_id(self) -> None:
        assert compute_card_id("n.md", "a\n\nb", "X") == compute_card_id(
            "n.md", "  A b ", "x"
        )

    @pytest.mark.parametrize(
        ("path", "front", "back"),
        [("other.md", "Q", "A"), ("n.md", "Q?", "A"), ("n.md", "Q", "B")],
    )
    def test_path_front_and_back_all_matter(self, path, front, back) -> None:
        assert compute_card_id(path, front, back) != compute_card_id("n.md", "Q", "A")

    def test_fields_do_not_bleed_into_each_other(self) -> None:
        assert compute_card_id("n.md", "ab", "c") != compute_card_id("n.md", "a", "bc")


class TestDeckName:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("a/b.md", "Root::a"),
            ("b.md", "Root"),
            ("a/b/c.md", "Root::a::b"),
            ("a:b/c.md", "Root::a-b"),
        ],
    )
    def test_folders_become_subdecks(self, path: str, expected: str) -> None:
        assert build_deck_name(path, "Root") == expected

    def test_root_is_trimmed(self) -> None:
        assert build_deck_name("a/b.md", "  Obsidian ") == "Obsidian::a"


class TestBreadcrumbAndLink:
    def test_breadcrumb_drops_extension(self) -> None:
        assert build_breadcrumb("a/b/c.md") == "a / b / c"
        assert build_breadcrumb("note.md") == "note"

    def test_link_encodes_like_uri_components(self) -> None:
        assert (
            create_obsidian_link("My Vault", "a b/c.md", 3)
            == "obsidian://open?vault=My%20Vault&file=a%20b%2Fc.md&line=3"
        )

    def test_link_keeps_unreserved_marks(self) -> None:
        assert "file=it's(1)!.md" in create_obsidian_link("v", "it's(1)!.md", 1)


class TestTags:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("Notes/My File.md", "notes::my_file"),
            ("Ünïcode.md", "_n_code"),
            ("a\\b.MD", "a::b"),
            ("x  &  y.md", "x_y"),
        ],
    )
    def test_sanitize_path_for_tag(self, path: str, expected: str) -> None:
        assert sanitize_path_for_tag(path) == expected

    def test_card_tag(self) -> None:
        assert card_tag("abc") == "card::abc"

    def test_build_card_tags(self) -> None:
        assert build_card_tags("abc", "a/b.md") == [
            "obsidian-anki-sync",
            "card::abc",
            "path::a::b",
        ]
