"""Tests for hierarchical account path functions."""

import pytest

from ledgerbook.domain import account_path
from ledgerbook.domain.errors import (
    EmptyPathError,
    ExceedsMaxDepthError,
    InvalidSegmentError,
    ValidationError,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Ausgaben:Büro:  Material", "Ausgaben : Büro : Material"),
        ("  Ausgaben  ", "Ausgaben"),
        ("Ausgaben : Büro", "Ausgaben : Büro"),
        ("Ausgaben::Büro", "Ausgaben : Büro"),
        (":Ausgaben:", "Ausgaben"),
        ("", ""),
    ],
)
def test_normalize(raw, expected):
    assert account_path.normalize(raw) == expected


def test_normalize_is_idempotent():
    once = account_path.normalize(" Vermögen :Bank: Girokonto ")
    assert account_path.normalize(once) == once


class TestValidate:
    """Tests for validation of raw user input."""

    def test_accepts_valid_path(self):
        account_path.validate("Ausgaben : Büro : Material")
        assert account_path.is_valid("Ausgaben:Büro")

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_path(self, raw):
        with pytest.raises(EmptyPathError) as excinfo:
            account_path.validate(raw)
        assert excinfo.value.code == "empty_path"

    @pytest.mark.parametrize("raw", ["Ausgaben::Büro", "Ausgaben : : Büro", "Ausgaben :", ": Ausgaben"])
    def test_empty_segment(self, raw):
        with pytest.raises(InvalidSegmentError) as excinfo:
            account_path.validate(raw)
        assert excinfo.value.segment == ""
        assert not account_path.is_valid(raw)

    def test_max_depth(self):
        path = " : ".join(["A", "B", "C", "D", "E", "F", "G"])
        with pytest.raises(ExceedsMaxDepthError) as excinfo:
            account_path.validate(path)
        assert excinfo.value.max_depth == 6
        account_path.validate(path, max_depth=7)

    def test_custom_max_depth(self):
        assert not account_path.is_valid("A : B : C", max_depth=2)


def test_segments_depth_leaf_parent():
    path = "Ausgaben : Büro : Material"
    assert account_path.segments(path) == ["Ausgaben", "Büro", "Material"]
    assert account_path.depth(path) == 3
    assert account_path.leaf(path) == "Material"
    assert account_path.parent(path) == "Ausgaben : Büro"
    assert account_path.parent("Ausgaben") is None
    assert account_path.segments("") == []
    assert account_path.leaf("") is None


def test_ancestors():
    assert account_path.ancestors("A : B : C") == ["A", "A : B", "A : B : C"]
    assert account_path.ancestors_without_self("A : B : C") == ["A", "A : B"]
    assert account_path.ancestors_without_self("A") == []


def test_join():
    assert account_path.join("Ausgaben", "Büro") == "Ausgaben : Büro"
    assert account_path.join("Ausgaben:", " Büro:Material ") == "Ausgaben : Büro : Material"
    assert account_path.join("", "Büro") == "Büro"
    assert account_path.join("Ausgaben", "") == "Ausgaben"


def test_relationships():
    assert account_path.is_ancestor("Ausgaben", "Ausgaben : Büro : Material")
    assert not account_path.is_ancestor("Ausgaben", "Ausgaben")
    assert not account_path.is_ancestor("Aus", "Ausgaben : Büro")
    assert account_path.is_descendant("Ausgaben : Büro", "Ausgaben")
    assert account_path.is_sibling("Ausgaben : Büro", "Ausgaben : Reisen")
    assert account_path.is_sibling("Ausgaben", "Vermögen")
    assert not account_path.is_sibling("Ausgaben : Büro", "Ausgaben : Büro")
    assert not account_path.is_sibling("Ausgaben : Büro", "Vermögen : Bank")


def test_to_uppercase():
    assert account_path.to_uppercase("Ausgaben:büro") == "AUSGABEN : BÜRO"


class TestDisplay:
    """Tests for human-readable rendering."""

    def test_arrow(self):
        assert account_path.display("Ausgaben : Büro : Material", "arrow") == "Ausgaben → Büro → Material"

    def test_leaf_with_depth(self):
        assert account_path.display("Ausgaben : Büro : Material", "leaf_with_depth") == "    └── Material"
        assert account_path.display("Ausgaben", "leaf_with_depth") == "└── Ausgaben"

    def test_compact(self):
        assert account_path.display("Ausgaben : Büro : Material", "compact") == "A : B : Material"

    def test_unknown_style(self):
        with pytest.raises(ValidationError):
            account_path.display("Ausgaben", "fancy")
