"""Tests for cheatdocs.model module."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from cheatdocs.errors import CheatsheetError, MalformedDeclaration
from cheatdocs.model import Category, Cheatsheet, CheatsheetBuilder, Entry

from conftest import make_declaration


class TestEntry:
    def test_notes_absent_unless_declared(self):
        entry = Entry.from_dict({"command": "gd", "name": "Go to definition."})
        assert entry.notes is None
        assert "notes" not in entry.to_dict()

    def test_notes_kept_when_declared(self):
        entry = Entry.from_dict({"command": "!git", "name": "Search.", "notes": "!git ruby"})
        assert entry.notes == "!git ruby"
        assert entry.to_dict()["notes"] == "!git ruby"

    def test_missing_command(self):
        with pytest.raises(MalformedDeclaration) as exc_info:
            Entry.from_dict({"name": "No command."}, location="categories[0].entries[2]")
        err = exc_info.value
        assert err.field == "command"
        assert "categories[0].entries[2]" in str(err)

    def test_wrong_type(self):
        with pytest.raises(MalformedDeclaration, match="must be a string"):
            Entry.from_dict({"command": 42, "name": "Numeric."})

    def test_blank_required_field(self):
        with pytest.raises(MalformedDeclaration, match="must not be blank"):
            Entry.from_dict({"command": "  ", "name": "Blank."})

    def test_unknown_field_rejected(self):
        with pytest.raises(MalformedDeclaration, match="unknown field 'note'"):
            Entry.from_dict({"command": "x", "name": "Typo.", "note": "oops"})

    def test_unknown_field_allowed_when_lenient(self):
        entry = Entry.from_dict({"command": "x", "name": "Typo.", "note": "oops"}, strict=False)
        assert entry.notes is None

    def test_not_an_object(self):
        with pytest.raises(MalformedDeclaration, match="expected an object"):
            Entry.from_dict(["gd", "Go to definition."])

    def test_frozen(self):
        entry = Entry(command="K", name="Hover.")
        with pytest.raises(FrozenInstanceError):
            entry.command = "J"


class TestCategory:
    def test_preserves_entry_order(self):
        commands = ["z", "a", "m", "b"]
        category = Category.from_dict({
            "id": "Order",
            "entries": [{"command": c, "name": c.upper()} for c in commands],
        })
        assert [e.command for e in category] == commands
        assert len(category) == 4

    def test_entry_error_names_category(self):
        payload = {"id": "Bangs", "entries": [{"command": "!so", "name": "ok"}, {"name": "missing"}]}
        with pytest.raises(MalformedDeclaration) as exc_info:
            Category.from_dict(payload, location="categories[3]")
        err = exc_info.value
        assert err.category == "Bangs"
        assert err.location == "categories[3].entries[1]"
        assert "'Bangs'" in str(err)

    def test_missing_id(self):
        with pytest.raises(MalformedDeclaration) as exc_info:
            Category.from_dict({"entries": []})
        assert exc_info.value.field == "id"

    def test_entries_must_be_list(self):
        with pytest.raises(MalformedDeclaration, match="must be a list"):
            Category.from_dict({"id": "Bad", "entries": {"command": "x"}})

    def test_empty_entries_allowed(self):
        category = Category.from_dict({"id": "Empty", "entries": []})
        assert len(category) == 0


class TestCheatsheet:
    def test_from_dict(self):
        sheet = Cheatsheet.from_dict(make_declaration("abc"), source="abc.json")
        assert sheet.title == "Test Cheatsheet abc"
        assert sheet.keyword == "abc"
        assert sheet.docset_file_name == "test_abc"
        assert sheet.source == Path("abc.json")
        assert [c.id for c in sheet] == ["First", "Second"]
        assert sheet.entry_count == 3

    def test_optional_metadata_absent(self):
        payload = make_declaration()
        for key in ("introduction", "source_url", "notes"):
            del payload[key]
        sheet = Cheatsheet.from_dict(payload)
        assert sheet.introduction is None
        assert sheet.source_url is None
        assert sheet.notes is None

    def test_round_trip(self):
        payload = make_declaration()
        assert Cheatsheet.from_dict(payload).to_dict() == payload

    def test_round_trip_without_optionals(self):
        payload = make_declaration()
        del payload["notes"]
        del payload["source_url"]
        assert Cheatsheet.from_dict(payload).to_dict() == payload

    def test_iter_entries_in_order(self):
        sheet = Cheatsheet.from_dict(make_declaration())
        pairs = [(c.id, e.command) for c, e in sheet.iter_entries()]
        assert pairs == [("First", "a"), ("First", "b"), ("Second", "c")]

    def test_find_category(self):
        sheet = Cheatsheet.from_dict(make_declaration())
        assert sheet.find_category("Second").entries[0].command == "c"
        assert sheet.find_category("Missing") is None

    @pytest.mark.parametrize("missing", ["title", "docset_file_name", "keyword", "categories"])
    def test_missing_required(self, missing):
        payload = make_declaration()
        del payload[missing]
        with pytest.raises(MalformedDeclaration) as exc_info:
            Cheatsheet.from_dict(payload, source="sheet.json")
        err = exc_info.value
        assert err.field == missing
        assert err.path == Path("sheet.json")
        assert str(err).startswith("sheet.json: cheatsheet:")

    @pytest.mark.parametrize("bad_name", ["../escaped", "a/b", "a\\b", "..", "name..rb"])
    def test_docset_file_name_must_be_plain(self, bad_name):
        payload = make_declaration(docset_file_name=bad_name)
        with pytest.raises(MalformedDeclaration, match="plain file name") as exc_info:
            Cheatsheet.from_dict(payload, source="sheet.json")
        assert exc_info.value.field == "docset_file_name"
        assert exc_info.value.path == Path("sheet.json")

    def test_nested_error_reports_position(self):
        payload = make_declaration()
        del payload["categories"][1]["entries"][0]["command"]
        with pytest.raises(MalformedDeclaration) as exc_info:
            Cheatsheet.from_dict(payload, source="sheet.json")
        err = exc_info.value
        assert err.location == "categories[1].entries[0]"
        assert err.category == "Second"
        assert err.field == "command"

    def test_errors_are_cheatsheet_errors(self):
        with pytest.raises(CheatsheetError):
            Cheatsheet.from_dict("not a mapping")

    def test_source_not_part_of_equality(self):
        payload = make_declaration()
        assert Cheatsheet.from_dict(payload, source="a.json") == Cheatsheet.from_dict(payload, source="b.json")


class TestCheatsheetBuilder:
    def test_builds_nested_structure(self):
        builder = CheatsheetBuilder()
        builder.title("My Kagi Cheatsheet").docset_file_name("my_kagi_cheatsheet").keyword("mkc")
        builder.introduction("Bangs.").notes("For use with Kagi.")
        with builder.category("Bangs") as bangs:
            bangs.entry("!git", "Searches github.com.", notes="!git ruby")
            bangs.entry("!hn", "Searches Hacker News.")
        with builder.category("Other") as other:
            other.entry("!w", "Wikipedia.")

        sheet = builder.build()
        assert sheet.keyword == "mkc"
        assert [c.id for c in sheet] == ["Bangs", "Other"]
        assert sheet.categories[0].entries[0].notes == "!git ruby"
        assert sheet.categories[0].entries[1].notes is None
        assert sheet.source_url is None

    def test_builder_matches_from_dict(self):
        payload = make_declaration()
        builder = CheatsheetBuilder()
        for key in ("title", "docset_file_name", "keyword", "introduction", "source_url", "notes"):
            getattr(builder, key)(payload[key])
        for category in payload["categories"]:
            with builder.category(category["id"]) as c:
                for entry in category["entries"]:
                    c.entry(**entry)
        assert builder.build() == Cheatsheet.from_dict(payload)

    def test_build_validates(self):
        builder = CheatsheetBuilder().title("No keyword").docset_file_name("nk")
        with pytest.raises(MalformedDeclaration) as exc_info:
            builder.build()
        assert exc_info.value.field == "keyword"

    def test_failed_category_block_not_added(self):
        builder = CheatsheetBuilder().title("T").docset_file_name("t").keyword("t")
        with pytest.raises(RuntimeError):
            with builder.category("Broken") as c:
                c.entry("x", "X.")
                raise RuntimeError("boom")
        assert len(builder.build()) == 0
