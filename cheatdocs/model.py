"""
Content model for cheatdocs.

A Cheatsheet owns an ordered tuple of Categories, and each Category
owns an ordered tuple of Entries. Objects are immutable once built;
declaration order is preserved everywhere.

Construction goes through ``from_dict`` (declarative literals, as read
from a declaration file) or ``CheatsheetBuilder`` (nested builder calls).
Both validate the same way and fail fast with MalformedDeclaration.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from cheatdocs.errors import MalformedDeclaration

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = ("command", "name", "notes")
_CATEGORY_FIELDS = ("id", "entries")
_CHEATSHEET_FIELDS = (
    "title",
    "docset_file_name",
    "keyword",
    "introduction",
    "source_url",
    "categories",
    "notes",
)


def _check_mapping(
    payload: Any,
    location: str,
    category: Optional[str] = None,
    source: Optional[Path] = None,
) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedDeclaration(
            f"expected an object, got {type(payload).__name__}",
            location=location,
            category=category,
            path=source,
        )
    return payload


def _check_unknown(
    payload: Mapping[str, Any],
    allowed: Tuple[str, ...],
    location: str,
    category: Optional[str] = None,
    source: Optional[Path] = None,
) -> None:
    unknown = sorted(set(payload) - set(allowed))
    if unknown:
        raise MalformedDeclaration(
            f"unknown field {unknown[0]!r}",
            field=unknown[0],
            location=location,
            category=category,
            path=source,
        )


def _string_field(
    payload: Mapping[str, Any],
    key: str,
    location: str,
    category: Optional[str] = None,
    source: Optional[Path] = None,
    required: bool = True,
) -> Optional[str]:
    """Read a string field, enforcing presence for required fields."""
    value = payload.get(key)
    if value is None:
        if required:
            raise MalformedDeclaration(
                f"missing required field {key!r}",
                field=key,
                location=location,
                category=category,
                path=source,
            )
        return None

    if not isinstance(value, str):
        raise MalformedDeclaration(
            f"field {key!r} must be a string, got {type(value).__name__}",
            field=key,
            location=location,
            category=category,
            path=source,
        )

    if required and not value.strip():
        raise MalformedDeclaration(
            f"field {key!r} must not be blank",
            field=key,
            location=location,
            category=category,
            path=source,
        )
    return value


def validate_file_name(
    value: str,
    key: str,
    location: str,
    source: Optional[Path] = None,
) -> None:
    """Reject values that are not a bare file name (no separators or '..')."""
    if "/" in value or "\\" in value or ".." in value or Path(value).name != value:
        raise MalformedDeclaration(
            f"field {key!r} must be a plain file name, got {value!r}",
            field=key,
            location=location,
            path=source,
        )


def _list_field(
    payload: Mapping[str, Any],
    key: str,
    location: str,
    category: Optional[str] = None,
    source: Optional[Path] = None,
) -> List[Any]:
    value = payload.get(key)
    if value is None:
        raise MalformedDeclaration(
            f"missing required field {key!r}",
            field=key,
            location=location,
            category=category,
            path=source,
        )
    if not isinstance(value, list):
        raise MalformedDeclaration(
            f"field {key!r} must be a list, got {type(value).__name__}",
            field=key,
            location=location,
            category=category,
            path=source,
        )
    return value


@dataclass(frozen=True)
class Entry:
    """One command/description/notes fact."""

    command: str
    name: str
    notes: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        payload: Any,
        location: str = "entry",
        category: Optional[str] = None,
        source: Optional[Path] = None,
        strict: bool = True,
    ) -> "Entry":
        """Create an entry from a dict-like payload.

        Args:
            payload: Declared entry data.
            location: Position of the entry, used in error messages.
            category: Id of the containing category, if known.
            source: Declaration file the entry came from.
            strict: Reject fields the model does not know.

        Raises:
            MalformedDeclaration: If a field is missing or has the wrong shape.
        """
        payload = _check_mapping(payload, location, category, source)
        if strict:
            _check_unknown(payload, _ENTRY_FIELDS, location, category, source)

        return cls(
            command=_string_field(payload, "command", location, category, source),
            name=_string_field(payload, "name", location, category, source),
            notes=_string_field(payload, "notes", location, category, source, required=False),
        )

    def to_dict(self) -> Dict[str, str]:
        data = {"command": self.command, "name": self.name}
        if self.notes is not None:
            data["notes"] = self.notes
        return data


@dataclass(frozen=True)
class Category:
    """A display grouping of entries. Iterates entries in declaration order."""

    id: str
    entries: Tuple[Entry, ...] = ()

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_dict(
        cls,
        payload: Any,
        location: str = "category",
        source: Optional[Path] = None,
        strict: bool = True,
    ) -> "Category":
        payload = _check_mapping(payload, location, source=source)

        # Read the id first so entry errors can name their category.
        category_id = _string_field(payload, "id", location, source=source)
        if strict:
            _check_unknown(payload, _CATEGORY_FIELDS, location, category_id, source)

        raw_entries = _list_field(payload, "entries", location, category_id, source)
        entries = tuple(
            Entry.from_dict(
                raw,
                location=f"{location}.entries[{index}]",
                category=category_id,
                source=source,
                strict=strict,
            )
            for index, raw in enumerate(raw_entries)
        )
        return cls(id=category_id, entries=entries)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "entries": [e.to_dict() for e in self.entries]}


@dataclass(frozen=True)
class Cheatsheet:
    """A named, keyworded collection of reference commands for one tool.

    Iterating a cheatsheet yields its categories in declaration order.
    """

    title: str
    docset_file_name: str
    keyword: str
    categories: Tuple[Category, ...] = ()
    introduction: Optional[str] = None
    source_url: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[Path] = field(default=None, compare=False)

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    @property
    def entry_count(self) -> int:
        return sum(len(c) for c in self.categories)

    def iter_entries(self) -> Iterator[Tuple[Category, Entry]]:
        """Yield (category, entry) pairs in declaration order."""
        for category in self.categories:
            for entry in category:
                yield category, entry

    def find_category(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    @classmethod
    def from_dict(
        cls,
        payload: Any,
        source: Optional[Union[str, Path]] = None,
        strict: bool = True,
    ) -> "Cheatsheet":
        """Create a cheatsheet from a dict-like declaration.

        Args:
            payload: Declared cheatsheet data.
            source: Declaration file path, carried into errors and the result.
            strict: Reject fields the model does not know.

        Returns:
            The materialized Cheatsheet.

        Raises:
            MalformedDeclaration: If any field in the tree is missing or wrong-shaped.
        """
        source_path = Path(source) if source is not None else None
        location = "cheatsheet"
        payload = _check_mapping(payload, location, source=source_path)
        if strict:
            _check_unknown(payload, _CHEATSHEET_FIELDS, location, source=source_path)

        title = _string_field(payload, "title", location, source=source_path)
        docset_file_name = _string_field(payload, "docset_file_name", location, source=source_path)
        validate_file_name(docset_file_name, "docset_file_name", location, source_path)
        keyword = _string_field(payload, "keyword", location, source=source_path)
        raw_categories = _list_field(payload, "categories", location, source=source_path)

        categories = tuple(
            Category.from_dict(
                raw,
                location=f"categories[{index}]",
                source=source_path,
                strict=strict,
            )
            for index, raw in enumerate(raw_categories)
        )

        sheet = cls(
            title=title,
            docset_file_name=docset_file_name,
            keyword=keyword,
            categories=categories,
            introduction=_string_field(payload, "introduction", location, source=source_path, required=False),
            source_url=_string_field(payload, "source_url", location, source=source_path, required=False),
            notes=_string_field(payload, "notes", location, source=source_path, required=False),
            source=source_path,
        )
        logger.debug(
            "Built cheatsheet %s: %d categories, %d entries",
            sheet.keyword,
            len(sheet),
            sheet.entry_count,
        )
        return sheet

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to declaration form, omitting undeclared optionals."""
        data: Dict[str, Any] = {
            "title": self.title,
            "docset_file_name": self.docset_file_name,
            "keyword": self.keyword,
        }
        for key in ("introduction", "source_url"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["categories"] = [c.to_dict() for c in self.categories]
        if self.notes is not None:
            data["notes"] = self.notes
        return data


class CategoryBuilder:
    """Collects entries for one category inside ``CheatsheetBuilder.category``."""

    def __init__(self, category_id: str):
        self._id = category_id
        self._entries: List[Dict[str, str]] = []

    def entry(self, command: str, name: str, notes: Optional[str] = None) -> "CategoryBuilder":
        data = {"command": command, "name": name}
        if notes is not None:
            data["notes"] = notes
        self._entries.append(data)
        return self

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self._id, "entries": list(self._entries)}


class CheatsheetBuilder:
    """Fluent builder mirroring the cheatset DSL.

    Example::

        builder = CheatsheetBuilder()
        builder.title("My Kagi Cheatsheet").keyword("mkc")
        builder.docset_file_name("my_kagi_cheatsheet")
        with builder.category("Bangs") as bangs:
            bangs.entry("!git", "Searches github.com.", notes="!git ruby")
        sheet = builder.build()
    """

    def __init__(self):
        self._data: Dict[str, Any] = {"categories": []}

    def _set(self, key: str, value: str) -> "CheatsheetBuilder":
        self._data[key] = value
        return self

    def title(self, value: str) -> "CheatsheetBuilder":
        return self._set("title", value)

    def docset_file_name(self, value: str) -> "CheatsheetBuilder":
        return self._set("docset_file_name", value)

    def keyword(self, value: str) -> "CheatsheetBuilder":
        return self._set("keyword", value)

    def introduction(self, value: str) -> "CheatsheetBuilder":
        return self._set("introduction", value)

    def source_url(self, value: str) -> "CheatsheetBuilder":
        return self._set("source_url", value)

    def notes(self, value: str) -> "CheatsheetBuilder":
        return self._set("notes", value)

    @contextmanager
    def category(self, category_id: str) -> Iterator[CategoryBuilder]:
        """Open a category block; it is appended when the block exits cleanly."""
        builder = CategoryBuilder(category_id)
        yield builder
        self._data["categories"].append(builder.to_payload())

    def build(self, source: Optional[Union[str, Path]] = None) -> Cheatsheet:
        return Cheatsheet.from_dict(self._data, source=source)
