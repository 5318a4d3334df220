"""Exception hierarchy for cheatdocs."""

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class CheatsheetError(Exception):
    """Base exception for cheatsheet failures.

    Carries the originating declaration file when one is known.
    """

    def __init__(self, message: str, path: Optional[PathLike] = None):
        self.path = Path(path) if path is not None else None
        self.reason = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"

    def with_path(self, path: PathLike) -> "CheatsheetError":
        """Attach a file path to an error raised before the file was known."""
        self.path = Path(path)
        self.args = (self._format(),)
        return self


class MalformedDeclaration(ValueError, CheatsheetError):
    """A required field is missing or a field has the wrong shape."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        location: str = "",
        category: Optional[str] = None,
        path: Optional[PathLike] = None,
    ):
        self.field = field
        self.location = location
        self.category = category
        CheatsheetError.__init__(self, self._describe(message), path)

    def _describe(self, message: str) -> str:
        where = self.location or "cheatsheet"
        if self.category is not None:
            where = f"{where} (category {self.category!r})"
        return f"{where}: {message}"


class DuplicateKeyword(ValueError, CheatsheetError):
    """Two cheatsheets share a keyword or docset file name."""

    def __init__(
        self,
        keyword: str,
        attribute: str = "keyword",
        path: Optional[PathLike] = None,
        first_path: Optional[PathLike] = None,
    ):
        self.keyword = keyword
        self.attribute = attribute
        self.first_path = Path(first_path) if first_path is not None else None
        message = f"duplicate {attribute} {keyword!r}"
        if self.first_path is not None:
            message += f" (already declared in {self.first_path})"
        CheatsheetError.__init__(self, message, path)


class ConfigError(ValueError, CheatsheetError):
    """Invalid configuration value."""
