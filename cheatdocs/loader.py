"""
Declaration loader for cheatdocs.

Discovers cheatsheet declarations in a directory, materializes each
into the content model, and checks keyword uniqueness across the set.
A broken file is reported and skipped; its siblings still load.

I open every file in the folder so you find out about the typo in
my_vim_cheatsheet.json now, not when Dash can't find it.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from cheatdocs.config import CheatdocsConfig
from cheatdocs.errors import CheatsheetError, DuplicateKeyword, MalformedDeclaration
from cheatdocs.model import Cheatsheet

logger = logging.getLogger(__name__)

_LoadResult = Tuple[Optional[Cheatsheet], Optional[CheatsheetError]]


@dataclass
class LoadReport:
    """Outcome of loading a directory of declarations."""

    directory: Path
    cheatsheets: List[Cheatsheet] = field(default_factory=list)
    errors: List[CheatsheetError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def keywords(self) -> List[str]:
        return [sheet.keyword for sheet in self.cheatsheets]

    def by_keyword(self, keyword: str) -> Optional[Cheatsheet]:
        for sheet in self.cheatsheets:
            if sheet.keyword == keyword:
                return sheet
        return None

    def raise_for_errors(self) -> None:
        """Raise the first collected error, if any."""
        if self.errors:
            raise self.errors[0]

    def summary(self) -> Dict[str, object]:
        return {
            "directory": str(self.directory),
            "loaded": len(self.cheatsheets),
            "failed": len(self.errors),
            "keywords": self.keywords,
            "errors": [str(e) for e in self.errors],
        }


class CheatsheetLoader:
    """Loads cheatsheet declarations from files and directories."""

    def __init__(self, config: Optional[CheatdocsConfig] = None):
        self.config = config or CheatdocsConfig()
        self.suffix = self.config.declaration_suffix
        self.strict = self.config.reject_unknown_fields

    def load_file(self, path: Union[str, Path]) -> Cheatsheet:
        """Materialize a single declaration file.

        Args:
            path: Path to a JSON declaration.

        Returns:
            The loaded Cheatsheet.

        Raises:
            MalformedDeclaration: If the file cannot be read, is not valid JSON,
                or does not describe a well-formed cheatsheet.
        """
        path = Path(path)
        logger.debug("Loading declaration: %s", path)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedDeclaration(f"unreadable declaration: {e}", path=path) from e

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedDeclaration(
                f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}",
                path=path,
            ) from e
        except RecursionError as e:
            raise MalformedDeclaration("declaration nested too deeply", path=path) from e

        return Cheatsheet.from_dict(payload, source=path, strict=self.strict)

    def discover(self, directory: Union[str, Path]) -> List[Path]:
        """List declaration files under *directory*, sorted by path."""
        directory = Path(directory)
        if not directory.exists():
            raise CheatsheetError("declaration directory does not exist", directory)
        if not directory.is_dir():
            raise CheatsheetError("declaration path is not a directory", directory)

        pattern = f"*{self.suffix}"
        candidates = directory.rglob(pattern) if self.config.recursive else directory.glob(pattern)
        return sorted(p for p in candidates if p.is_file())

    def load_directory(
        self,
        directory: Optional[Union[str, Path]] = None,
        parallel: Optional[int] = None,
    ) -> LoadReport:
        """Load every declaration in a directory.

        Each file is materialized independently: failures are logged and
        collected in the report without stopping the rest of the batch.
        Keyword and docset file name collisions are resolved in favor of
        the first file in sorted order.

        Args:
            directory: Directory to scan. Defaults to the configured source_dir.
            parallel: Worker count override. Defaults to config parallel_workers.

        Returns:
            LoadReport with cheatsheets in sorted file order.
        """
        directory = Path(directory) if directory is not None else self.config.source_dir
        workers = parallel or self.config.parallel_workers
        paths = self.discover(directory)
        report = LoadReport(directory=directory)

        if not paths:
            logger.warning("No declarations found in %s", directory)
            return report

        if workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self._load_one, paths))
        else:
            results = [self._load_one(p) for p in paths]

        for sheet, error in results:
            if error is not None:
                report.errors.append(error)
            else:
                report.cheatsheets.append(sheet)

        self._reject_duplicates(report)

        logger.info(
            "Loaded %d cheatsheet(s) from %s, %d failed",
            len(report.cheatsheets),
            directory,
            len(report.errors),
        )
        return report

    def _load_one(self, path: Path) -> _LoadResult:
        try:
            return self.load_file(path), None
        except CheatsheetError as e:
            if e.path is None:
                e.with_path(path)
            logger.error("Failed to load %s: %s", path.name, e)
            return None, e

    def _reject_duplicates(self, report: LoadReport) -> None:
        seen: Dict[str, Dict[str, Cheatsheet]] = {"keyword": {}, "docset_file_name": {}}
        kept: List[Cheatsheet] = []

        for sheet in report.cheatsheets:
            duplicate = None
            for attribute, owners in seen.items():
                value = getattr(sheet, attribute)
                if value in owners:
                    duplicate = DuplicateKeyword(
                        value,
                        attribute=attribute,
                        path=sheet.source,
                        first_path=owners[value].source,
                    )
                    break

            if duplicate is not None:
                logger.error("Rejected %s: %s", sheet.source, duplicate)
                report.errors.append(duplicate)
                continue

            for attribute, owners in seen.items():
                owners[getattr(sheet, attribute)] = sheet
            kept.append(sheet)

        report.cheatsheets = kept


def load_cheatsheets(
    directory: Optional[Union[str, Path]] = None,
    config: Optional[CheatdocsConfig] = None,
) -> List[Cheatsheet]:
    """Load all well-formed cheatsheets from *directory*.

    Failures are logged by the loader; use CheatsheetLoader.load_directory
    to inspect them.
    """
    return CheatsheetLoader(config).load_directory(directory).cheatsheets
