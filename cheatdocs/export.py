"""
Hand-off of loaded cheatsheets to the external cheatset generator.

cheatset reads one Ruby DSL file per cheatsheet and builds the Dash
docset from it. This module only serializes the content tree into that
DSL (plus a JSON manifest of what was exported); rendering, indexing
and packaging stay with the generator.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from cheatdocs.config import CheatdocsConfig
from cheatdocs.model import Category, Cheatsheet, Entry, validate_file_name

logger = logging.getLogger(__name__)

_INDENT = "  "
_HEREDOC_TAG = "MARKDOWN"


def _ruby_str(value: str) -> str:
    """Quote *value* as a Ruby single-quoted string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _heredoc_tag(text: str) -> str:
    lines = {line.strip() for line in text.splitlines()}
    tag = _HEREDOC_TAG
    while tag in lines:
        tag = f"{tag}_END"
    return tag


def _emit_entry(entry: Entry, depth: int) -> List[str]:
    pad = _INDENT * depth
    lines = [f"{pad}entry do"]
    lines.append(f"{pad}{_INDENT}command {_ruby_str(entry.command)}")
    lines.append(f"{pad}{_INDENT}name {_ruby_str(entry.name)}")
    if entry.notes is not None:
        lines.append(f"{pad}{_INDENT}notes {_ruby_str(entry.notes)}")
    lines.append(f"{pad}end")
    return lines


def _emit_category(category: Category, depth: int) -> List[str]:
    pad = _INDENT * depth
    lines = [f"{pad}category do", f"{pad}{_INDENT}id {_ruby_str(category.id)}"]
    for entry in category:
        lines.append("")
        lines.extend(_emit_entry(entry, depth + 1))
    lines.append(f"{pad}end")
    return lines


def to_cheatset_source(sheet: Cheatsheet) -> str:
    """Serialize a cheatsheet as cheatset DSL source.

    Args:
        sheet: Loaded cheatsheet.

    Returns:
        Ruby source text accepted by ``cheatset generate``.
    """
    lines = ["# frozen_string_literal: true", "", "cheatsheet do"]
    lines.append(f"{_INDENT}title {_ruby_str(sheet.title)}")
    lines.append(f"{_INDENT}docset_file_name {_ruby_str(sheet.docset_file_name)}")
    lines.append(f"{_INDENT}keyword {_ruby_str(sheet.keyword)}")
    if sheet.introduction is not None:
        lines.append(f"{_INDENT}introduction {_ruby_str(sheet.introduction)}")
    if sheet.source_url is not None:
        lines.append(f"{_INDENT}source_url {_ruby_str(sheet.source_url)}")

    for category in sheet:
        lines.append("")
        lines.extend(_emit_category(category, 1))

    if sheet.notes is not None:
        tag = _heredoc_tag(sheet.notes)
        lines.append("")
        # Quoted tag keeps the body literal (no #{} interpolation).
        lines.append(f"{_INDENT}notes <<-'{tag}'")
        for note_line in sheet.notes.splitlines():
            lines.append(f"{_INDENT}{note_line}" if note_line else "")
        lines.append(f"{_INDENT}{tag}")

    lines.append("end")
    return "\n".join(lines) + "\n"


def write_cheatset_files(
    sheets: Iterable[Cheatsheet],
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[CheatdocsConfig] = None,
) -> List[Path]:
    """Write ``<docset_file_name>.rb`` for each cheatsheet.

    Args:
        sheets: Cheatsheets to export.
        output_dir: Target directory. Defaults to the configured output_dir.
        config: Configuration used when output_dir is omitted.

    Returns:
        Paths written, in input order.
    """
    if output_dir is None:
        output_dir = (config or CheatdocsConfig()).output_dir
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for sheet in sheets:
        validate_file_name(sheet.docset_file_name, "docset_file_name", "cheatsheet", sheet.source)
        target = output_dir / f"{sheet.docset_file_name}.rb"
        target.write_text(to_cheatset_source(sheet), encoding="utf-8")
        logger.debug("Wrote %s", target)
        written.append(target)

    logger.info("Exported %d cheatsheet(s) to %s", len(written), output_dir)
    return written


def build_manifest(sheets: Iterable[Cheatsheet]) -> Dict[str, Any]:
    entries = []
    for sheet in sheets:
        entries.append({
            "keyword": sheet.keyword,
            "docset_file_name": sheet.docset_file_name,
            "title": sheet.title,
            "categories": [c.id for c in sheet],
            "entry_count": sheet.entry_count,
            "source": str(sheet.source) if sheet.source else None,
        })
    return {"total_cheatsheets": len(entries), "cheatsheets": entries}


def write_manifest(
    sheets: Iterable[Cheatsheet],
    path: Optional[Union[str, Path]] = None,
    config: Optional[CheatdocsConfig] = None,
) -> Path:
    """Write a JSON manifest describing the exported cheatsheets."""
    config = config or CheatdocsConfig()
    path = Path(path) if path is not None else config.output_dir / config.manifest_name
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_manifest(sheets), f, indent=config.json_indent)
        f.write("\n")
    return path
