"""
Cheatdocs - Personal cheatsheet declarations for Dash docsets.

Cheatdocs keeps keyboard shortcuts and search bangs as small JSON
declarations, loads them into an immutable content tree, and hands
that tree to the external cheatset generator as DSL source files.

I remember which key does what so your muscle memory doesn't have to.
Well, it still has to. But now it has notes.
"""

from cheatdocs.errors import (
    CheatsheetError,
    ConfigError,
    DuplicateKeyword,
    MalformedDeclaration,
)
from cheatdocs.loader import CheatsheetLoader, LoadReport, load_cheatsheets
from cheatdocs.model import Category, Cheatsheet, CheatsheetBuilder, Entry

__version__ = "1.0.0"
__author__ = "Cheatdocs Contributors"

__all__ = [
    "Category",
    "Cheatsheet",
    "CheatsheetBuilder",
    "CheatsheetError",
    "CheatsheetLoader",
    "ConfigError",
    "DuplicateKeyword",
    "Entry",
    "LoadReport",
    "MalformedDeclaration",
    "load_cheatsheets",
]
