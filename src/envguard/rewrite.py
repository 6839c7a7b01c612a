"""Rewrite planning: replacement text, quote expansion and import edits.

Accessor syntax is a closed table keyed by file extension. Unknown
extensions use the Python accessor but never get an import edit.
"""

from __future__ import annotations

import re
from pathlib import PurePath

from envguard.models import Ecosystem, RewritePlan, TextEdit
from envguard.text import line_end, line_start

QUOTE_CHARS = frozenset({'"', "'", "`"})

DEFAULT_IMPORT_SCAN_LINES = 200

EXTENSION_ECOSYSTEMS: dict[str, Ecosystem] = {
    ".js": Ecosystem.NODE,
    ".ts": Ecosystem.NODE,
    ".jsx": Ecosystem.NODE,
    ".tsx": Ecosystem.NODE,
    ".mjs": Ecosystem.NODE,
    ".cjs": Ecosystem.NODE,
    ".go": Ecosystem.GO,
    ".php": Ecosystem.PHP,
    ".rb": Ecosystem.RUBY,
    ".java": Ecosystem.JAVA,
    ".cs": Ecosystem.DOTNET,
    ".rs": Ecosystem.RUST,
    ".py": Ecosystem.PYTHON,
    ".pyw": Ecosystem.PYTHON,
}

ACCESSOR_TEMPLATES: dict[Ecosystem, str] = {
    Ecosystem.NODE: "process.env.{name}",
    Ecosystem.GO: 'os.Getenv("{name}")',
    Ecosystem.PHP: "getenv('{name}')",
    Ecosystem.RUBY: "ENV['{name}']",
    Ecosystem.JAVA: 'System.getenv("{name}")',
    Ecosystem.DOTNET: 'Environment.GetEnvironmentVariable("{name}")',
    Ecosystem.RUST: 'std::env::var("{name}").unwrap()',
    Ecosystem.PYTHON: 'os.getenv("{name}")',
    Ecosystem.OTHER: 'os.getenv("{name}")',
}

# Only a plain `import os` binds the name the accessor uses
_PY_HAS_OS = re.compile(r"^import\s+os\b", re.MULTILINE)
_PY_IMPORT_LINE = re.compile(r"^(?:import|from)\s+")

_GO_HAS_OS = re.compile(r'^[ \t]*(?:import[ \t]+)?(?:[\w.]+[ \t]+)?"os"[ \t]*$', re.MULTILINE)
_GO_IMPORT_BLOCK = re.compile(r"^import[ \t]*\([ \t]*$", re.MULTILINE)
_GO_SINGLE_IMPORT = re.compile(r'^import[ \t]+(?:[\w.]+[ \t]+)?"[^"]*"[ \t]*$', re.MULTILINE)
_GO_PACKAGE = re.compile(r"^package[ \t]+\w+", re.MULTILINE)

_CS_HAS_SYSTEM = re.compile(r"^\s*(?:global\s+)?using\s+System\s*;", re.MULTILINE)


def ecosystem_for(file_path: str | PurePath) -> Ecosystem:
    """Pick the target ecosystem from the file extension."""
    return EXTENSION_ECOSYSTEMS.get(PurePath(file_path).suffix.lower(), Ecosystem.OTHER)


def build_replacement(file_path: str | PurePath, var_name: str) -> str:
    """Environment accessor expression for the file's language."""
    return ACCESSOR_TEMPLATES[ecosystem_for(file_path)].format(name=var_name)


def expand_span_for_quotes(text: str, start: int, end: int) -> tuple[int, int]:
    """Widen a literal span to swallow its matching quotes.

    Only single-line spans flanked by the same quote character on both
    sides are widened. Anything else is returned unchanged.
    """
    if "\n" in text[start:end]:
        return start, end

    first = line_start(text, start)
    last = line_end(text, start)
    if start <= first or end >= last:
        return start, end

    before = text[start - 1]
    after = text[end]
    if before == after and before in QUOTE_CHARS:
        return start - 1, end + 1
    return start, end


def _offset_after_line(text: str, offset: int) -> int:
    newline = text.find("\n", offset)
    return len(text) if newline == -1 else newline + 1


def _insertion(text: str, offset: int, line: str) -> TextEdit:
    # Inserting past an unterminated last line needs its own newline
    if offset == len(text) and text and not text.endswith("\n"):
        line = "\n" + line
    return TextEdit(start=offset, end=offset, text=line)


def _python_import_edit(text: str, max_lines: int) -> TextEdit | None:
    if _PY_HAS_OS.search(text):
        return None

    offset = 0
    insert_at: int | None = None
    in_parens = False
    for index, line in enumerate(text.splitlines(keepends=True)):
        if index >= max_lines:
            break
        next_offset = offset + len(line)
        if in_parens:
            if ")" in line:
                in_parens = False
            insert_at = next_offset
        elif _PY_IMPORT_LINE.match(line):
            insert_at = next_offset
            in_parens = "(" in line and ")" not in line
        offset = next_offset

    if insert_at is None:
        insert_at = 0
        if text.startswith("#!"):
            insert_at = _offset_after_line(text, 0)

    return _insertion(text, insert_at, "import os\n")


def _go_import_edit(text: str) -> TextEdit | None:
    if _GO_HAS_OS.search(text):
        return None

    block = _GO_IMPORT_BLOCK.search(text)
    if block:
        return _insertion(text, _offset_after_line(text, block.end()), '\t"os"\n')

    singles = list(_GO_SINGLE_IMPORT.finditer(text))
    if singles:
        return _insertion(text, _offset_after_line(text, singles[-1].end()), 'import "os"\n')

    package = _GO_PACKAGE.search(text)
    if package:
        return _insertion(text, _offset_after_line(text, package.end()), '\nimport "os"\n')

    return _insertion(text, 0, 'import "os"\n')


def build_import_edit(
    text: str,
    file_path: str | PurePath,
    max_lines: int = DEFAULT_IMPORT_SCAN_LINES,
) -> TextEdit | None:
    """Import needed by the accessor, or None when present or not required."""
    ecosystem = ecosystem_for(file_path)
    if ecosystem == Ecosystem.PYTHON:
        return _python_import_edit(text, max_lines)
    if ecosystem == Ecosystem.GO:
        return _go_import_edit(text)
    return None


def plan_rewrite(
    text: str,
    start: int,
    end: int,
    file_path: str | PurePath,
    var_name: str,
    max_import_lines: int = DEFAULT_IMPORT_SCAN_LINES,
) -> RewritePlan:
    """Compute the source edits replacing a literal with an env lookup.

    Args:
        text: Document text the span was computed against
        start: Literal start offset (quotes excluded)
        end: Literal end offset (quotes excluded)
        file_path: Target file path; only the extension is used
        var_name: Final variable name returned by the store merge
        max_import_lines: How far to look for existing imports

    Returns:
        RewritePlan with the replacement and an optional import insertion
    """
    ecosystem = ecosystem_for(file_path)
    replace_start, replace_end = expand_span_for_quotes(text, start, end)

    notice = None
    if ecosystem == Ecosystem.DOTNET and not _CS_HAS_SYSTEM.search(text):
        notice = "Environment lives in the System namespace; add `using System;` if implicit usings are off."

    return RewritePlan(
        ecosystem=ecosystem,
        variable_name=var_name,
        replace=TextEdit(
            start=replace_start,
            end=replace_end,
            text=ACCESSOR_TEMPLATES[ecosystem].format(name=var_name),
        ),
        import_edit=build_import_edit(text, file_path, max_import_lines),
        notice=notice,
    )


def apply_edits(text: str, edits: list[TextEdit]) -> str:
    """Apply non-overlapping edits computed against the same text.

    Edits are applied from the end of the document backwards so earlier
    offsets stay valid.
    """
    for edit in sorted(edits, key=lambda e: (e.start, e.end), reverse=True):
        text = text[:edit.start] + edit.text + text[edit.end:]
    return text
