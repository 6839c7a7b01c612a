"""Rewrite planner tests: quote expansion, accessor table, import edits."""

import pytest

from envguard.models import Ecosystem, TextEdit
from envguard.rewrite import (
    apply_edits,
    build_import_edit,
    build_replacement,
    ecosystem_for,
    expand_span_for_quotes,
    plan_rewrite,
)


def _span(text: str, literal: str) -> tuple[int, int]:
    start = text.index(literal)
    return start, start + len(literal)


def _rewrite(text: str, literal: str, path: str, name: str = "API_KEY") -> str:
    start, end = _span(text, literal)
    plan = plan_rewrite(text, start, end, path, name)
    return apply_edits(text, plan.edits())


@pytest.mark.parametrize("quote", ['"', "'", "`"])
def test_matching_quotes_are_consumed(quote):
    """A literal flanked by the same quote widens by one each side."""
    text = f"key = {quote}sk-abc123{quote};"
    start, end = _span(text, "sk-abc123")

    assert expand_span_for_quotes(text, start, end) == (start - 1, end + 1)


def test_mismatched_quotes_are_left_alone():
    """Different flanking characters mean no expansion."""
    text = "key = \"sk-abc123';"
    start, end = _span(text, "sk-abc123")

    assert expand_span_for_quotes(text, start, end) == (start, end)


def test_unquoted_literal_is_left_alone():
    """key=value style literals are replaced as-is."""
    text = "KEY=sk-abc123 # comment"
    start, end = _span(text, "sk-abc123")

    assert expand_span_for_quotes(text, start, end) == (start, end)


def test_span_touching_line_edges_is_left_alone():
    """No expansion at the start or end of a line."""
    text = 'sk-abc123"\n"sk-def456'
    assert expand_span_for_quotes(text, 0, 9) == (0, 9)
    start, end = _span(text, "sk-def456")
    assert expand_span_for_quotes(text, start, end) == (start, end)


def test_multiline_span_is_left_alone():
    """Spans crossing a newline never expand."""
    text = 'x = "abc\ndef";'
    start = text.index("abc")
    end = text.index("def") + 3

    assert expand_span_for_quotes(text, start, end) == (start, end)


def test_quote_before_crlf_is_not_a_flank():
    """The carriage return ends the line."""
    text = '"sk-abc123\r\n'
    assert expand_span_for_quotes(text, 1, 10) == (1, 10)


def test_typescript_replacement_leaves_no_quotes():
    """"sk-abc123" in a .ts file becomes process.env.API_KEY."""
    text = 'const apiKey = "sk-abc123";\n'
    assert _rewrite(text, "sk-abc123", "src/config.ts") == "const apiKey = process.env.API_KEY;\n"


@pytest.mark.parametrize("path,expected", [
    ("a.js", "process.env.API_KEY"),
    ("a.ts", "process.env.API_KEY"),
    ("a.jsx", "process.env.API_KEY"),
    ("a.tsx", "process.env.API_KEY"),
    ("a.mjs", "process.env.API_KEY"),
    ("a.cjs", "process.env.API_KEY"),
    ("main.go", 'os.Getenv("API_KEY")'),
    ("index.php", "getenv('API_KEY')"),
    ("app.rb", "ENV['API_KEY']"),
    ("App.java", 'System.getenv("API_KEY")'),
    ("Program.cs", 'Environment.GetEnvironmentVariable("API_KEY")'),
    ("main.rs", 'std::env::var("API_KEY").unwrap()'),
    ("app.py", 'os.getenv("API_KEY")'),
    ("settings.toml", 'os.getenv("API_KEY")'),
    ("Makefile", 'os.getenv("API_KEY")'),
    ("APP.TS", "process.env.API_KEY"),
])
def test_build_replacement(path, expected):
    """Accessor per extension, Python form as the default."""
    assert build_replacement(path, "API_KEY") == expected


def test_ecosystem_for():
    """Extension lookup."""
    assert ecosystem_for("x/y/z.rs") == Ecosystem.RUST
    assert ecosystem_for("gui.pyw") == Ecosystem.PYTHON
    assert ecosystem_for("notes") == Ecosystem.OTHER
    assert ecosystem_for("settings.json") == Ecosystem.OTHER


@pytest.mark.parametrize("path,text,literal", [
    ("settings.json", '{"api_key": "secret-value"}\n', "secret-value"),
    ("config.yaml", 'api_key: "secret-value"\n', "secret-value"),
    ("main.c", 'const char *key = "secret-value";\n', "secret-value"),
    ("Makefile", 'KEY = "secret-value"\n', "secret-value"),
])
def test_unknown_extension_gets_accessor_but_no_import(path, text, literal):
    """Non-Python files never receive an import os line."""
    start, end = _span(text, literal)
    plan = plan_rewrite(text, start, end, path, "API_KEY")
    result = apply_edits(text, plan.edits())

    assert plan.import_edit is None
    assert "import os" not in result
    assert 'os.getenv("API_KEY")' in result


# --- Python imports ---

def test_python_import_added_at_top():
    """No imports: import os goes first."""
    text = 'api_key = "sk-test1234567890abcdefghijklmnop"'
    result = _rewrite(text, "sk-test1234567890abcdefghijklmnop", "app.py")

    assert result == 'import os\napi_key = os.getenv("API_KEY")'


def test_python_import_after_last_import():
    """import os goes after the existing import block."""
    text = 'import sys\nfrom pathlib import Path\n\nKEY = "secret-value"\n'
    result = _rewrite(text, "secret-value", "app.py", "KEY")

    assert result == (
        'import sys\nfrom pathlib import Path\nimport os\n\nKEY = os.getenv("KEY")\n'
    )


def test_python_existing_import_not_duplicated():
    """import os and import os.path count as present."""
    for header in ("import os\n", "import os.path\n"):
        text = header + 'KEY = "secret-value"\n'
        assert build_import_edit(text, "app.py") is None


def test_python_from_os_import_still_needs_import_os():
    """from os import ... does not bind the name os."""
    text = 'from os import getenv\nKEY = "secret-value"\n'
    result = _rewrite(text, "secret-value", "app.py", "KEY")

    assert result == 'from os import getenv\nimport os\nKEY = os.getenv("KEY")\n'


def test_python_import_after_shebang():
    """A shebang stays on the first line."""
    text = '#!/usr/bin/env python3\nKEY = "secret-value"\n'
    result = _rewrite(text, "secret-value", "tool.py", "KEY")

    assert result == '#!/usr/bin/env python3\nimport os\nKEY = os.getenv("KEY")\n'


def test_python_import_after_parenthesized_import():
    """Multi-line imports are not split."""
    text = 'from typing import (\n    Any,\n    Dict,\n)\nKEY = "secret-value"\n'
    edit = build_import_edit(text, "app.py")

    assert edit == TextEdit(start=text.index("KEY"), end=text.index("KEY"), text="import os\n")


def test_python_import_search_is_bounded():
    """Imports past the scan window are ignored."""
    text = "x = 1\n" * 5 + "import json\n"
    edit = build_import_edit(text, "app.py", max_lines=3)

    assert edit.start == 0


def test_python_import_after_unterminated_last_line():
    """Inserting after a final line without newline adds one."""
    text = "import sys"
    edit = build_import_edit(text, "app.py")

    assert apply_edits(text, [edit]) == "import sys\nimport os\n"


# --- Go imports ---

def test_go_import_added_to_block():
    """os joins an existing import block."""
    text = 'package main\n\nimport (\n\t"fmt"\n)\n\nvar key = "secret-value"\n'
    result = _rewrite(text, "secret-value", "main.go", "KEY")

    assert result == (
        'package main\n\nimport (\n\t"os"\n\t"fmt"\n)\n\nvar key = os.Getenv("KEY")\n'
    )


def test_go_import_after_single_import():
    """os follows the last single-line import."""
    text = 'package main\n\nimport "fmt"\n\nvar key = "secret-value"\n'
    result = _rewrite(text, "secret-value", "main.go", "KEY")

    assert result == (
        'package main\n\nimport "fmt"\nimport "os"\n\nvar key = os.Getenv("KEY")\n'
    )


def test_go_import_after_package_clause():
    """No imports: os goes after the package clause."""
    text = 'package main\n\nvar key = "secret-value"\n'
    result = _rewrite(text, "secret-value", "main.go", "KEY")

    assert result == 'package main\n\nimport "os"\n\nvar key = os.Getenv("KEY")\n'


def test_go_existing_os_import_not_duplicated():
    """An os import in a block or single line counts."""
    assert build_import_edit('package main\n\nimport (\n\t"os"\n)\n', "main.go") is None
    assert build_import_edit('package main\n\nimport "os"\n', "main.go") is None


def test_other_ecosystems_need_no_import():
    """Only Python and Go stage import edits."""
    for path in ("a.ts", "a.rb", "a.php", "A.java", "a.rs", "a.cs", "a.toml", "README"):
        assert build_import_edit('key = "x"', path) is None


def test_csharp_notice_without_using_system():
    """C# without using System gets a notice."""
    text = 'var key = "secret-value";'
    start, end = _span(text, "secret-value")

    assert plan_rewrite(text, start, end, "a.cs", "KEY").notice is not None
    text = "using System;\n" + text
    start, end = _span(text, "secret-value")
    assert plan_rewrite(text, start, end, "a.cs", "KEY").notice is None


def test_plan_fields():
    """The plan carries the ecosystem, name and both edits."""
    text = 'KEY = "secret-value"\n'
    start, end = _span(text, "secret-value")
    plan = plan_rewrite(text, start, end, "app.py", "KEY")

    assert plan.ecosystem == Ecosystem.PYTHON
    assert plan.variable_name == "KEY"
    assert plan.replace == TextEdit(start=start - 1, end=end + 1, text='os.getenv("KEY")')
    assert plan.import_edit == TextEdit(start=0, end=0, text="import os\n")
    assert len(plan.edits()) == 2


def test_apply_edits_insertion_and_replacement_at_same_offset():
    """An insertion at the replaced span's start lands before the replacement."""
    text = '"secret"\n'
    edits = [
        TextEdit(start=0, end=0, text="import os\n"),
        TextEdit(start=0, end=8, text='os.getenv("KEY")'),
    ]
    assert apply_edits(text, edits) == 'import os\nos.getenv("KEY")\n'
