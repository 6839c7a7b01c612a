"""Core data models for envguard.

Offset semantics:
- start/end: character offsets into the document text, end exclusive
- line/column pairs are 0-based and derived from the offsets
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

GENERIC_PATTERN_ID = "generic-secret"

ENV_VAR_NAME_PATTERN = r"^[A-Z_][A-Z0-9_]*$"


class Severity(str, Enum):
    """Finding severity."""
    ERROR = "error"
    WARNING = "warning"


class Ecosystem(str, Enum):
    """Target language family, chosen by file extension."""
    NODE = "node"
    GO = "go"
    PHP = "php"
    RUBY = "ruby"
    JAVA = "java"
    DOTNET = "dotnet"
    RUST = "rust"
    PYTHON = "python"
    # Unrecognized extensions: Python accessor form, no import staged
    OTHER = "other"


class CredentialPattern(BaseModel):
    """Registry entry for a named credential shape."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    regex: str
    default_env_var: str
    severity: Severity = Severity.ERROR


class Finding(BaseModel):
    """A located candidate hardcoded secret."""
    pattern_id: str
    document: str
    start: int
    end: int
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    message: str
    severity: Severity
    value: str


class TextEdit(BaseModel):
    """Replace text[start:end] with text. start == end is an insertion."""
    start: int
    end: int
    text: str


class RewritePlan(BaseModel):
    """Source edit computed for one remediation."""
    ecosystem: Ecosystem
    variable_name: str
    replace: TextEdit
    import_edit: TextEdit | None = None
    notice: str | None = None

    def edits(self) -> list[TextEdit]:
        """All edits in the plan."""
        if self.import_edit is None:
            return [self.replace]
        return [self.replace, self.import_edit]


class RemediationRequest(BaseModel):
    """Input to the remediation step. start/end cover the literal only."""
    document: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    pattern_id: str = GENERIC_PATTERN_ID
    value: str
    variable_name: str | None = None


class EnvEntry(BaseModel):
    """One NAME=value line of the env file."""
    name: str = Field(pattern=ENV_VAR_NAME_PATTERN)
    value: str


# --- Tool Output Models ---

class RemediationResult(BaseModel):
    """Result of envguard.remediate.apply."""
    variable_name: str
    requested_name: str
    renamed: bool
    store_path: str
    store_updated: bool
    exclusion_updated: bool
    replacement: str
    import_added: bool
    message: str
    notice: str | None = None


class FileScanResult(BaseModel):
    """Findings for one file of a workspace scan."""
    path: str
    findings: list[Finding] = Field(default_factory=list)


class WorkspaceScanResult(BaseModel):
    """Aggregate result from envguard.scan.workspace."""
    root: str
    files_scanned: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    total_findings: int = 0
    errors: int = 0
    warnings: int = 0
    files: list[FileScanResult] = Field(default_factory=list)
    message: str = ""


class ExclusionStatus(BaseModel):
    """Whether the env file is excluded from version control."""
    env_file: str
    ignore_file: str
    env_file_exists: bool
    excluded: bool
    needs_attention: bool
    message: str
