"""
metadata/validator.py: JSON Schema validation for fieldcheck YAML schema documents.

Checks the shape of type schema documents (keys, value types) before the loader
resolves them, so authors get every structural problem of a file at once
instead of the loader's first ``ValueError``.

Usage:
    from fieldcheck.metadata.validator import validate_schema_dir

    issues = validate_schema_dir(Path("schemas"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "type.schema.json"

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class ValidationIssue:
    """A single finding for a schema YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/rules[1]"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _document_validator() -> Draft202012Validator:
    with _SCHEMA_PATH.open() as fh:
        schema = json.load(fh)
    return Draft202012Validator(schema)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema error path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def schema_files(directory: Path) -> list[Path]:
    """YAML files directly under directory, sorted by name."""
    return sorted(p for p in directory.iterdir() if p.suffix in YAML_SUFFIXES and p.is_file())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_document(doc: Any, file: Path) -> list[ValidationIssue]:
    """Validate an already-parsed schema document."""
    validator = _document_validator()
    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path))
    ]


def validate_schema_file(yaml_path: Path) -> list[ValidationIssue]:
    """
    Validate a single YAML schema document.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    issues = validate_document(raw, yaml_path)
    if issues:
        logger.debug("%d issue(s) in %s", len(issues), yaml_path)
    return issues


def validate_schema_dir(schema_dir: Path, *, strict: bool = False) -> list[ValidationIssue]:
    """
    Validate every YAML schema document in *schema_dir*.

    Args:
        schema_dir: Directory holding ``*.yaml`` / ``*.yml`` type schemas.
        strict:     If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of issues across all files. Empty means all files are valid.
    """
    if not schema_dir.is_dir():
        return [
            ValidationIssue(
                file=schema_dir,
                message=f"Schema directory does not exist: {schema_dir}",
            )
        ]

    files = schema_files(schema_dir)
    if not files:
        return [
            ValidationIssue(
                file=schema_dir,
                message="No YAML schema documents found",
                severity="error" if strict else "warning",
            )
        ]

    all_issues: list[ValidationIssue] = []
    for yaml_file in files:
        all_issues.extend(validate_schema_file(yaml_file))
    return all_issues
