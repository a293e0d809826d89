"""Runtime configuration for the fieldcheck CLI and engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from fieldcheck.metadata.registry import SchemaRegistry
from fieldcheck.validation import ObjectValidator, RegistryIntrospector

_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class CheckConfig:
    """Settings read from the environment.

    Attributes:
        schema_path: Directory holding YAML type schema documents
        log_level: Name of the logging level, e.g. "WARNING"
        detect_cycles: Whether the engine skips objects already on the traversal path
    """

    schema_path: Path
    log_level: str = "WARNING"
    detect_cycles: bool = True

    @classmethod
    def from_env(cls) -> CheckConfig:
        """Create config from environment variables.

        - FIELDCHECK_SCHEMA_PATH (default ./schemas)
        - FIELDCHECK_LOG_LEVEL (default WARNING)
        - FIELDCHECK_DETECT_CYCLES ("0"/"false" disables the cycle guard)
        """
        schema_path = Path(os.environ.get("FIELDCHECK_SCHEMA_PATH") or "schemas")
        log_level = (os.environ.get("FIELDCHECK_LOG_LEVEL") or "WARNING").upper()
        cycles = os.environ.get("FIELDCHECK_DETECT_CYCLES", "").strip().lower()
        return cls(
            schema_path=schema_path,
            log_level=log_level,
            detect_cycles=cycles not in _FALSE_VALUES,
        )

    @property
    def level(self) -> int:
        """Numeric logging level; unknown names fall back to WARNING."""
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.WARNING

    def create_validator(self, registry: SchemaRegistry | None = None) -> ObjectValidator:
        return ObjectValidator(RegistryIntrospector(registry), detect_cycles=self.detect_cycles)
