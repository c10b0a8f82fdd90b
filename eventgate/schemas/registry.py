"""
Schema registry for event validation.

Holds named, versioned compiled schemas. Schemas are compiled once when
they are registered and are shared read-only afterwards.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass
from datetime import datetime, timezone
import structlog

from eventgate.utils.errors import SchemaCompilationError, SchemaNotFoundError

from .compiler import compile_schema
from .model import Schema
from .validator import ValidationError, Validator


logger = structlog.get_logger(__name__)


@dataclass
class SchemaVersion:
    """Schema version information."""
    version: str
    raw: Dict[str, Any]
    schema: Schema
    created_at: datetime
    is_active: bool = True


class SchemaRegistry:
    """
    Schema registry for event validation.

    Manages schema versions and provides validation
    for documents flowing through the system.
    """

    def __init__(self, validator: Optional[Validator] = None):
        self.logger = structlog.get_logger("schema-registry")
        self.validator = validator if validator is not None else Validator()
        self.schemas: Dict[str, List[SchemaVersion]] = {}

    def register_schema(self, name: str, raw: Any, version: str = "1.0") -> Schema:
        """
        Compile and register a new schema version.

        Raises:
            SchemaCompilationError: If ``raw`` is not a valid schema
        """
        try:
            schema = compile_schema(raw)
        except SchemaCompilationError as exc:
            self.logger.error(
                "Schema compilation failed",
                schema_name=name,
                version=version,
                keyword=exc.keyword,
                schema_path=exc.schema_path,
                error=exc.message,
            )
            raise

        schema_version = SchemaVersion(
            version=version,
            raw=raw,
            schema=schema,
            created_at=datetime.now(timezone.utc),
        )
        self.schemas.setdefault(name, []).append(schema_version)

        self.logger.info(
            "Schema registered",
            schema_name=name,
            version=version,
            form=schema.form.value,
        )
        return schema

    def load_file(self, name: str, path: Union[str, Path], version: str = "1.0") -> Schema:
        """Read a JSON schema description from disk and register it."""
        schema_path = Path(path)
        with schema_path.open("r", encoding="utf-8") as handle:
            try:
                raw = json.load(handle)
            except json.JSONDecodeError as exc:
                raise SchemaCompilationError(
                    f"Schema file {schema_path} is not valid JSON: {exc.msg}",
                    details={"path": str(schema_path), "line": exc.lineno},
                ) from exc

        self.logger.debug("Schema file loaded", schema_name=name, path=str(schema_path))
        return self.register_schema(name, raw, version)

    def get_schema(self, name: str, version: Optional[str] = None) -> Schema:
        """
        Get the compiled schema for a name and version.

        Without a version the most recently registered active version is
        returned.

        Raises:
            SchemaNotFoundError: If no matching active version exists
        """
        versions = self.schemas.get(name, [])

        if version:
            for schema_version in versions:
                if schema_version.version == version and schema_version.is_active:
                    return schema_version.schema
        else:
            active_versions = [v for v in versions if v.is_active]
            if active_versions:
                return active_versions[-1].schema

        raise SchemaNotFoundError(
            f"Schema not found for {name}",
            schema_name=name,
            schema_version=version,
        )

    def validate(self, name: str, data: Any, version: Optional[str] = None) -> List[ValidationError]:
        """Validate arbitrary data against a registered schema."""
        return self.validator.validate(self.get_schema(name, version), data)

    def get_supported_schemas(self) -> List[str]:
        """Get list of registered schema names."""
        return list(self.schemas.keys())

    def get_schema_versions(self, name: str) -> List[str]:
        """Get available schema versions for a name."""
        return [v.version for v in self.schemas.get(name, []) if v.is_active]

    def deprecate_schema(self, name: str, version: str) -> None:
        """Deprecate a schema version."""
        for schema_version in self.schemas.get(name, []):
            if schema_version.version == version:
                schema_version.is_active = False
                self.logger.info(
                    "Schema deprecated",
                    schema_name=name,
                    version=version
                )
                break
