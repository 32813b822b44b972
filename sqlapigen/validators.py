"""
Validation utilities for the SQL API generator.

Schema and configuration checks that run before generation. Problems that
make generation impossible are errors; anything the generator can work
around (skipped tables, dropped features) is a warning.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .domain.models import SqlSchema
from .exceptions import ValidationError
from .generators.base import ProjectConfig, ProjectGenerator


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Ensure consistency."""
        if self.errors and self.is_valid:
            self.is_valid = False

    def add_error(self, error: str) -> None:
        """Add an error."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning."""
        self.warnings.append(warning)

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if invalid."""
        if not self.is_valid:
            raise ValidationError(
                f"Validation failed: {'; '.join(self.errors)}",
                context={"errors": self.errors, "warnings": self.warnings}
            )


class SchemaValidator:
    """Validates a parsed schema before it reaches a generator."""

    @staticmethod
    def validate(schema: SqlSchema) -> ValidationResult:
        result = ValidationResult()

        for error in schema.parse_errors:
            result.add_warning(f"Parse error: {error}")

        # Missing primary keys and dangling foreign keys only cost the affected entities
        for issue in schema.validate():
            result.add_warning(issue)

        if not schema.entity_tables:
            result.add_error("Schema contains no tables to generate entities from")
        elif not any(table.primary_key_column is not None for table in schema.entity_tables):
            result.add_error("No table in the schema has a primary key")

        return result

    @staticmethod
    def validate_table_filters(
        include_tables: Optional[List[str]],
        exclude_tables: Optional[List[str]],
        available_tables: List[str]
    ) -> ValidationResult:
        """Validate table inclusion/exclusion filters."""
        result = ValidationResult()
        known = {name.lower() for name in available_tables}
        for option, tables in (("include_tables", include_tables), ("exclude_tables", exclude_tables)):
            for table in tables or []:
                if table.lower() not in known:
                    result.add_warning(f"Table '{table}' in {option} not found in schema")
        return result


class ConfigValidator:
    """Validates a project configuration against a concrete generator."""

    @staticmethod
    def validate_for_generator(config: ProjectConfig, generator: ProjectGenerator) -> ValidationResult:
        result = ValidationResult()
        for error in generator.validate_config(config):
            result.add_error(error)

        unsupported = sorted(f.value for f in config.features if not generator.supports(f))
        if unsupported:
            result.add_warning(
                f"{generator.display_name} does not support: {', '.join(unsupported)}"
            )
        return result

    @staticmethod
    def validate_output_directory(path: str) -> ValidationResult:
        """Validate output directory without creating it."""
        result = ValidationResult()

        if not path:
            result.add_error("Output directory is required")
            return result

        output_path = Path(path)
        if output_path.exists() and not output_path.is_dir():
            result.add_error(f"Output path exists but is not a directory: {output_path}")
        elif output_path.is_dir() and any(output_path.iterdir()):
            result.add_warning(f"Output directory is not empty: {output_path}")

        return result

