"""
Exception hierarchy for the SQL API generator.

Every error carries structured context, recovery suggestions and an error
code so the CLI can print something actionable.
"""

from typing import Dict, Any, Optional, List


class SqlApiGenError(Exception):
    """
    Base exception for all generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(SqlApiGenError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify the project name and base package",
                "Run 'sqlapigen list' to see valid languages and features",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class SchemaParseError(SqlApiGenError):
    """Raised when the SQL schema file cannot be read."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if source:
            context['source'] = source

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check that the schema file exists and is readable",
                "Make sure the file is UTF-8 encoded DDL",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SCHEMA_PARSE_ERROR"
        )


class CodeGenerationError(SqlApiGenError):
    """Raised when rendering a generated artifact fails."""

    def __init__(self, message: str, component: Optional[str] = None, table: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if component:
            context['component'] = component  # e.g., 'entity', 'controller', 'openapi'
        if table:
            context['table'] = table

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the table schema for unsupported patterns",
                "Try generating with fewer features enabled",
                "Check for naming conflicts or reserved words",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


class ValidationError(SqlApiGenError):
    """Raised when validation of the schema or configuration fails."""

    def __init__(self, message: str, validator: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if validator:
            context['validator'] = validator

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Run 'sqlapigen validate' on the schema for more details",
                "Review the reported tables and columns",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="VALIDATION_ERROR"
        )


class GeneratorNotFoundError(SqlApiGenError):
    """Raised when no generator is registered for a language/framework."""

    def __init__(
        self,
        message: str,
        language: Optional[str] = None,
        framework: Optional[str] = None,
        available: Optional[List[str]] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if language:
            context['language'] = language
        if framework:
            context['framework'] = framework
        if available:
            context['available'] = ", ".join(available)

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Run 'sqlapigen list' to see the registered generators",
                "Omit --framework to use the language default",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="GENERATOR_NOT_FOUND"
        )


class OutputWriteError(SqlApiGenError):
    """Raised when generated files cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check write permissions on the output directory",
                "Use --overwrite to replace existing files",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="OUTPUT_WRITE_ERROR"
        )

