"""
Template rendering and file output.

All generators share one Jinja2 environment over the package templates.
Rendered files are collected in memory and written by
``write_generated_files``, which also formats Python output with Black.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from black import FileMode, NothingChanged, format_str as black_format_str
from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError,
    ext as jinja2_extensions,
    select_autoescape,
)

from .domain.naming import (
    pluralize,
    singularize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)
from .domain.sql_types import quote_identifier
from .exceptions import CodeGenerationError, OutputWriteError

logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"

BLACK_FORMATTER_MODE = FileMode(line_length=120)

EXECUTABLE_SUFFIXES = (".sh",)
EXECUTABLE_NAMES = ("gradlew", "mvnw", "artisan")


def jinja2_pluralize_filter(word):
    """Jinja filter: pluralize the last word of an identifier."""
    if not isinstance(word, str) or not word:
        return ""
    return pluralize(word)


def jinja2_singularize_filter(word):
    if not isinstance(word, str) or not word:
        return ""
    return singularize(word)


def jinja2_title_filter(name):
    """``order_items`` -> ``Order Items``."""
    if not isinstance(name, str) or not name:
        return ""
    return " ".join(word.capitalize() for word in to_snake_case(name).split("_") if word)


def setup_jinja_env(template_dir: Optional[Path] = None) -> Environment:
    """Sets up and returns the Jinja2 environment used by every generator."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        # Templates emit source code, never HTML
        autoescape=select_autoescape(enabled_extensions=("html", "xml"), default_for_string=False, default=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        extensions=[
            jinja2_extensions.do,
            jinja2_extensions.loopcontrols,
        ],
    )
    env.filters["repr"] = repr
    env.filters["pluralize"] = jinja2_pluralize_filter
    env.filters["singularize"] = jinja2_singularize_filter
    env.filters["snake"] = to_snake_case
    env.filters["camel"] = to_camel_case
    env.filters["pascal"] = to_pascal_case
    env.filters["kebab"] = to_kebab_case
    env.filters["title_words"] = jinja2_title_filter
    env.filters["sql_ident"] = quote_identifier
    return env


def render_template(
    env: Environment,
    template_name: str,
    context: Mapping[str, Any],
    component: Optional[str] = None,
    table: Optional[str] = None,
) -> str:
    """
    Render one template.

    Raises:
        CodeGenerationError: If the template is missing or fails to render.
    """
    try:
        template = env.get_template(template_name)
        return template.render(context)
    except TemplateError as e:
        raise CodeGenerationError(
            f"Error rendering template '{template_name}': {e}",
            component=component or template_name,
            table=table,
        ) from e


def format_python_code_using_black(filepath: Union[str, Path], code_string: str) -> str:
    """Formats the given Python code using Black, returning it unchanged if Black rejects it."""
    try:
        formatted_code = black_format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {filepath}")
        return formatted_code
    except NothingChanged:
        return code_string
    except Exception as e:
        # Black raises its own parse errors for invalid syntax
        logger.error(f"Could not format Python code using Black: {filepath}: {e}")
        logger.warning("Writing unformatted Python code due to Black error.")
        return code_string


@dataclass
class GenerationResult:
    """Outcome of writing a generated project to disk."""

    output_dir: Path
    written: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.written) + len(self.skipped)


def _make_executable(path: Path) -> None:
    current_st = os.stat(path)
    os.chmod(path, current_st.st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def write_generated_files(
    files: Mapping[str, str],
    output_dir: Union[str, Path],
    overwrite: bool = False,
) -> GenerationResult:
    """
    Write ``{relative_path: content}`` under ``output_dir``.

    Existing files are kept unless ``overwrite`` is set; they are reported
    in ``GenerationResult.skipped``.

    Raises:
        OutputWriteError: If a path escapes the output directory or a file cannot be written.
    """
    root = Path(output_dir).resolve()
    result = GenerationResult(output_dir=root)

    for relative_path, content in files.items():
        output_path = (root / relative_path).resolve()
        if root != output_path and root not in output_path.parents:
            raise OutputWriteError(f"Refusing to write outside the output directory: {relative_path}", path=str(output_path))

        if output_path.exists() and not overwrite:
            logger.warning(f"Skipping existing file: {output_path}")
            result.skipped.append(relative_path)
            continue

        if output_path.suffix == ".py":
            content = format_python_code_using_black(output_path, content)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
            if output_path.suffix in EXECUTABLE_SUFFIXES or output_path.name in EXECUTABLE_NAMES:
                _make_executable(output_path)
        except OSError as e:
            raise OutputWriteError(f"Could not write {relative_path}: {e}", path=str(output_path)) from e

        logger.debug(f"Generated file: {output_path}")
        result.written.append(relative_path)

    return result
