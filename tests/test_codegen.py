import logging
import os
import unittest

import pytest

from sqlapigen.codegen import (
    format_python_code_using_black,
    render_template,
    setup_jinja_env,
    write_generated_files,
)
from sqlapigen.colored_logging import ColoredFormatter, log_highlight, log_progress, log_success
from sqlapigen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    GeneratorNotFoundError,
    OutputWriteError,
    SqlApiGenError,
)


class TestJinjaEnvironment(unittest.TestCase):
    def setUp(self):
        self.env = setup_jinja_env()

    def test_naming_filters(self):
        template = self.env.from_string(
            "{{ 'order_item' | pluralize }} {{ 'categories' | singularize }} "
            "{{ 'OrderItem' | snake }} {{ 'order_item' | camel }} {{ 'order_item' | pascal }} "
            "{{ 'order_items' | kebab }} {{ 'order_items' | title_words }}"
        )
        self.assertEqual(
            template.render(),
            "order_items category order_item orderItem OrderItem order-items Order Items",
        )

    def test_no_html_escaping(self):
        self.assertEqual(self.env.from_string("{{ value }}").render(value="List<String> & co"), "List<String> & co")

    def test_render_template_missing(self):
        with self.assertRaises(CodeGenerationError) as ctx:
            render_template(self.env, "does/not/exist.j2", {}, table="products")
        self.assertEqual(ctx.exception.context["table"], "products")

    def test_render_common_template(self):
        output = render_template(self.env, "common/empty.j2", {})
        self.assertEqual(output.strip(), "")


class TestBlackFormatting(unittest.TestCase):
    def test_formats_valid_code(self):
        self.assertEqual(format_python_code_using_black("x.py", "x=1\n"), "x = 1\n")

    def test_returns_invalid_code_unchanged(self):
        source = "def broken(:\n"
        self.assertEqual(format_python_code_using_black("x.py", source), source)


class TestWriteGeneratedFiles:
    def test_writes_nested_files(self, tmp_path):
        result = write_generated_files({"a/b/c.txt": "hello", "README.md": "# x\n"}, tmp_path)
        assert result.written == ["a/b/c.txt", "README.md"]
        assert result.total == 2
        assert (tmp_path / "a" / "b" / "c.txt").read_text(encoding="utf-8") == "hello"

    def test_skips_existing_files_unless_overwrite(self, tmp_path):
        (tmp_path / "keep.txt").write_text("original", encoding="utf-8")

        result = write_generated_files({"keep.txt": "new"}, tmp_path)
        assert result.skipped == ["keep.txt"]
        assert (tmp_path / "keep.txt").read_text(encoding="utf-8") == "original"

        result = write_generated_files({"keep.txt": "new"}, tmp_path, overwrite=True)
        assert result.written == ["keep.txt"]
        assert (tmp_path / "keep.txt").read_text(encoding="utf-8") == "new"

    def test_formats_python_files(self, tmp_path):
        write_generated_files({"app/main.py": "x=1\n"}, tmp_path)
        assert (tmp_path / "app" / "main.py").read_text(encoding="utf-8") == "x = 1\n"

    def test_marks_scripts_executable(self, tmp_path):
        write_generated_files({"artisan": "#!/usr/bin/env php\n", "bin/run.sh": "echo\n"}, tmp_path)
        assert os.access(tmp_path / "artisan", os.X_OK)
        assert os.access(tmp_path / "bin" / "run.sh", os.X_OK)

    def test_refuses_paths_outside_output_dir(self, tmp_path):
        output_dir = tmp_path / "out"
        with pytest.raises(OutputWriteError):
            write_generated_files({"../escape.txt": "nope"}, output_dir)
        assert not (tmp_path / "escape.txt").exists()


class TestExceptions(unittest.TestCase):
    def test_str_includes_code_context_and_suggestions(self):
        error = SqlApiGenError("Boom", context={"table": "users"}, suggestions=["Try again"], error_code="E1")
        text = str(error)
        self.assertIn("Boom", text)
        self.assertIn("Error Code: E1", text)
        self.assertIn("table: users", text)
        self.assertIn("Try again", text)

    def test_configuration_error(self):
        error = ConfigurationError("bad", config_file="config.yaml")
        self.assertEqual(error.error_code, "CONFIG_ERROR")
        self.assertEqual(error.context["config_file"], "config.yaml")
        self.assertTrue(error.suggestions)

    def test_generator_not_found_error(self):
        error = GeneratorNotFoundError("missing", language="cobol", available=["java:spring-boot"])
        self.assertEqual(error.error_code, "GENERATOR_NOT_FOUND")
        self.assertEqual(error.context["language"], "cobol")
        self.assertIsInstance(error, SqlApiGenError)


class TestColoredFormatter(unittest.TestCase):
    def test_message_category(self):
        self.assertEqual(ColoredFormatter.message_category("✓ done"), "success")
        self.assertEqual(ColoredFormatter.message_category("→ working"), "progress")
        self.assertEqual(ColoredFormatter.message_category("• item"), "highlight")
        self.assertEqual(ColoredFormatter.message_category("=" * 60), "section")
        self.assertIsNone(ColoredFormatter.message_category("plain"))

    def test_plain_output_without_colors(self):
        formatter = ColoredFormatter(use_colors=False)
        record = logging.LogRecord("sqlapigen", logging.INFO, __file__, 1, "✓ done", None, None)
        self.assertEqual(formatter.format(record), "INFO: ✓ done")

    def test_helpers_prefix_messages(self):
        logger = logging.getLogger("sqlapigen.tests")
        with self.assertLogs(logger, level="INFO") as captured:
            log_success(logger, "written")
            log_progress(logger, "parsing")
            log_highlight(logger, "Product")
        self.assertEqual(
            [record.getMessage() for record in captured.records],
            ["✓ written", "→ parsing", "• Product"],
        )
