import unittest

import pytest

from sqlapigen.domain.models import SqlColumn, SqlSchema, SqlTable
from sqlapigen.exceptions import ValidationError
from sqlapigen.generators.base import Feature, ProjectConfig
from sqlapigen.generators.java_spring import JavaSpringBootGenerator
from sqlapigen.generators.rust_axum import RustAxumGenerator
from sqlapigen.validators import ConfigValidator, SchemaValidator, ValidationResult


class TestValidationResult(unittest.TestCase):
    def test_errors_make_result_invalid(self):
        result = ValidationResult()
        self.assertTrue(result.is_valid)
        result.add_warning("careful")
        self.assertTrue(result.is_valid)
        result.add_error("broken")
        self.assertFalse(result.is_valid)

    def test_post_init_consistency(self):
        self.assertFalse(ValidationResult(errors=["x"]).is_valid)

    def test_raise_if_invalid(self):
        ValidationResult().raise_if_invalid()
        result = ValidationResult()
        result.add_error("one")
        result.add_error("two")
        with self.assertRaises(ValidationError) as ctx:
            result.raise_if_invalid()
        self.assertIn("Validation failed: one; two", str(ctx.exception))


class TestSchemaValidator(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _schema(self, shop_schema):
        self.schema = shop_schema

    def test_shop_schema_is_valid(self):
        result = SchemaValidator.validate(self.schema)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.warnings, [])

    def test_empty_schema_is_an_error(self):
        result = SchemaValidator.validate(SqlSchema())
        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors, ["Schema contains no tables to generate entities from"])

    def test_schema_without_primary_keys_is_an_error(self):
        schema = SqlSchema(tables=[SqlTable(name="logs", columns=[SqlColumn(name="line", sql_type="TEXT")])])
        result = SchemaValidator.validate(schema)
        self.assertEqual(result.errors, ["No table in the schema has a primary key"])
        self.assertIn("Table 'logs' has no primary key", result.warnings)

    def test_parse_errors_are_warnings(self):
        self.schema.parse_errors.append("Could not parse CREATE TABLE: CREATE TABLE x")
        result = SchemaValidator.validate(self.schema)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.warnings, ["Parse error: Could not parse CREATE TABLE: CREATE TABLE x"])

    def test_table_filters_warn_on_unknown_tables(self):
        result = SchemaValidator.validate_table_filters(["products", "ghosts"], ["phantoms"], ["products", "tags"])
        self.assertTrue(result.is_valid)
        self.assertEqual(
            result.warnings,
            [
                "Table 'ghosts' in include_tables not found in schema",
                "Table 'phantoms' in exclude_tables not found in schema",
            ],
        )

    def test_table_filters_ignore_case(self):
        result = SchemaValidator.validate_table_filters(["Products"], ["TAGS"], ["products", "tags"])
        self.assertEqual(result.warnings, [])


class TestConfigValidator(unittest.TestCase):
    def test_unsupported_features_are_warnings(self):
        config = ProjectConfig(project_name="shop", features={Feature.CRUD, Feature.FILE_UPLOAD, Feature.S3_STORAGE})
        result = ConfigValidator.validate_for_generator(config, RustAxumGenerator())
        self.assertTrue(result.is_valid)
        self.assertEqual(result.warnings, ["Rust / Axum does not support: file_upload, s3_storage"])

    def test_generator_errors_are_errors(self):
        config = ProjectConfig(project_name="shop", base_package="Com.Acme")
        result = ConfigValidator.validate_for_generator(config, JavaSpringBootGenerator())
        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors, ["Base package 'Com.Acme' is not a valid dotted package name"])

    def test_blank_output_directory_is_an_error(self):
        self.assertFalse(ConfigValidator.validate_output_directory("").is_valid)


class TestOutputDirectory:
    def test_missing_directory_is_fine(self, tmp_path):
        result = ConfigValidator.validate_output_directory(str(tmp_path / "new"))
        assert result.is_valid
        assert result.warnings == []

    def test_non_empty_directory_warns(self, tmp_path):
        (tmp_path / "file.txt").write_text("x", encoding="utf-8")
        result = ConfigValidator.validate_output_directory(str(tmp_path))
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_file_is_an_error(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x", encoding="utf-8")
        assert not ConfigValidator.validate_output_directory(str(path)).is_valid

