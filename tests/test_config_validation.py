import unittest
from argparse import Namespace
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from sqlapigen.config_validation import (
    ToolConfigSchema,
    load_config,
    read_config_file,
    to_project_config,
    validate_and_parse_config,
)
from sqlapigen.exceptions import ConfigurationError
from sqlapigen.generators.base import Feature


class TestToolConfigSchema(unittest.TestCase):
    def test_defaults(self):
        config = ToolConfigSchema()
        self.assertEqual(config.language, "java")
        self.assertIsNone(config.framework)
        self.assertEqual(config.api_prefix, "/api/v1")
        self.assertEqual(config.rate_limit, "100/minute")
        self.assertIn("crud", config.features)
        self.assertIn("pagination", config.features)
        self.assertFalse(config.overwrite)

    def test_features_accept_comma_string_and_aliases(self):
        config = ToolConfigSchema(features="crud, JWT-AUTH,soft_delete")
        self.assertEqual(config.features, ["crud", "jwt_auth", "soft_delete"])

    def test_unknown_feature_rejected(self):
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(features=["crud", "teleportation"])

    def test_project_name_rules(self):
        self.assertEqual(ToolConfigSchema(project_name="  shop-api ").project_name, "shop-api")
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(project_name="my api")
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(project_name="1shop")

    def test_base_package_rules(self):
        self.assertEqual(ToolConfigSchema(base_package="com.acme.shop").base_package, "com.acme.shop")
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(base_package="com..acme")

    def test_target_is_lowercased(self):
        config = ToolConfigSchema(language=" Go ", framework="CHI")
        self.assertEqual((config.language, config.framework), ("go", "chi"))

    def test_rate_limit_normalized(self):
        self.assertEqual(ToolConfigSchema(rate_limit="10 / Second").rate_limit, "10/second")
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(rate_limit="fast")

    def test_api_prefix_normalized(self):
        self.assertEqual(ToolConfigSchema(api_prefix="api/v2/").api_prefix, "/api/v2")
        self.assertEqual(ToolConfigSchema(api_prefix="/").api_prefix, "")

    def test_table_lists(self):
        config = ToolConfigSchema(include_tables="users, orders")
        self.assertEqual(config.include_tables, ["users", "orders"])
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(exclude_tables=["users", "  "])
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(exclude_tables=["users", 3])

    def test_include_exclude_overlap_rejected(self):
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(include_tables=["users", "orders"], exclude_tables=["orders"])

    def test_include_exclude_overlap_ignores_case(self):
        with self.assertRaises(PydanticValidationError) as ctx:
            ToolConfigSchema(include_tables=["Orders"], exclude_tables=["orders"])
        self.assertIn("Tables cannot be both included and excluded: Orders", str(ctx.exception))

    def test_jwt_lifetimes_must_be_positive(self):
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(jwt_access_token_minutes=0)

    def test_account_option_defaults(self):
        config = ToolConfigSchema()
        self.assertEqual(config.cache_ttl_seconds, 300)
        self.assertEqual(config.password_reset_token_minutes, 30)
        self.assertEqual(config.mail_from, "no-reply@example.com")

    def test_mail_from_must_be_an_address(self):
        self.assertEqual(ToolConfigSchema(mail_from=" team@acme.io ").mail_from, "team@acme.io")
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(mail_from="team at acme")

    def test_cache_and_reset_lifetimes_must_be_positive(self):
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(cache_ttl_seconds=0)
        with self.assertRaises(PydanticValidationError):
            ToolConfigSchema(password_reset_token_minutes=-5)

    def test_account_features_by_name(self):
        config = ToolConfigSchema(features="crud,jwt-auth,password-reset,mail_service,CACHING")
        self.assertEqual(config.features, ["crud", "jwt_auth", "password_reset", "mail_service", "caching"])


class TestValidateAndParseConfig(unittest.TestCase):
    def test_errors_become_configuration_error(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_and_parse_config({"project_name": "bad name", "rate_limit": "soon"}, config_file="c.yaml")
        error = ctx.exception
        self.assertEqual(error.context["config_file"], "c.yaml")
        self.assertEqual(len(error.context["errors"]), 2)
        self.assertTrue(any(message.startswith("project_name:") for message in error.context["errors"]))

    def test_to_project_config(self):
        tool_config = validate_and_parse_config({
            "project_name": "shop",
            "features": ["crud", "jwt_auth"],
            "rate_limit": "5/second",
            "options": {"namespace": "Acme.Shop"},
        })
        project_config = to_project_config(tool_config)
        self.assertEqual(project_config.project_name, "shop")
        self.assertEqual(project_config.features, {Feature.CRUD, Feature.JWT_AUTH})
        self.assertEqual(project_config.option("namespace"), "Acme.Shop")
        self.assertEqual(project_config.option("rate_limit"), "5/second")
        self.assertEqual(project_config.option("api_prefix"), "/api/v1")
        self.assertEqual(project_config.option("jwt_access_token_minutes"), 30)
        self.assertIsNone(project_config.option("missing"))

    def test_account_options_reach_generators(self):
        tool_config = validate_and_parse_config({
            "project_name": "shop",
            "features": ["crud", "jwt_auth", "password_reset"],
            "cache_ttl_seconds": 60,
            "password_reset_token_minutes": 15,
            "mail_from": "support@shop.test",
        })
        project_config = to_project_config(tool_config)
        self.assertIn(Feature.PASSWORD_RESET, project_config.features)
        self.assertEqual(project_config.option("cache_ttl_seconds"), 60)
        self.assertEqual(project_config.option("password_reset_token_minutes"), 15)
        self.assertEqual(project_config.option("mail_from"), "support@shop.test")


class TestLoadConfig:
    def write_config(self, tmp_path, text):
        path = tmp_path / "sqlapigen.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_yaml_file(self, tmp_path):
        path = self.write_config(
            tmp_path,
            "project_name: shop\nlanguage: rust\noutput_dir: out\nfeatures: [crud, docker]\nunknown_key: 1\n",
        )
        config = load_config(path)
        assert config.project_name == "shop"
        assert config.language == "rust"
        assert config.features == ["crud", "docker"]
        assert Path(config.output_dir).is_absolute()

    def test_cli_values_override_file(self, tmp_path):
        path = self.write_config(tmp_path, "project_name: shop\nlanguage: rust\noverwrite: true\n")
        args = Namespace(
            language="go",
            framework=None,
            project_name=None,
            overwrite=False,
            dry_run=True,
            config=path,
        )
        config = load_config(path, args)
        assert config.language == "go"
        assert config.project_name == "shop"
        # An unset store_true flag keeps the file's value
        assert config.overwrite is True

    def test_cli_only(self):
        config = load_config(None, Namespace(project_name="cli-app", features="crud,openapi"))
        assert config.project_name == "cli-app"
        assert config.features == ["crud", "openapi"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = self.write_config(tmp_path, "project_name: [unclosed\n")
        with pytest.raises(ConfigurationError):
            read_config_file(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = self.write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            read_config_file(path)

    def test_empty_file(self, tmp_path):
        path = self.write_config(tmp_path, "")
        assert read_config_file(path) == {}
