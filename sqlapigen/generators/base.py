"""
Project generator contract.

A project generator turns a parsed schema into the files of one
language/framework project. Generators declare which templates they render
(once per project or once per entity) and which feature gates each file;
the shared ``generate`` walks that plan.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from jinja2 import Environment

from ..codegen import render_template, setup_jinja_env
from ..constants import DefaultConfig
from ..domain.models import SqlSchema
from ..exceptions import CodeGenerationError
from ..mappers.base import BaseTypeMapper

logger = logging.getLogger(__name__)


class Feature(Enum):
    """Optional capabilities of a generated project."""

    CRUD = "crud"
    AUDITING = "auditing"
    SOFT_DELETE = "soft_delete"
    FILTERING = "filtering"
    PAGINATION = "pagination"
    OPENAPI = "openapi"
    DOCKER = "docker"
    MIGRATIONS = "migrations"
    MANY_TO_ONE = "many_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"
    JWT_AUTH = "jwt_auth"
    RATE_LIMITING = "rate_limiting"
    FILE_UPLOAD = "file_upload"
    S3_STORAGE = "s3_storage"
    UNIT_TESTS = "unit_tests"
    INTEGRATION_TESTS = "integration_tests"
    CACHING = "caching"
    MAIL_SERVICE = "mail_service"
    PASSWORD_RESET = "password_reset"

    @classmethod
    def parse(cls, name: str) -> "Feature":
        """
        Parse a feature name, case-insensitive, ``-`` or ``_`` separated.

        Raises:
            ValueError: If the name is not a known feature.
        """
        key = re.sub(r"[\s\-]+", "_", (name or "").strip()).upper()
        if key not in cls.__members__:
            raise ValueError(
                f"Unknown feature '{name}'. Known features: {', '.join(cls.__members__)}"
            )
        return cls[key]


def default_features() -> Set[Feature]:
    return {Feature.parse(name) for name in DefaultConfig.FEATURES}


@dataclass
class ProjectConfig:
    """Everything a generator needs to know besides the schema."""

    project_name: str
    base_package: str = DefaultConfig.BASE_PACKAGE
    features: Set[Feature] = field(default_factory=default_features)
    language_version: Optional[str] = None
    framework_version: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def is_feature_enabled(self, feature: Feature) -> bool:
        return feature in self.features

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


@dataclass(frozen=True)
class TemplateFile:
    """
    One file of a generator's output plan.

    ``path`` is a ``str.format`` pattern over the project context (and the
    entity context for per-entity files). The file is rendered only when
    every feature in ``requires`` and at least one in ``any_of`` (when given)
    is enabled.
    """

    template: str
    path: str
    requires: Tuple[Feature, ...] = ()
    any_of: Tuple[Feature, ...] = ()


_JAVA_PACKAGE_RE = re.compile(r"^[a-z_][a-z0-9_]*(\.[a-z_][a-z0-9_]*)*$")


class ProjectGenerator(ABC):
    """Base class for language/framework project generators."""

    language: str = ""
    framework: str = ""
    display_name: str = ""
    supported_features: FrozenSet[Feature] = frozenset()
    default_language_version: str = ""
    default_framework_version: str = ""
    template_dir: str = ""
    app_port: int = 8080
    first_page: int = 1
    migration_dir: Optional[str] = "migrations"
    json_case: str = "camel"
    # Top-level keys of a list page and their JSON types; the first holds the items
    page_fields: Dict[str, str] = {
        "items": "array",
        "page": "integer",
        "size": "integer",
        "total": "integer",
        "totalPages": "integer",
    }

    PROJECT_FILES: Tuple[TemplateFile, ...] = ()
    ENTITY_FILES: Tuple[TemplateFile, ...] = ()

    def __init__(self, env: Optional[Environment] = None):
        self.env = env or setup_jinja_env()
        self.type_mapper = self.create_type_mapper()

    @property
    def key(self) -> str:
        return f"{self.language}:{self.framework}".lower()

    @abstractmethod
    def create_type_mapper(self) -> BaseTypeMapper:
        """Type mapper for this generator's language."""

    def supports(self, feature: Feature) -> bool:
        return feature in self.supported_features

    def validate_config(self, config: ProjectConfig) -> List[str]:
        """Return configuration errors; empty when the config is usable."""
        errors = []
        if not config.project_name or not config.project_name.strip():
            errors.append("Project name is required for code generation")
        return errors

    @staticmethod
    def validate_java_package(base_package: str) -> List[str]:
        if not base_package or not _JAVA_PACKAGE_RE.match(base_package):
            return [f"Base package '{base_package}' is not a valid dotted package name"]
        return []

    @staticmethod
    def validate_go_module(module_path: str) -> List[str]:
        if not module_path or not module_path.strip():
            return ["Go module path is required"]
        if any(ch.isspace() for ch in module_path):
            return [f"Go module path '{module_path}' must not contain spaces"]
        return []

    def effective_features(self, config: ProjectConfig) -> Set[Feature]:
        """Requested features this generator supports; the rest are dropped with a warning."""
        unsupported = sorted(f.name for f in config.features if not self.supports(f))
        if unsupported:
            logger.warning(f"{self.display_name} does not support {', '.join(unsupported)}; ignoring.")
        features = {f for f in config.features if self.supports(f)}
        # S3 storage is a backend for file upload
        if Feature.S3_STORAGE in features and Feature.FILE_UPLOAD not in features:
            features.add(Feature.FILE_UPLOAD)
        # Reset links are mailed to registered users
        if Feature.PASSWORD_RESET in features:
            if Feature.JWT_AUTH not in features:
                logger.warning("PASSWORD_RESET needs JWT_AUTH; ignoring.")
                features.discard(Feature.PASSWORD_RESET)
            elif self.supports(Feature.MAIL_SERVICE):
                features.add(Feature.MAIL_SERVICE)
        return features

    def build_context(self, schema: SqlSchema, config: ProjectConfig, features: Set[Feature]) -> Dict[str, Any]:
        from .context import build_project_context

        context = build_project_context(schema, config, self, features)
        context.update(self.extra_context(context, config))
        return context

    def extra_context(self, context: Dict[str, Any], config: ProjectConfig) -> Dict[str, Any]:
        """Language-specific project context (package paths, module names)."""
        return {}

    def field_extras(self, column) -> Dict[str, Any]:
        """Language-specific per-field values (annotations, tags) for templates."""
        return {}

    def generate(self, schema: SqlSchema, config: ProjectConfig) -> Dict[str, str]:
        """
        Generate the project as an ordered ``{relative_path: content}`` map.

        Raises:
            CodeGenerationError: If a template fails to render.
        """
        features = self.effective_features(config)
        context = self.build_context(schema, config, features)
        files: Dict[str, str] = {}

        for template_file in self.PROJECT_FILES:
            if not self._enabled(template_file, features):
                continue
            self._render_into(files, template_file, context)

        for entity in context["entities"]:
            entity_context = dict(context, entity=entity)
            for template_file in self.ENTITY_FILES:
                if not self._enabled(template_file, features):
                    continue
                self._render_into(files, template_file, entity_context, entity=entity)

        if Feature.OPENAPI in features:
            from ..openapi_gen import generate_openapi_spec, render_openapi_yaml

            spec = generate_openapi_spec(
                schema,
                config,
                features=features,
                json_case=self.json_case,
                page_fields=self.page_fields,
                first_page=self.first_page,
                server_url=f"http://localhost:{self.app_port}",
            )
            files["openapi.yaml"] = render_openapi_yaml(spec)

        logger.debug(f"{self.display_name}: rendered {len(files)} files")
        return files

    @staticmethod
    def _enabled(template_file: TemplateFile, features: Set[Feature]) -> bool:
        if template_file.any_of and not any(feature in features for feature in template_file.any_of):
            return False
        return all(feature in features for feature in template_file.requires)

    def _render_into(self, files: Dict[str, str], template_file: TemplateFile, context: Dict[str, Any], entity=None):
        path_vars = dict(context["paths"])
        if entity is not None:
            path_vars.update(entity.path_vars)
        try:
            path = template_file.path.format(**path_vars)
        except KeyError as e:
            raise CodeGenerationError(
                f"Unknown placeholder {e} in output path '{template_file.path}'",
                component=template_file.template,
            ) from e

        template_name = template_file.template
        if not template_name.startswith("common/"):
            template_name = f"{self.template_dir}/{template_name}"
        files[path] = render_template(
            self.env,
            template_name,
            context,
            component=template_file.template,
            table=entity.table_name if entity is not None else None,
        )
