"""
C# / ASP.NET Core project generator.

Controllers over application services and EF Core repositories, laid out as
``Domain/``, ``Application/``, ``Infrastructure/`` and ``Api/`` folders, with
an xUnit + Moq test project beside it.
"""

import re
from typing import Any, Dict, List

from ..domain.naming import to_pascal_case, to_snake_case
from ..mappers.csharp import CSharpTypeMapper
from .base import Feature, ProjectConfig, ProjectGenerator, TemplateFile as T

TESTS = "tests/{project_pascal}.Tests"
AUTH = (Feature.JWT_AUTH,)
FILES = (Feature.FILE_UPLOAD,)

_NAMESPACE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class CSharpAspNetGenerator(ProjectGenerator):
    language = "csharp"
    framework = "aspnetcore"
    display_name = "C# / ASP.NET Core"
    supported_features = frozenset({
        Feature.CRUD,
        Feature.AUDITING,
        Feature.SOFT_DELETE,
        Feature.FILTERING,
        Feature.PAGINATION,
        Feature.OPENAPI,
        Feature.DOCKER,
        Feature.MIGRATIONS,
        Feature.MANY_TO_ONE,
        Feature.ONE_TO_MANY,
        Feature.MANY_TO_MANY,
        Feature.JWT_AUTH,
        Feature.RATE_LIMITING,
        Feature.FILE_UPLOAD,
        Feature.UNIT_TESTS,
        Feature.CACHING,
        Feature.MAIL_SERVICE,
        Feature.PASSWORD_RESET,
    })
    default_language_version = "9.0"
    default_framework_version = "9.0.0"
    template_dir = "csharp_aspnet"
    page_fields = {
        "items": "array",
        "page": "integer",
        "size": "integer",
        "totalCount": "integer",
        "totalPages": "integer",
    }

    PROJECT_FILES = (
        T("Project.csproj.j2", "{project_pascal}.csproj"),
        T("common/README.md.j2", "README.md"),
        T("common/gitignore.j2", ".gitignore"),
        T("Program.cs.j2", "Program.cs"),
        T("appsettings.json.j2", "appsettings.json"),
        T("Domain/NotFoundException.cs.j2", "Domain/Common/NotFoundException.cs"),
        T("Application/PagedResult.cs.j2", "Application/Common/PagedResult.cs"),
        T("Infrastructure/ApplicationDbContext.cs.j2", "Infrastructure/Persistence/ApplicationDbContext.cs"),
        T("Api/ExceptionHandlingMiddleware.cs.j2", "Api/Middleware/ExceptionHandlingMiddleware.cs"),
        T("Auth/JwtTokenService.cs.j2", "Infrastructure/Auth/JwtTokenService.cs", AUTH),
        T("Auth/AuthUser.cs.j2", "Domain/Auth/AuthUser.cs", AUTH),
        T("Auth/AuthController.cs.j2", "Api/Controllers/AuthController.cs", AUTH),
        T("Auth/PasswordResetToken.cs.j2", "Domain/Auth/PasswordResetToken.cs", (Feature.PASSWORD_RESET,)),
        T("Auth/PasswordResetController.cs.j2", "Api/Controllers/PasswordResetController.cs", (Feature.PASSWORD_RESET,)),
        T("Mail/EmailService.cs.j2", "Infrastructure/Mail/EmailService.cs", (Feature.MAIL_SERVICE,)),
        T("Storage/FileStorageService.cs.j2", "Infrastructure/Storage/FileStorageService.cs", FILES),
        T("Storage/FilesController.cs.j2", "Api/Controllers/FilesController.cs", FILES),
        T("Tests.csproj.j2", TESTS + "/{project_pascal}.Tests.csproj", (Feature.UNIT_TESTS,)),
        T("Dockerfile.j2", "Dockerfile", (Feature.DOCKER,)),
        T("common/docker-compose.yml.j2", "docker-compose.yml", (Feature.DOCKER,)),
        T("common/schema.sql.j2", "migrations/V1__initial_schema.sql", (Feature.MIGRATIONS,)),
    )

    ENTITY_FILES = (
        T("Domain/Entity.cs.j2", "Domain/Entities/{entity_name}.cs"),
        T("Application/Dtos.cs.j2", "Application/DTOs/{entity_name}Dtos.cs"),
        T("Infrastructure/Repository.cs.j2", "Infrastructure/Repositories/{entity_name}Repository.cs"),
        T("Application/Service.cs.j2", "Application/Services/{entity_name}Service.cs"),
        T("Api/Controller.cs.j2", "Api/Controllers/{entity_name}Controller.cs", (Feature.CRUD,)),
        T("Tests/ServiceTests.cs.j2", TESTS + "/Services/{entity_name}ServiceTests.cs", (Feature.UNIT_TESTS,)),
    )

    def create_type_mapper(self) -> CSharpTypeMapper:
        return CSharpTypeMapper()

    @staticmethod
    def namespace(config: ProjectConfig) -> str:
        return config.option("namespace") or to_pascal_case(to_snake_case(config.project_name))

    def validate_config(self, config: ProjectConfig) -> List[str]:
        errors = super().validate_config(config)
        if config.project_name and config.project_name.strip():
            namespace = self.namespace(config)
            if not _NAMESPACE_RE.match(namespace):
                errors.append(f"Namespace '{namespace}' is not a valid C# namespace")
        return errors

    def field_extras(self, column) -> Dict[str, Any]:
        return {"annotations": self.type_mapper.data_annotations(column)}

    @staticmethod
    def many_to_many_links(entities) -> List[Dict[str, Any]]:
        """One join-table mapping per pair of skip navigations."""
        links, seen = [], set()
        for entity in entities:
            for rel in entity.many_to_many:
                key = (rel.join_table, rel.join_column, rel.inverse_join_column)
                if key in seen:
                    continue
                seen.add(key)
                seen.add((rel.join_table, rel.inverse_join_column, rel.join_column))
                target = next((e for e in entities if e.name == rel.target_entity), None)
                inverse = next(
                    (
                        other for other in (target.many_to_many if target else [])
                        if other.join_table == rel.join_table and other.join_column == rel.inverse_join_column
                    ),
                    None,
                )
                links.append({
                    "entity": entity.name,
                    "property": rel.pascal_property,
                    "target": rel.target_entity,
                    "inverse_property": inverse.pascal_property if inverse else None,
                    "join_table": rel.join_table,
                    "join_column": rel.join_column,
                    "inverse_join_column": rel.inverse_join_column,
                })
        return links

    def extra_context(self, context: Dict[str, Any], config: ProjectConfig) -> Dict[str, Any]:
        db_name = context["project_snake"]
        environment = {
            "ConnectionStrings__Default": f"Host=db;Port=5432;Database={db_name};Username=postgres;Password=postgres",
        }
        if context["has"]["jwt_auth"]:
            environment["Jwt__Secret"] = "change-me-to-a-256-bit-secret-change-me-to-a-256-bit-secret"
        if context["has"]["mail_service"]:
            environment["Mail__Host"] = "mailpit"
        return {
            "namespace": self.namespace(config),
            "many_to_many_links": self.many_to_many_links(context["entities"]),
            "database_name": db_name,
            "requirements": [f".NET SDK {context['language_version']}", "PostgreSQL 15+"],
            "run_commands": ["dotnet restore", "dotnet run"],
            "test_command": f"dotnet test tests/{context['project_pascal']}.Tests",
            "gitignore_patterns": ["bin/", "obj/", "*.user", ".vs/", "TestResults/", "uploads/"],
            "app_environment": environment,
        }
