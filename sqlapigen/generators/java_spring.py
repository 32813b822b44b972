"""
Java / Spring Boot project generator.

One package per entity module (``<base>.<module>.{entity,dto,repository,
service,controller}``) on Spring Data JPA, Bean Validation and Lombok,
built with Maven.
"""

from typing import Any, Dict, List

from ..mappers.java import JavaTypeMapper
from .base import Feature, ProjectConfig, ProjectGenerator, TemplateFile as T

JAVA = "src/main/java/{package_path}"
TEST = "src/test/java/{package_path}"
MODULE = JAVA + "/{entity_module}"
AUTH = (Feature.JWT_AUTH,)
FILES = (Feature.FILE_UPLOAD,)
RESET = (Feature.PASSWORD_RESET,)


class JavaSpringBootGenerator(ProjectGenerator):
    language = "java"
    framework = "spring-boot"
    display_name = "Java / Spring Boot"
    supported_features = frozenset(Feature)
    default_language_version = "25"
    default_framework_version = "4.0.0"
    template_dir = "java_spring"
    # Flyway applies the migrations on startup
    migration_dir = None
    first_page = 0
    page_fields = {
        "content": "array",
        "page": "integer",
        "size": "integer",
        "totalElements": "integer",
        "totalPages": "integer",
    }

    PROJECT_FILES = (
        T("pom.xml.j2", "pom.xml"),
        T("common/README.md.j2", "README.md"),
        T("common/gitignore.j2", ".gitignore"),
        T("Application.java.j2", JAVA + "/{project_pascal}Application.java"),
        T("application.yml.j2", "src/main/resources/application.yml"),
        T("shared/ResourceNotFoundException.java.j2", JAVA + "/common/exception/ResourceNotFoundException.java"),
        T("shared/GlobalExceptionHandler.java.j2", JAVA + "/common/exception/GlobalExceptionHandler.java"),
        T("shared/PageResponse.java.j2", JAVA + "/common/dto/PageResponse.java", (Feature.PAGINATION,)),
        T("shared/FilterSpecifications.java.j2", JAVA + "/common/repository/FilterSpecifications.java",
          (Feature.FILTERING,)),
        T("security/SecurityConfig.java.j2", JAVA + "/config/SecurityConfig.java", AUTH),
        T("security/JwtService.java.j2", JAVA + "/security/JwtService.java", AUTH),
        T("security/JwtAuthenticationFilter.java.j2", JAVA + "/security/JwtAuthenticationFilter.java", AUTH),
        T("security/AppUser.java.j2", JAVA + "/security/AppUser.java", AUTH),
        T("security/AppUserRepository.java.j2", JAVA + "/security/AppUserRepository.java", AUTH),
        T("security/AuthController.java.j2", JAVA + "/security/AuthController.java", AUTH),
        T("security/AuthDtos.java.j2", JAVA + "/security/AuthDtos.java", AUTH),
        T("security/PasswordResetToken.java.j2", JAVA + "/security/PasswordResetToken.java", RESET),
        T("security/PasswordResetTokenRepository.java.j2", JAVA + "/security/PasswordResetTokenRepository.java", RESET),
        T("security/PasswordResetService.java.j2", JAVA + "/security/PasswordResetService.java", RESET),
        T("security/PasswordResetController.java.j2", JAVA + "/security/PasswordResetController.java", RESET),
        T("mail/MailService.java.j2", JAVA + "/mail/MailService.java", (Feature.MAIL_SERVICE,)),
        T("config/CacheConfig.java.j2", JAVA + "/config/CacheConfig.java", (Feature.CACHING,)),
        T("config/RateLimitFilter.java.j2", JAVA + "/config/RateLimitFilter.java", (Feature.RATE_LIMITING,)),
        T("storage/FileStorageService.java.j2", JAVA + "/storage/FileStorageService.java", FILES),
        T("storage/FileController.java.j2", JAVA + "/storage/FileController.java", FILES),
        T("common/schema.sql.j2", "src/main/resources/db/migration/V1__initial_schema.sql", (Feature.MIGRATIONS,)),
        T("application-test.yml.j2", "src/test/resources/application-test.yml", (Feature.INTEGRATION_TESTS,)),
        T("Dockerfile.j2", "Dockerfile", (Feature.DOCKER,)),
        T("common/docker-compose.yml.j2", "docker-compose.yml", (Feature.DOCKER,)),
    )

    ENTITY_FILES = (
        T("entity/Entity.java.j2", MODULE + "/entity/{entity_name}.java"),
        T("dto/Request.java.j2", MODULE + "/dto/{entity_name}Request.java"),
        T("dto/Response.java.j2", MODULE + "/dto/{entity_name}Response.java"),
        T("dto/Mapper.java.j2", MODULE + "/dto/{entity_name}Mapper.java"),
        T("repository/Repository.java.j2", MODULE + "/repository/{entity_name}Repository.java"),
        T("service/Service.java.j2", MODULE + "/service/{entity_name}Service.java"),
        T("controller/Controller.java.j2", MODULE + "/controller/{entity_name}Controller.java", (Feature.CRUD,)),
        T("test/ServiceTest.java.j2", TEST + "/{entity_module}/service/{entity_name}ServiceTest.java",
          (Feature.UNIT_TESTS,)),
        T("test/ControllerIntegrationTest.java.j2",
          TEST + "/{entity_module}/controller/{entity_name}ControllerIntegrationTest.java",
          (Feature.INTEGRATION_TESTS,)),
    )

    def create_type_mapper(self) -> JavaTypeMapper:
        return JavaTypeMapper()

    def validate_config(self, config: ProjectConfig) -> List[str]:
        return super().validate_config(config) + self.validate_java_package(config.base_package)

    def field_extras(self, column) -> Dict[str, Any]:
        return {
            "column_annotation": self.type_mapper.column_annotation(column),
            "validation": self.type_mapper.validation_annotations(column),
        }

    def extra_context(self, context: Dict[str, Any], config: ProjectConfig) -> Dict[str, Any]:
        db_name = context["project_snake"]
        environment = {
            "SPRING_DATASOURCE_URL": f"jdbc:postgresql://db:5432/{db_name}",
            "SPRING_DATASOURCE_USERNAME": "postgres",
            "SPRING_DATASOURCE_PASSWORD": "postgres",
        }
        if context["has"]["jwt_auth"]:
            environment["JWT_SECRET"] = "change-me-to-a-256-bit-secret-change-me-to-a-256-bit-secret"
        if context["has"]["mail_service"]:
            environment["MAIL_HOST"] = "mailpit"
        return {
            "artifact_id": context["project_slug"],
            "java_imports": dict(self.type_mapper.IMPORTS),
            "database_name": db_name,
            "requirements": [f"JDK {context['language_version']}", "Maven 3.9+", "PostgreSQL 15+"],
            "run_commands": ["mvn spring-boot:run"],
            "test_command": "mvn test",
            "gitignore_patterns": ["target/", "*.class", "*.jar", "!.mvn/wrapper/maven-wrapper.jar"],
            "app_environment": environment,
        }
