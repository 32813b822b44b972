import unittest

from sqlapigen.exceptions import GeneratorNotFoundError
from sqlapigen.generators import Feature, GeneratorRegistry, default_registry
from sqlapigen.generators.go_chi import GoChiGenerator
from sqlapigen.generators.go_gin import GoGinGenerator


class TestDefaultRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = default_registry()

    def test_all_targets_registered(self):
        self.assertEqual(len(self.registry), 8)
        self.assertEqual(
            [generator.key for generator in self.registry.all_generators()],
            [
                "java:spring-boot",
                "csharp:aspnetcore",
                "go:gin",
                "go:chi",
                "rust:axum",
                "typescript:nestjs",
                "php:laravel",
                "python:fastapi",
            ],
        )
        self.assertIn("GO:CHI", self.registry)
        self.assertNotIn("go:echo", self.registry)

    def test_languages_and_frameworks(self):
        self.assertEqual(
            self.registry.supported_languages(),
            ["java", "csharp", "go", "rust", "typescript", "php", "python"],
        )
        self.assertEqual(self.registry.supported_frameworks("Go"), ["gin", "chi"])
        self.assertEqual(self.registry.supported_frameworks("cobol"), [])

    def test_resolve(self):
        self.assertEqual(self.registry.resolve("java").key, "java:spring-boot")
        self.assertEqual(self.registry.resolve("go").key, "go:gin")
        self.assertEqual(self.registry.resolve("Go", "Chi").key, "go:chi")

    def test_resolve_unknown(self):
        with self.assertRaises(GeneratorNotFoundError) as ctx:
            self.registry.resolve("go", "echo")
        self.assertEqual(ctx.exception.context["framework"], "echo")
        self.assertIn("go:gin", ctx.exception.context["available"])
        with self.assertRaises(GeneratorNotFoundError):
            self.registry.resolve("cobol")

    def test_lookups_without_names(self):
        self.assertIsNone(self.registry.get_generator("go", None))
        self.assertIsNone(self.registry.get_default_generator(None))

    def test_generators_by_feature(self):
        keys = [g.key for g in self.registry.generators_by_feature(Feature.S3_STORAGE)]
        self.assertEqual(keys, ["java:spring-boot", "python:fastapi"])
        self.assertEqual(len(self.registry.generators_by_feature(Feature.CRUD)), 8)


class TestRegistration(unittest.TestCase):
    def test_first_generator_is_language_default(self):
        registry = GeneratorRegistry()
        registry.register(GoChiGenerator())
        registry.register(GoGinGenerator())
        self.assertEqual(registry.get_default_generator("go").framework, "chi")
        self.assertEqual(len(registry.generators_by_language("go")), 2)

    def test_reregistering_replaces(self):
        registry = GeneratorRegistry()
        registry.register(GoGinGenerator())
        replacement = GoGinGenerator()
        registry.register(replacement)
        self.assertEqual(len(registry), 1)
        self.assertIs(registry.get_generator("go", "gin"), replacement)

    def test_invalid_generators_rejected(self):
        registry = GeneratorRegistry()
        with self.assertRaises(ValueError):
            registry.register(None)

        generator = GoGinGenerator()
        generator.framework = " "
        with self.assertRaises(ValueError):
            registry.register(generator)
