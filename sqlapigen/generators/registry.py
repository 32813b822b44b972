"""
Registry of project generators keyed by language and framework.
"""

import logging
from typing import Dict, List, Optional

from ..exceptions import GeneratorNotFoundError
from .base import Feature, ProjectGenerator

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """Holds generators in registration order; lookups are case-insensitive."""

    def __init__(self):
        self._generators: Dict[str, ProjectGenerator] = {}
        self._defaults: Dict[str, ProjectGenerator] = {}

    def register(self, generator: ProjectGenerator) -> None:
        """
        Register a generator. The first generator registered for a language
        becomes that language's default.

        Raises:
            ValueError: If the generator is None or has no language or framework.
        """
        if generator is None:
            raise ValueError("Generator cannot be None")
        if not generator.language or not generator.language.strip():
            raise ValueError("Generator language cannot be blank")
        if not generator.framework or not generator.framework.strip():
            raise ValueError("Generator framework cannot be blank")

        key = generator.key
        if key in self._generators:
            logger.warning(f"Replacing registered generator for {key}")
        self._generators[key] = generator
        self._defaults.setdefault(generator.language.lower(), generator)
        logger.debug(f"Registered generator {key} ({generator.display_name})")

    def get_generator(self, language: Optional[str], framework: Optional[str]) -> Optional[ProjectGenerator]:
        if not language or not framework:
            return None
        return self._generators.get(f"{language}:{framework}".lower())

    def get_default_generator(self, language: Optional[str]) -> Optional[ProjectGenerator]:
        if not language:
            return None
        return self._defaults.get(language.lower())

    def all_generators(self) -> List[ProjectGenerator]:
        return list(self._generators.values())

    def generators_by_feature(self, feature: Feature) -> List[ProjectGenerator]:
        return [g for g in self._generators.values() if g.supports(feature)]

    def generators_by_language(self, language: str) -> List[ProjectGenerator]:
        lowered = (language or "").lower()
        return [g for g in self._generators.values() if g.language.lower() == lowered]

    def supported_languages(self) -> List[str]:
        languages = []
        for generator in self._generators.values():
            if generator.language not in languages:
                languages.append(generator.language)
        return languages

    def supported_frameworks(self, language: str) -> List[str]:
        return [g.framework for g in self.generators_by_language(language)]

    def resolve(self, language: str, framework: Optional[str] = None) -> ProjectGenerator:
        """
        Generator for ``language`` and ``framework``, or the language default
        when no framework is given.

        Raises:
            GeneratorNotFoundError: If nothing is registered for the combination.
        """
        if framework:
            generator = self.get_generator(language, framework)
        else:
            generator = self.get_default_generator(language)
        if generator is None:
            raise GeneratorNotFoundError(
                f"No generator registered for language '{language}'"
                + (f" and framework '{framework}'" if framework else ""),
                language=language,
                framework=framework,
                available=list(self._generators),
            )
        return generator

    def __len__(self) -> int:
        return len(self._generators)

    def __contains__(self, key: str) -> bool:
        return (key or "").lower() in self._generators


def default_registry() -> GeneratorRegistry:
    """A registry holding every built-in generator."""
    from .csharp_aspnet import CSharpAspNetGenerator
    from .go_chi import GoChiGenerator
    from .go_gin import GoGinGenerator
    from .java_spring import JavaSpringBootGenerator
    from .php_laravel import PhpLaravelGenerator
    from .python_fastapi import PythonFastApiGenerator
    from .rust_axum import RustAxumGenerator
    from .ts_nestjs import TypeScriptNestJsGenerator

    registry = GeneratorRegistry()
    for generator_class in (
        JavaSpringBootGenerator,
        CSharpAspNetGenerator,
        GoGinGenerator,
        GoChiGenerator,
        RustAxumGenerator,
        TypeScriptNestJsGenerator,
        PhpLaravelGenerator,
        PythonFastApiGenerator,
    ):
        registry.register(generator_class())
    return registry
