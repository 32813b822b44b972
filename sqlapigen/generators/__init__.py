"""
Project generators, one per language/framework target.
"""

from .base import Feature, ProjectConfig, ProjectGenerator, TemplateFile
from .registry import GeneratorRegistry, default_registry

__all__ = [
    'Feature',
    'GeneratorRegistry',
    'ProjectConfig',
    'ProjectGenerator',
    'TemplateFile',
    'default_registry',
]
