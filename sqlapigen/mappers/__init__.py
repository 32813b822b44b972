"""
Per-language type mappers.
"""

from .base import BaseTypeMapper
from .csharp import CSharpTypeMapper
from .go import GoChiTypeMapper, GoTypeMapper, go_exported_name, go_unexported_name
from .java import JavaTypeMapper
from .php import PhpTypeMapper
from .python import PythonTypeMapper
from .rust import RustTypeMapper
from .typescript import TypeScriptTypeMapper

__all__ = [
    'BaseTypeMapper',
    'CSharpTypeMapper',
    'GoChiTypeMapper',
    'GoTypeMapper',
    'JavaTypeMapper',
    'PhpTypeMapper',
    'PythonTypeMapper',
    'RustTypeMapper',
    'TypeScriptTypeMapper',
    'go_exported_name',
    'go_unexported_name',
]
