"""
SQL schema parsing.
"""

from .sql_parser import SqlSchemaParser, split_top_level

__all__ = ['SqlSchemaParser', 'split_top_level']
