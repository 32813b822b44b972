"""
Relationship analysis over a parsed schema.

Resolves foreign keys into outgoing references, inverse collections and
many-to-many links through junction tables.
"""

import logging
from typing import Dict, List, Optional

from .models import ManyToManyRelation, SqlSchema, SqlTable, TableRelationship

logger = logging.getLogger(__name__)


class RelationshipAnalyzer:
    """Indexes the relationships of a schema by table."""

    def __init__(self, schema: SqlSchema):
        self.schema = schema
        self._relationships: Optional[List[TableRelationship]] = None

    @property
    def relationships(self) -> List[TableRelationship]:
        if self._relationships is None:
            self._relationships = self.schema.all_relationships()
            logger.debug(f"Resolved {len(self._relationships)} relationships")
        return self._relationships

    def relationships_by_table(self) -> Dict[str, List[TableRelationship]]:
        """Outgoing relationships keyed by source table name."""
        grouped: Dict[str, List[TableRelationship]] = {}
        for relationship in self.relationships:
            grouped.setdefault(relationship.source_table.name, []).append(relationship)
        return grouped

    def relationships_for(self, table: SqlTable) -> List[TableRelationship]:
        return self.relationships_by_table().get(table.name, [])

    def inverse_relationships(self, table: SqlTable) -> List[TableRelationship]:
        """Relationships pointing at ``table`` from non-junction tables."""
        return [
            relationship for relationship in self.relationships
            if relationship.target_table.name == table.name
            and not relationship.source_table.is_junction_table
        ]

    def many_to_many(self, table: SqlTable) -> List[ManyToManyRelation]:
        """Many-to-many links of ``table`` through every junction table that references it."""
        relations = []
        for junction in self.schema.junction_tables:
            this_fk = None
            other_fk = None
            for fk in junction.foreign_keys:
                referenced = self.schema.get_table(fk.referenced_table)
                if this_fk is None and referenced is not None and referenced.name == table.name:
                    this_fk = fk
                else:
                    other_fk = fk
            if this_fk is None or other_fk is None:
                continue

            target = self.schema.get_table(other_fk.referenced_table)
            if target is None:
                logger.warning(
                    f"Junction table '{junction.name}' references unknown table "
                    f"'{other_fk.referenced_table}', skipping many-to-many link."
                )
                continue

            relations.append(
                ManyToManyRelation(
                    junction_table=junction,
                    join_column=this_fk.column_name,
                    inverse_join_column=other_fk.column_name,
                    target_table=target,
                )
            )
        return relations
