import unittest

import pytest

from sqlapigen.domain.models import (
    FieldType,
    ForeignKeyAction,
    IndexType,
    RelationType,
    SqlColumn,
    SqlForeignKey,
    SqlSchema,
    SqlTable,
)
from sqlapigen.domain.relationships import RelationshipAnalyzer
from sqlapigen.domain.sql_types import normalize_sql_type, parse_type_arguments, quote_identifier, resolve_field_type


class TestSqlTypes(unittest.TestCase):
    def test_resolve_field_type(self):
        self.assertEqual(resolve_field_type("VARCHAR(100)"), FieldType.STRING)
        self.assertEqual(resolve_field_type("int[]"), FieldType.ARRAY)
        self.assertEqual(resolve_field_type("bigserial"), FieldType.LONG)
        self.assertEqual(resolve_field_type("double precision"), FieldType.DOUBLE)
        self.assertEqual(resolve_field_type("TIMESTAMP(6) WITH TIME ZONE"), FieldType.DATETIME)
        self.assertEqual(resolve_field_type("jsonb"), FieldType.JSON)
        self.assertEqual(resolve_field_type("interval"), FieldType.DURATION)
        self.assertEqual(resolve_field_type("made_up_type"), FieldType.UNKNOWN)
        self.assertEqual(resolve_field_type(None), FieldType.UNKNOWN)

    def test_normalize_sql_type(self):
        self.assertEqual(normalize_sql_type("varchar(50)"), "VARCHAR")
        self.assertEqual(normalize_sql_type("character  varying(20)"), "CHARACTER VARYING")

    def test_parse_type_arguments(self):
        self.assertEqual(parse_type_arguments("numeric(10,2)"), (10, 10, 2))
        self.assertEqual(parse_type_arguments("varchar(50)"), (50, None, None))
        self.assertEqual(parse_type_arguments("varchar(max)"), (None, None, None))
        self.assertEqual(parse_type_arguments("text"), (None, None, None))

    def test_quote_identifier(self):
        self.assertEqual(quote_identifier("orders"), "orders")
        self.assertEqual(quote_identifier("order"), '"order"')
        self.assertEqual(quote_identifier("User"), '"User"')
        self.assertEqual(quote_identifier("unit price"), '"unit price"')
        self.assertEqual(quote_identifier('say"hi'), '"say""hi"')
        self.assertEqual(quote_identifier("sales.order"), 'sales."order"')


class TestSqlColumn(unittest.TestCase):
    def test_field_type_resolved_and_pk_not_nullable(self):
        column = SqlColumn(name="user_id", sql_type="BIGINT", primary_key=True)
        self.assertEqual(column.field_type, FieldType.LONG)
        self.assertFalse(column.nullable)
        self.assertEqual(column.field_name, "userId")
        self.assertTrue(column.is_numeric)

    def test_array_element_type(self):
        column = SqlColumn(name="scores", sql_type="INTEGER[]")
        self.assertTrue(column.is_array)
        self.assertEqual(column.element_type, FieldType.INTEGER)

    def test_temporal(self):
        self.assertTrue(SqlColumn(name="d", sql_type="DATE").is_temporal)
        self.assertFalse(SqlColumn(name="s", sql_type="TEXT").is_temporal)


class TestForeignKey(unittest.TestCase):
    def test_names(self):
        fk = SqlForeignKey(column_name="created_by_id", referenced_table="public.app_users")
        self.assertEqual(fk.property_name, "createdBy")
        self.assertEqual(fk.referenced_entity_name, "AppUser")

    def test_action_parsing(self):
        self.assertEqual(ForeignKeyAction.from_sql("set null"), ForeignKeyAction.SET_NULL)
        self.assertEqual(ForeignKeyAction.from_sql("SET_DEFAULT"), ForeignKeyAction.SET_DEFAULT)
        self.assertEqual(ForeignKeyAction.from_sql("whatever"), ForeignKeyAction.NO_ACTION)
        self.assertEqual(ForeignKeyAction.from_sql(None), ForeignKeyAction.NO_ACTION)

    def test_index_type_parsing(self):
        self.assertEqual(IndexType.from_sql("GIN"), IndexType.GIN)
        self.assertEqual(IndexType.from_sql("unknown"), IndexType.BTREE)

    def test_unique_column_infers_one_to_one(self):
        table = SqlTable(
            name="profiles",
            columns=[
                SqlColumn(name="id", sql_type="INT", primary_key=True),
                SqlColumn(name="user_id", sql_type="INT", unique=True),
            ],
            primary_key_columns=["id"],
        )
        fk = SqlForeignKey(column_name="user_id", referenced_table="users")
        table.foreign_keys.append(fk)
        self.assertEqual(fk.infer_relation_type(table), RelationType.ONE_TO_ONE)


class TestSqlTable(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _schema(self, shop_schema):
        self.schema = shop_schema

    def test_names(self):
        table = self.schema.get_table("categories")
        self.assertEqual(table.entity_name, "Category")
        self.assertEqual(table.entity_variable_name, "category")
        self.assertEqual(table.snake_name, "category")
        self.assertEqual(table.kebab_name, "categories")

        junction = self.schema.get_table("product_tags")
        self.assertEqual(junction.module_name, "producttags")
        self.assertEqual(junction.kebab_name, "product-tags")

    def test_business_columns_skip_keys_and_base_columns(self):
        products = self.schema.get_table("products")
        names = [column.name for column in products.business_columns]
        self.assertEqual(names, ["sku", "title", "price", "in_stock", "keywords", "attributes", "released_on"])
        self.assertTrue(products.extends_base)
        self.assertTrue(products.supports_soft_delete)
        self.assertFalse(self.schema.get_table("tags").extends_base)

    def test_audit_tables(self):
        self.assertTrue(SqlTable(name="orders_aud").is_audit_table)
        self.assertTrue(SqlTable(name="revision_info").is_audit_table)
        self.assertFalse(SqlTable(name="orders").is_audit_table)


class TestSqlSchema(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _schema(self, shop_schema):
        self.schema = shop_schema

    def test_entity_and_junction_tables(self):
        self.assertEqual(
            [table.name for table in self.schema.entity_tables],
            ["categories", "products", "tags", "customers", "orders"],
        )
        self.assertEqual([table.name for table in self.schema.junction_tables], ["product_tags"])

    def test_get_table_is_case_insensitive(self):
        self.assertIs(self.schema.get_table("PRODUCTS"), self.schema.get_table("public.products"))
        self.assertIsNone(self.schema.get_table("missing"))
        self.assertIsNone(self.schema.get_table(None))

    def test_functions_attach_to_matching_table(self):
        grouped = self.schema.functions_by_table()
        self.assertEqual(list(grouped), ["orders"])
        self.assertEqual(grouped["orders"][0].name, "calculate_order_total")

    def test_unmatched_functions_are_global(self):
        from sqlapigen.domain.models import SqlFunction

        self.schema.functions.append(SqlFunction(name="refresh_statistics"))
        self.assertEqual([f.name for f in self.schema.functions_by_table()["_global"]], ["refresh_statistics"])

    def test_valid_schema_has_no_issues(self):
        self.assertEqual(self.schema.validate(), [])

    def test_validate_reports_problems(self):
        schema = SqlSchema(
            tables=[
                SqlTable(name="logs", columns=[SqlColumn(name="message", sql_type="TEXT")]),
                SqlTable(
                    name="items",
                    columns=[SqlColumn(name="id", sql_type="INT", primary_key=True)],
                    primary_key_columns=["id"],
                    foreign_keys=[SqlForeignKey(column_name="owner_id", referenced_table="owners")],
                ),
                SqlTable(
                    name="item",
                    columns=[SqlColumn(name="id", sql_type="INT", primary_key=True)],
                    primary_key_columns=["id"],
                ),
            ]
        )
        issues = schema.validate()
        self.assertIn("Table 'logs' has no primary key", issues)
        self.assertIn("Foreign key in 'items' references non-existent table 'owners'", issues)
        self.assertIn("Multiple tables would generate entity name 'Item'", issues)

    def test_tables_by_module(self):
        grouped = self.schema.tables_by_module()
        self.assertEqual(grouped["products"][0].name, "products")
        self.assertNotIn("producttags", grouped)

    def test_indexes_for_includes_standalone_indexes(self):
        products = self.schema.get_table("products")
        self.assertEqual([index.name for index in self.schema.indexes_for(products)], ["idx_products_title"])
        self.assertEqual(self.schema.indexes_for(self.schema.get_table("tags")), [])

    def test_table_unique_constraints_skip_column_level_unique(self):
        table = SqlTable(
            name="accounts",
            columns=[SqlColumn(name="email", sql_type="TEXT", unique=True), SqlColumn(name="region", sql_type="TEXT")],
            unique_constraints=[["email"], ["region", "email"]],
        )
        self.assertEqual(table.table_unique_constraints, [["region", "email"]])


class TestRelationshipAnalyzer(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _schema(self, shop_schema):
        self.schema = shop_schema
        self.analyzer = RelationshipAnalyzer(shop_schema)

    def test_outgoing_relationships(self):
        products = self.schema.get_table("products")
        relationships = self.analyzer.relationships_for(products)
        self.assertEqual(len(relationships), 1)
        relationship = relationships[0]
        self.assertEqual(relationship.relation_type, RelationType.MANY_TO_ONE)
        self.assertEqual(relationship.property_name, "category")
        self.assertEqual(relationship.target_entity, "Category")

    def test_junction_foreign_keys_are_many_to_many(self):
        junction = self.schema.get_table("product_tags")
        kinds = {r.relation_type for r in self.analyzer.relationships_for(junction)}
        self.assertEqual(kinds, {RelationType.MANY_TO_MANY})

    def test_inverse_relationships_skip_junction_tables(self):
        categories = self.schema.get_table("categories")
        inverse = self.analyzer.inverse_relationships(categories)
        self.assertEqual([r.source_table.name for r in inverse], ["products"])

        tags = self.schema.get_table("tags")
        self.assertEqual(self.analyzer.inverse_relationships(tags), [])

    def test_many_to_many_from_both_sides(self):
        products = self.schema.get_table("products")
        links = self.analyzer.many_to_many(products)
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].junction_table.name, "product_tags")
        self.assertEqual(links[0].join_column, "product_id")
        self.assertEqual(links[0].inverse_join_column, "tag_id")
        self.assertEqual(links[0].property_name, "tags")

        tags = self.schema.get_table("tags")
        reverse = self.analyzer.many_to_many(tags)
        self.assertEqual(reverse[0].target_entity, "Product")
        self.assertEqual(reverse[0].property_name, "products")

    def test_relationships_by_table(self):
        grouped = self.analyzer.relationships_by_table()
        self.assertEqual(sorted(grouped), ["orders", "product_tags", "products"])
