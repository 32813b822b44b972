import unittest

import pytest

from sqlapigen.domain.models import FieldType, SqlColumn
from sqlapigen.mappers import (
    CSharpTypeMapper,
    GoChiTypeMapper,
    GoTypeMapper,
    JavaTypeMapper,
    PhpTypeMapper,
    PythonTypeMapper,
    RustTypeMapper,
    TypeScriptTypeMapper,
    go_exported_name,
    go_unexported_name,
)


class MapperTestCase(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _schema(self, shop_schema):
        self.schema = shop_schema

    def column(self, table_name: str, column_name: str) -> SqlColumn:
        return self.schema.get_table(table_name).get_column(column_name)


class TestBaseBehaviour(MapperTestCase):
    def test_default_value_literals(self):
        java = JavaTypeMapper()
        self.assertEqual(java.default_value(self.column("orders", "status")), '"pending"')
        self.assertEqual(java.default_value(self.column("products", "in_stock")), "true")
        # Expressions are left to the database
        self.assertIsNone(java.default_value(self.column("products", "created_at")))
        self.assertIsNone(java.default_value(self.column("products", "title")))

    def test_numeric_default_passes_through(self):
        column = SqlColumn(name="quantity", sql_type="INTEGER", default_value="5")
        self.assertEqual(JavaTypeMapper().default_value(column), "5")

    def test_quoted_default_on_non_string_is_ignored(self):
        column = SqlColumn(name="quantity", sql_type="INTEGER", default_value="'5'")
        self.assertIsNone(JavaTypeMapper().default_value(column))

    def test_primary_key_type(self):
        self.assertEqual(JavaTypeMapper().primary_key_type(self.schema.get_table("customers")), "UUID")
        self.assertEqual(JavaTypeMapper().primary_key_type(self.schema.get_table("tags")), "Integer")


class TestJavaTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = JavaTypeMapper()

    def test_types(self):
        self.assertEqual(self.mapper.column_type(self.column("products", "price")), "BigDecimal")
        self.assertEqual(self.mapper.column_type(self.column("products", "keywords")), "List<String>")
        self.assertEqual(self.mapper.column_type(self.column("products", "created_at")), "LocalDateTime")
        self.assertEqual(self.mapper.column_type(self.column("customers", "id")), "UUID")

    def test_required_imports(self):
        imports = self.mapper.required_imports(self.schema.get_table("products").columns)
        self.assertEqual(
            imports,
            ["java.math.BigDecimal", "java.time.LocalDate", "java.time.LocalDateTime", "java.util.List"],
        )

    def test_keywords_get_suffix(self):
        self.assertEqual(self.mapper.field_name("class"), "classValue")
        self.assertEqual(self.mapper.field_name("in_stock"), "inStock")

    def test_column_annotation(self):
        self.assertEqual(
            self.mapper.column_annotation(self.column("products", "sku")),
            '@Column(name = "sku", nullable = false, unique = true, length = 40)',
        )
        self.assertEqual(
            self.mapper.column_annotation(self.column("products", "price")),
            '@Column(name = "price", nullable = false, precision = 10, scale = 2)',
        )
        self.assertEqual(
            self.mapper.column_annotation(self.column("products", "attributes")),
            '@Column(name = "attributes", columnDefinition = "jsonb")',
        )

    def test_validation_annotations(self):
        self.assertEqual(
            self.mapper.validation_annotations(self.column("products", "title")),
            ["@NotBlank", "@Size(max = 200)"],
        )
        self.assertEqual(self.mapper.validation_annotations(self.column("products", "price")), ["@NotNull"])
        self.assertEqual(self.mapper.validation_annotations(self.column("products", "id")), [])

    def test_unique_column_is_marked(self):
        self.assertEqual(
            self.mapper.validation_annotations(self.column("products", "sku")),
            ["@NotBlank", "@Size(max = 40)", "// @Unique"],
        )
        self.assertNotIn("// @Unique", self.mapper.validation_annotations(self.column("products", "title")))


class TestGoTypeMappers(MapperTestCase):
    def test_go_names(self):
        self.assertEqual(go_exported_name("user_id"), "UserID")
        self.assertEqual(go_exported_name("api_url"), "APIURL")
        self.assertEqual(go_unexported_name("user_id"), "userID")
        self.assertEqual(go_unexported_name("category"), "category")

    def test_gin_types(self):
        mapper = GoTypeMapper()
        self.assertEqual(mapper.column_type(self.column("products", "title")), "string")
        self.assertEqual(mapper.column_type(self.column("products", "released_on")), "*time.Time")
        self.assertEqual(mapper.column_type(self.column("products", "keywords")), "[]string")
        self.assertEqual(mapper.column_type(self.column("products", "attributes")), "datatypes.JSON")
        self.assertEqual(mapper.column_type(self.column("products", "price")), "decimal.Decimal")

    def test_gin_struct_tags(self):
        mapper = GoTypeMapper()
        self.assertEqual(
            mapper.struct_tags(self.column("products", "id")),
            'gorm:"column:id;primaryKey;autoIncrement" json:"id"',
        )
        self.assertEqual(
            mapper.struct_tags(self.column("products", "sku")),
            'gorm:"column:sku;not null;size:40;uniqueIndex" json:"sku"',
        )
        self.assertEqual(
            mapper.struct_tags(self.column("products", "released_on")),
            'gorm:"column:released_on" json:"releasedOn,omitempty"',
        )

    def test_gin_binding_tag(self):
        mapper = GoTypeMapper()
        self.assertEqual(mapper.binding_tag(self.column("customers", "email")), 'binding:"required,max=255,email"')
        self.assertEqual(mapper.binding_tag(self.column("products", "in_stock")), 'binding:"omitempty"')

    def test_chi_nullable_columns_use_pgtype(self):
        mapper = GoChiTypeMapper()
        full_name = self.column("customers", "full_name")
        self.assertEqual(mapper.column_type(full_name), "pgtype.Text")
        self.assertEqual(mapper.pointer_type(full_name), "*pgtype.Text")
        title = self.column("products", "title")
        self.assertEqual(mapper.column_type(title), "string")
        self.assertEqual(mapper.pointer_type(title), "*string")
        self.assertEqual(mapper.column_type(self.column("tags", "id")), "int32")
        self.assertEqual(mapper.column_type(self.column("orders", "total")), "pgtype.Numeric")

    def test_chi_tags_and_placeholder(self):
        mapper = GoChiTypeMapper()
        self.assertEqual(
            mapper.struct_tags(self.column("customers", "full_name")),
            'json:"fullName" db:"full_name"',
        )
        self.assertEqual(mapper.placeholder(3), "$3")
        self.assertIn(
            "github.com/jackc/pgx/v5/pgtype",
            mapper.required_imports(self.schema.get_table("customers").columns),
        )


class TestRustTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = RustTypeMapper()

    def test_timestamps_follow_time_zone(self):
        self.assertEqual(self.mapper.column_type(self.column("orders", "placed_at")), "Option<NaiveDateTime>")
        self.assertEqual(self.mapper.column_type(self.column("products", "created_at")), "DateTime<Utc>")
        self.assertEqual(self.mapper.column_type(self.column("categories", "created_at")), "NaiveDateTime")

    def test_types(self):
        self.assertEqual(self.mapper.column_type(self.column("products", "keywords")), "Option<Vec<String>>")
        self.assertEqual(self.mapper.column_type(self.column("products", "price")), "Decimal")
        self.assertEqual(self.mapper.column_type(self.column("customers", "id")), "Uuid")

    def test_field_names(self):
        self.assertEqual(self.mapper.field_name("type"), "r#type")
        self.assertEqual(self.mapper.field_name("inStock"), "in_stock")

    def test_validate_attributes(self):
        self.assertEqual(
            self.mapper.validate_attributes(self.column("customers", "email")),
            ["#[validate(length(max = 255, min = 1))]", "#[validate(email)]"],
        )
        self.assertEqual(
            self.mapper.validate_attributes(self.column("customers", "full_name")),
            ["#[validate(length(max = 120))]"],
        )

    def test_string_default(self):
        self.assertEqual(self.mapper.default_value(self.column("orders", "status")), '"pending".to_string()')


class TestCSharpTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = CSharpTypeMapper()

    def test_types(self):
        self.assertEqual(self.mapper.column_type(self.column("orders", "total")), "decimal?")
        self.assertEqual(self.mapper.column_type(self.column("customers", "id")), "Guid")
        self.assertEqual(self.mapper.column_type(self.column("products", "released_on")), "DateOnly?")
        self.assertEqual(self.mapper.field_name("full_name"), "FullName")

    def test_data_annotations(self):
        self.assertEqual(
            self.mapper.data_annotations(self.column("products", "id")),
            ["[Key]", "[DatabaseGenerated(DatabaseGeneratedOption.Identity)]", '[Column("id")]'],
        )
        self.assertEqual(
            self.mapper.data_annotations(self.column("products", "price")),
            ["[Required]", "[Precision(10, 2)]", '[Column("price")]'],
        )
        self.assertEqual(
            self.mapper.data_annotations(self.column("products", "sku")),
            ["[Required]", "[MaxLength(40)]", '[Column("sku")]'],
        )


class TestTypeScriptTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = TypeScriptTypeMapper()

    def test_types(self):
        self.assertEqual(self.mapper.column_type(self.column("products", "keywords")), "string[] | null")
        self.assertEqual(self.mapper.column_type(self.column("products", "created_at")), "Date")
        self.assertEqual(self.mapper.list_type("string | null"), "Array<string | null>")

    def test_column_options(self):
        self.assertEqual(
            self.mapper.column_options(self.column("products", "sku")),
            "{ name: 'sku', type: 'varchar', length: 40, unique: true }",
        )
        self.assertEqual(
            self.mapper.column_options(self.column("categories", "description")),
            "{ name: 'description', type: 'text', nullable: true }",
        )
        self.assertEqual(
            self.mapper.column_options(self.column("products", "keywords")),
            "{ name: 'keywords', type: 'varchar', array: true, nullable: true }",
        )
        self.assertEqual(
            self.mapper.column_options(self.column("orders", "status")),
            "{ name: 'status', type: 'varchar', length: 20, default: 'pending' }",
        )

    def test_validator_decorators(self):
        self.assertEqual(
            self.mapper.validator_decorators(self.column("customers", "email")),
            ["@IsNotEmpty()", "@IsEmail()", "@MaxLength(255)"],
        )
        self.assertEqual(
            self.mapper.validator_decorators(self.column("products", "keywords")),
            ["@IsOptional()", "@IsArray()"],
        )
        self.assertEqual(
            self.mapper.validator_imports(self.schema.get_table("customers").columns),
            ["IsDefined", "IsEmail", "IsNotEmpty", "IsOptional", "IsString", "IsUUID", "MaxLength"],
        )


class TestPythonTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = PythonTypeMapper()

    def test_types(self):
        self.assertEqual(self.mapper.column_type(self.column("products", "price")), "Decimal")
        self.assertEqual(self.mapper.column_type(self.column("products", "keywords")), "list[str] | None")
        self.assertEqual(self.mapper.field_name("inStock"), "in_stock")
        self.assertEqual(self.mapper.field_name("class"), "class_")

    def test_sqlalchemy_types(self):
        self.assertEqual(self.mapper.sqlalchemy_type(self.column("products", "keywords")), "ARRAY(String(255))")
        self.assertEqual(self.mapper.sqlalchemy_type(self.column("products", "price")), "Numeric(10, 2)")
        self.assertEqual(self.mapper.sqlalchemy_type(self.column("products", "sku")), "String(40)")
        self.assertEqual(
            self.mapper.sqlalchemy_type(self.column("products", "created_at")), "DateTime(timezone=True)"
        )
        self.assertEqual(
            self.mapper.sqlalchemy_imports([self.column("products", "keywords")]),
            ["ARRAY", "String"],
        )

    def test_pydantic_types(self):
        email = self.column("customers", "email")
        self.assertEqual(self.mapper.pydantic_type(email), "EmailStr")
        self.assertEqual(self.mapper.pydantic_imports([email]), ["from pydantic import EmailStr"])
        self.assertEqual(self.mapper.pydantic_type(self.column("orders", "total")), "Decimal | None")
        self.assertEqual(self.mapper.default_value(self.column("products", "in_stock")), "True")


class TestPhpTypeMapper(MapperTestCase):
    def setUp(self):
        self.mapper = PhpTypeMapper()

    def test_migration_columns(self):
        self.assertEqual(
            self.mapper.migration_column(self.column("products", "created_at")),
            "$table->timestamp('created_at')->useCurrent()",
        )
        self.assertEqual(
            self.mapper.migration_column(self.column("orders", "status")),
            "$table->string('status', 20)->default('pending')",
        )
        self.assertEqual(
            self.mapper.migration_column(self.column("products", "in_stock")),
            "$table->boolean('in_stock')->default(true)",
        )
        self.assertEqual(
            self.mapper.migration_column(self.column("products", "price")),
            "$table->decimal('price', 10, 2)",
        )
        self.assertEqual(
            self.mapper.migration_column(self.column("categories", "description")),
            "$table->text('description')->nullable()",
        )

    def test_casts(self):
        self.assertEqual(self.mapper.cast(self.column("products", "price")), "decimal:2")
        self.assertEqual(self.mapper.cast(self.column("products", "in_stock")), "boolean")
        self.assertEqual(self.mapper.cast(self.column("products", "keywords")), "array")
        self.assertIsNone(self.mapper.cast(self.column("products", "sku")))

    def test_validation_rules(self):
        email = self.column("customers", "email")
        self.assertEqual(
            self.mapper.validation_rules(email, "customers"),
            "required|email|max:255|unique:customers,email",
        )
        self.assertEqual(
            self.mapper.validation_rules(email, "customers", update=True),
            "sometimes|required|email|max:255|unique:customers,email",
        )
        self.assertEqual(
            self.mapper.validation_rules(self.column("orders", "total"), "orders"),
            "nullable|numeric",
        )

    def test_type_names(self):
        self.assertEqual(self.mapper.column_type(self.column("customers", "full_name")), "?string")
        self.assertEqual(self.mapper.field_name("fullName"), "full_name")

    def test_unknown_field_type_mapping(self):
        self.assertEqual(self.mapper.map_field_type(FieldType.UNKNOWN), "mixed")
