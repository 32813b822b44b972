# File: tests/conftest.py
# Shared fixtures: a small shop schema that exercises every relationship kind.

import pytest

from sqlapigen.generators.base import Feature, ProjectConfig
from sqlapigen.parser import SqlSchemaParser


SHOP_SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Product catalogue
CREATE TABLE categories (
    id BIGSERIAL PRIMARY KEY,
    name VARCHAR(100) NOT NULL UNIQUE,
    description TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP
);

CREATE TABLE products (
    id BIGSERIAL PRIMARY KEY,
    category_id BIGINT NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
    sku VARCHAR(40) NOT NULL UNIQUE,
    title VARCHAR(200) NOT NULL,
    price NUMERIC(10, 2) NOT NULL,
    in_stock BOOLEAN NOT NULL DEFAULT TRUE,
    keywords TEXT[],
    attributes JSONB,
    released_on DATE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ,
    deleted_at TIMESTAMPTZ
);

CREATE TABLE tags (
    id SERIAL PRIMARY KEY,
    label VARCHAR(50) NOT NULL
);

CREATE TABLE product_tags (
    product_id BIGINT NOT NULL REFERENCES products(id),
    tag_id INTEGER NOT NULL REFERENCES tags(id),
    PRIMARY KEY (product_id, tag_id)
);

CREATE TABLE customers (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email VARCHAR(255) NOT NULL UNIQUE,
    full_name VARCHAR(120)
);

CREATE TABLE orders (
    id BIGSERIAL PRIMARY KEY,
    customer_id UUID NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'pending',
    total NUMERIC(12, 2),
    placed_at TIMESTAMP
);

ALTER TABLE orders ADD CONSTRAINT fk_orders_customer
    FOREIGN KEY (customer_id) REFERENCES customers(id) ON DELETE RESTRICT;

CREATE INDEX idx_products_title ON products (title);

COMMENT ON TABLE products IS 'Items for sale';

CREATE OR REPLACE FUNCTION calculate_order_total(p_order_id BIGINT) RETURNS NUMERIC AS $$
BEGIN
    RETURN 0;
END;
$$ LANGUAGE plpgsql;
"""

ALL_FEATURES = set(Feature)


def parse_shop_schema():
    return SqlSchemaParser().parse(SHOP_SCHEMA_SQL, "shop.sql")


@pytest.fixture
def shop_sql() -> str:
    return SHOP_SCHEMA_SQL


@pytest.fixture
def shop_schema():
    """The parsed shop schema; a fresh copy per test."""
    return parse_shop_schema()


@pytest.fixture
def shop_sql_file(tmp_path):
    path = tmp_path / "shop.sql"
    path.write_text(SHOP_SCHEMA_SQL, encoding="utf-8")
    return path


@pytest.fixture
def full_config() -> ProjectConfig:
    """Every feature enabled; generators drop the ones they do not support."""
    return ProjectConfig(project_name="shop-api", base_package="com.acme.shop", features=set(ALL_FEATURES))
