"""
sqlapigen: CRUD API project scaffolding from SQL schemas.

Parses SQL DDL into a schema model and renders complete API projects for
Java/Spring Boot, C#/ASP.NET Core, Go (Gin and Chi), Rust/Axum,
TypeScript/NestJS, PHP/Laravel and Python/FastAPI.
"""

__version__ = "0.1.0"
