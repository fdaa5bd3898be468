"""Schema-driven table access: introspection, type mapping, validation, field protection, SQL query building, row serialisation and OpenAPI generation."""

__version__ = "0.1.0"