"""
Stored document contracts

The persistence layer writes two documents, each described by a JSON Schema
(Draft 2020-12) under contracts/schema/:
- accounts.json   — accounts with cash balances and transaction logs
- portfolios.json — portfolios with transaction logs and performance history

A document is validated before it is written and again after it is read.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft202012Validator, SchemaError, ValidationError

DOCUMENTS = ("accounts", "portfolios")

# <repo>/contracts/schema, four levels up from this file
DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parents[3] / "contracts" / "schema"


class SchemaLoader:
    """Reads and meta-validates schema files, caching each one."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or DEFAULT_SCHEMA_DIR
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, name: str) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: No contracts/schema/<name>.json
            ValueError: The file is not a valid Draft 2020-12 schema
        """
        if name not in self._schemas:
            path = self._schema_dir / f"{name}.json"
            if not path.exists():
                raise FileNotFoundError(f"Schema not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                schema = json.load(f)
            try:
                Draft202012Validator.check_schema(schema)
            except SchemaError as e:
                raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e
            self._schemas[name] = schema
        return self._schemas[name]


@lru_cache(maxsize=1)
def default_loader() -> SchemaLoader:
    return SchemaLoader()


class DocumentValidator:
    """Validator of one stored document kind."""

    def __init__(self, document: str, loader: SchemaLoader | None = None):
        if document not in DOCUMENTS:
            raise ValueError(f"Unknown document {document!r}, expected one of {DOCUMENTS}")
        self.document = document
        self._validator = Draft202012Validator((loader or default_loader()).load_schema(document))

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If the data does not match the schema
        """
        self._validator.validate(data)


__all__ = [
    "DOCUMENTS",
    "SchemaLoader",
    "DocumentValidator",
    "default_loader",
    "ValidationError",
]
