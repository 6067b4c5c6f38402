"""
Contract Validation Module

JSON Schema validation of the documents written by the persistence layer.
"""

from .validators import DOCUMENTS, DocumentValidator, SchemaLoader, default_loader

__all__ = [
    "DOCUMENTS",
    "SchemaLoader",
    "DocumentValidator",
    "default_loader",
]
