"""Host schema models: a reference-based repository and an inline tree."""
from schemarules.hosts.repository import RepositorySchemaGenerator, SchemaRepository
from schemarules.hosts.store import DictSchemaStore, SchemaStore
from schemarules.hosts.tree import SchemaResolver, TreeSchemaGenerator

__all__ = [
    "SchemaStore",
    "DictSchemaStore",
    "SchemaRepository",
    "RepositorySchemaGenerator",
    "SchemaResolver",
    "TreeSchemaGenerator",
]
