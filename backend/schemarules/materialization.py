"""Side-Effect-Safe Materialization

Rule application may create schemas in the shared store just to read them
(the container model of expanded query parameters, an enum whose values a
rule documents). A MaterializationSpan makes that auditable:

1. ``snapshot()`` records the ids present before the span
2. rule application runs and may add entries
3. ``cleanup(roots)`` removes every id created during the span that is not
   reachable by ``$ref`` from the span's emitted fragments

Ids present before the snapshot are never removed, even when the span
mutated them.

Usage:
    span = MaterializationSpan(repository)
    with span.guard(lambda: [operation.fragment]):
        operation_filter.apply(operation, provider)
"""
from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from schemarules.errors import SchemaRulesError, missing_snapshot, snapshot_already_taken
from schemarules.logging import schema_logger

if TYPE_CHECKING:
    from schemarules.hosts.store import SchemaStore

log = schema_logger()


def _refs_in(node: Any) -> Iterator[str]:
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            if isinstance(ref := current.get("$ref"), str):
                yield ref
            stack.extend(current.values())
        elif isinstance(current, list):
            stack.extend(current)


def referenced_ids(store: SchemaStore, roots: Iterable[Any]) -> set[str]:
    """Store ids reachable from ``roots``, following refs transitively through the store."""
    reached: set[str] = set()
    queue = deque(roots)
    while queue:
        for ref in _refs_in(queue.popleft()):
            if (schema_id := store.id_for_ref(ref)) is None or schema_id in reached:
                continue
            reached.add(schema_id)
            if (schema := store.get(schema_id)) is not None:
                queue.append(schema)
    return reached


class MaterializationSpan:
    """Snapshot/diff guard over one schema store."""

    __slots__ = ("store", "removed", "_snapshot")

    def __init__(self, store: SchemaStore):
        self.store = store
        self.removed: list[str] = []
        self._snapshot: frozenset[str] | None = None

    @property
    def active(self) -> bool:
        return self._snapshot is not None

    def snapshot(self) -> frozenset[str]:
        if self._snapshot is not None:
            raise SchemaRulesError(snapshot_already_taken())
        self._snapshot = frozenset(self.store.ids())
        return self._snapshot

    @property
    def created(self) -> set[str]:
        if self._snapshot is None:
            raise SchemaRulesError(missing_snapshot())
        return set(self.store.ids()) - self._snapshot

    def cleanup(self, roots: Iterable[Any]) -> list[str]:
        """Remove created, unreferenced schemas and release the snapshot. Returns removed ids."""
        created = self.created
        keep = referenced_ids(self.store, roots) if created else set()
        removed = [schema_id for schema_id in self.store.ids() if schema_id in created and schema_id not in keep]
        for schema_id in removed:
            self.store.remove(schema_id)
        if removed:
            log.debug("schemas_removed", ids=removed, kept=sorted(created & keep))
        self._snapshot = None
        self.removed = removed
        return removed

    @contextmanager
    def guard(self, roots: Callable[[], Iterable[Any]]) -> Iterator[MaterializationSpan]:
        """Snapshot on entry, clean up on exit; ``roots`` is evaluated at exit."""
        self.snapshot()
        try:
            yield self
        finally:
            self.cleanup(roots())
