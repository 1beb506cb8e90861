"""Document store value types — shared by every adapter.

Documents are schemaless dicts keyed by a store-assigned id. Filters follow
the usual document-store semantics: a document missing the filtered field
never matches, whatever the operator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

FILTER_OPS = ("==", "!=", "<", "<=", ">", ">=", "in")

# Querying on this field name targets the document id, not a data field.
DOCUMENT_ID = "__id__"


class DocumentNotFoundError(LookupError):
    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection}/{doc_id} does not exist")


class _ServerTimestamp:
    """Write sentinel: replaced by the store's clock at commit time."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_server_timestamps(fields: dict[str, Any], now: datetime) -> dict[str, Any]:
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}


@dataclass
class Document:
    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op {self.op!r}; expected one of {FILTER_OPS}")
        if self.op == "in" and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError("'in' filter requires a collection value")

    def matches(self, doc: Document) -> bool:
        if self.field == DOCUMENT_ID:
            actual = doc.id
        elif self.field in doc.data:
            actual = doc.data[self.field]
        else:
            return False

        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            # mixed types never compare
            return False


@dataclass(frozen=True)
class WriteOp:
    """One document update inside an atomic batch."""

    collection: str
    doc_id: str
    fields: dict[str, Any]


def where(field_name: str, op: str, value: Any) -> Filter:
    return Filter(field=field_name, op=op, value=value)


def matches_all(doc: Document, filters: tuple[Filter, ...] | list[Filter]) -> bool:
    return all(f.matches(doc) for f in filters)


def sort_documents(docs: list[Document], order_by: str | None) -> list[Document]:
    """Order by a data field; a leading '-' sorts descending.

    Documents lacking the field are dropped, as an ordered scan on a
    missing field would never return them.
    """
    if not order_by:
        return docs
    descending = order_by.startswith("-")
    key = order_by.lstrip("-")
    present = [d for d in docs if key in d.data]
    return sorted(present, key=lambda d: (d.data[key], d.id), reverse=descending)
