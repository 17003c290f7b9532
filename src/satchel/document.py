"""Hierarchical key/value document backing the inventory ledger.

A Document is an ordered collection of named nodes. Each node carries a
document-assigned integer id plus a flat mapping of scalar fields (strings or
numbers). The ledger only relies on a handful of operations:

- first-match lookup of a node by name
- node creation and removal
- scalar get/set of named fields, with numeric reads defaulting to 0
- serialization to and from a string

The string form is JSON:

    {"version": 1, "nodes": [{"id": 0, "name": "sword", "fields": {"value": 3}}]}
"""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

logger = logging.getLogger(__name__)

Scalar = str | int | float

RESERVED_FIELD = "id"
DEFAULT_FIELD = "value"
DOCUMENT_VERSION = 1


class DocumentParseError(ValueError):
    """Raised when a string cannot be parsed into a Document."""


def is_reserved(field: str) -> bool:
    """Check whether a field name is the document's reserved identity field."""
    return field.lower() == RESERVED_FIELD


class DocumentNode:
    """A named node holding scalar fields.

    Attributes:
        id: Identity assigned by the owning document. Never stored as a field.
        name: Node name used for lookups. Case-sensitive.
    """

    def __init__(self, node_id: int, name: str, fields: Mapping[str, Scalar] | None = None) -> None:
        """Create a node.

        Args:
            node_id: Identity assigned by the document.
            name: Node name.
            fields: Optional initial fields. Reserved names are rejected.
        """
        self.id = node_id
        self.name = name
        self._fields: dict[str, Scalar] = {}
        for field, value in (fields or {}).items():
            self.set(field, value)

    def __repr__(self) -> str:
        return f"DocumentNode(id={self.id!r}, name={self.name!r}, fields={self._fields!r})"

    def has(self, field: str) -> bool:
        """Check whether a field is set on this node."""
        return field in self._fields

    def get(self, field: str, default: Scalar | None = None) -> Scalar | None:
        """Get the raw value of a field."""
        return self._fields.get(field, default)

    def get_string(self, field: str = DEFAULT_FIELD, default: str = "") -> str:
        """Get a field as a string."""
        if field not in self._fields:
            return default
        return str(self._fields[field])

    def get_int(self, field: str = DEFAULT_FIELD, default: int = 0) -> int:
        """Get a field as an integer.

        Unset fields and values that do not read as an integer yield ``default``.
        """
        value = self._fields.get(field)
        if value is None:
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                logger.debug("Field %s on %s is not finite: %r", field, self.name, value)
                return default
            return int(value)
        try:
            return int(value.strip())
        except ValueError:
            logger.debug("Field %s on %s is not numeric: %r", field, self.name, value)
            return default

    def set(self, field: str, value: Scalar) -> None:
        """Create or overwrite a field.

        Raises:
            KeyError: If the field is the reserved identity field.
            TypeError: If the value is not a string or number.
        """
        if is_reserved(field):
            msg = f"'{field}' is reserved for the document's node identity"
            raise KeyError(msg)
        if not isinstance(value, str | int | float):
            msg = f"Field '{field}' must be a string or number, got {type(value).__name__}"
            raise TypeError(msg)
        self._fields[field] = value

    def remove(self, field: str) -> bool:
        """Remove a field. Returns False if it was not set."""
        return self._fields.pop(field, None) is not None

    def fields(self) -> dict[str, Scalar]:
        """Return a copy of the node's fields."""
        return dict(self._fields)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "fields": self.fields()}


class Document:
    """Ordered collection of named nodes.

    Lookups always return the first node with a given name. The document does
    not enforce unique names; callers that need uniqueness look up before adding.
    """

    def __init__(self) -> None:
        """Create an empty document."""
        self._nodes: list[DocumentNode] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DocumentNode]:
        return iter(list(self._nodes))

    def get_first_node(self, name: str) -> DocumentNode | None:
        """Return the first node named ``name``, or None."""
        for node in self._nodes:
            if node.name == name:
                return node
        return None

    def get_node(self, node_id: int) -> DocumentNode | None:
        """Return the node with the given id, or None."""
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def add_node(self, name: str, fields: Mapping[str, Scalar] | None = None) -> DocumentNode:
        """Append a new node and return it."""
        node = DocumentNode(self._next_id, name, fields)
        self._next_id += 1
        self._nodes.append(node)
        return node

    def remove_node(self, node_id: int) -> bool:
        """Remove the node with the given id. Returns False if no such node."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                del self._nodes[index]
                return True
        return False

    def clear(self) -> None:
        """Remove every node."""
        self._nodes.clear()
        self._next_id = 0

    def to_string(self, indent: int | None = None) -> str:
        """Serialize the document to a JSON string."""
        data = {"version": DOCUMENT_VERSION, "nodes": [node.to_dict() for node in self._nodes]}
        return json.dumps(data, indent=indent)

    @classmethod
    def from_string(cls, text: str) -> Document:
        """Parse a string produced by to_string().

        Raises:
            DocumentParseError: If the text is not a valid serialized document.
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            msg = f"Invalid document text: {e}"
            raise DocumentParseError(msg) from e

        if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
            msg = "Document text must be an object with a 'nodes' list"
            raise DocumentParseError(msg)

        document = cls()
        for entry in data["nodes"]:
            document._add_parsed_node(entry)
        return document

    def _add_parsed_node(self, entry: Any) -> None:  # noqa: ANN401
        """Restore a single serialized node, keeping its original id."""
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            msg = f"Malformed node entry: {entry!r}"
            raise DocumentParseError(msg)

        node_id = entry.get("id", self._next_id)
        fields = entry.get("fields", {})
        if not isinstance(node_id, int) or not isinstance(fields, dict):
            msg = f"Malformed node entry: {entry!r}"
            raise DocumentParseError(msg)
        if self.get_node(node_id) is not None:
            msg = f"Duplicate node id {node_id}"
            raise DocumentParseError(msg)

        try:
            node = DocumentNode(node_id, entry["name"], fields)
        except (KeyError, TypeError) as e:
            msg = f"Invalid fields on node '{entry['name']}': {e}"
            raise DocumentParseError(msg) from e

        self._nodes.append(node)
        self._next_id = max(self._next_id, node_id + 1)
