"""Schema-bound records for plain dict/list payloads.

JSON or YAML payloads arrive as dicts and lists, which carry no type of
their own. ``bind`` wraps them in ``Record`` objects that name their schema,
following the nested type names declared in the schema, so the engine can walk
them exactly like registered Python classes.
"""

from typing import Any, Iterator, Mapping

from fieldcheck.metadata.registry import SchemaRegistry, default_registry


class Record:
    """A mapping payload tagged with the name of its schema.

    Field values are read by key; missing keys read as None. Attribute access
    is also supported so predicates can reference fields by name.
    """

    __slots__ = ("type_name", "values")

    def __init__(self, type_name: str, values: Mapping[str, Any]):
        self.type_name = type_name
        self.values = dict(values)

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def keys(self) -> Iterator[str]:
        return iter(self.values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        try:
            values = object.__getattribute__(self, "values")
        except AttributeError:
            raise AttributeError(name) from None
        return values.get(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.type_name == other.type_name and self.values == other.values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Record({self.type_name!r}, {self.values!r})"


def bind(data: Any, type_name: str, registry: SchemaRegistry | None = None) -> Any:
    """Wrap plain payload data into Records following the named schema.

    Lists and tuples are bound element-wise to the same type; other non-dict
    values are returned unchanged.

    Raises:
        KeyError: If type_name (or a nested type it names) is not registered
    """
    registry = registry or default_registry
    if isinstance(data, (list, tuple)):
        return [bind(item, type_name, registry) for item in data]
    if not isinstance(data, Mapping):
        return data

    schema = registry.get(type_name)
    values = dict(data)
    for ref in schema.fields:
        if ref.name not in values:
            continue
        value = values[ref.name]
        if ref.schema_name:
            values[ref.name] = bind(value, ref.schema_name, registry)
        elif ref.item_schema_name and isinstance(value, (list, tuple)):
            values[ref.name] = [bind(item, ref.item_schema_name, registry) for item in value]
    return Record(type_name, values)
