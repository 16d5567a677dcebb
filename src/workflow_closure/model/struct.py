"""Free-form typed metadata documents.

A `Struct` maps string keys to `Value`s. `Value` is a tagged variant: exactly
one payload slot is populated, selected by `kind`. Plain JSON data is accepted
wherever a `Value` is expected, so universe documents can spell metadata as
`{"retries": 3}` instead of the fully tagged form.

A plain mapping is read as the tagged form only when it has exactly that
shape: a known `kind` plus its own populated slot. Anything else, including
`{"kind": "string"}`, is a nested struct. `{"kind": "null"}` is the one plain
mapping that reads as a tagged value.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    WrapSerializer,
    model_validator,
)

K = TypeVar("K")
V = TypeVar("V")


def _freeze(value: dict[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(value))


def _thaw(value: Mapping[Any, Any], handler: SerializerFunctionWrapHandler) -> Any:
    return handler(dict(value))


# Validated as a dict, stored as a read-only view, dumped as a dict again.
ReadOnlyDict = Annotated[dict[K, V], AfterValidator(_freeze), WrapSerializer(_thaw)]


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    STRUCT = "struct"
    LIST = "list"


_SLOTS: dict[ValueKind, str | None] = {
    ValueKind.STRING: "string_value",
    ValueKind.NUMBER: "number_value",
    ValueKind.BOOL: "bool_value",
    ValueKind.NULL: None,
    ValueKind.STRUCT: "struct_value",
    ValueKind.LIST: "list_value",
}

_PAYLOAD_SLOTS = frozenset(slot for slot in _SLOTS.values() if slot is not None)


def _tag_plain(data: Any) -> dict[str, Any]:
    # bool is an int subclass; check it first.
    if data is None:
        return {"kind": ValueKind.NULL}
    if isinstance(data, bool):
        return {"kind": ValueKind.BOOL, "bool_value": data}
    if isinstance(data, int | float):
        return {"kind": ValueKind.NUMBER, "number_value": data}
    if isinstance(data, str):
        return {"kind": ValueKind.STRING, "string_value": data}
    if isinstance(data, Struct):
        return {"kind": ValueKind.STRUCT, "struct_value": data}
    if isinstance(data, Mapping):
        return {"kind": ValueKind.STRUCT, "struct_value": {"fields": dict(data)}}
    if isinstance(data, list | tuple):
        return {"kind": ValueKind.LIST, "list_value": list(data)}
    raise TypeError(f"Unsupported struct value type: {type(data).__name__}")


def _is_tagged(data: Mapping[str, Any]) -> bool:
    try:
        kind = ValueKind(data.get("kind"))
    except ValueError:
        return False
    if not set(data) <= _PAYLOAD_SLOTS | {"kind"}:
        return False

    expected = _SLOTS[kind]
    populated = {slot for slot in _PAYLOAD_SLOTS if data.get(slot) is not None}
    return populated == ({expected} if expected is not None else set())


class Value(BaseModel):
    """One typed value inside a Struct."""

    model_config = ConfigDict(frozen=True)

    kind: ValueKind
    string_value: str | None = None
    # Integers stay integers so `3` is not re-emitted as `3.0`.
    number_value: int | float | None = None
    bool_value: bool | None = None
    struct_value: Struct | None = None
    list_value: tuple[Value, ...] | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_plain(cls, data: Any) -> Any:
        if isinstance(data, Value):
            return data
        if isinstance(data, Mapping) and _is_tagged(data):
            return data
        return _tag_plain(data)

    @model_validator(mode="after")
    def _check_slot(self) -> Value:
        expected = _SLOTS[self.kind]
        for slot in _PAYLOAD_SLOTS:
            populated = getattr(self, slot) is not None
            if slot == expected and not populated:
                raise ValueError(f"{self.kind.value} value requires {slot}")
            if slot != expected and populated:
                raise ValueError(f"{self.kind.value} value must not set {slot}")
        return self

    @classmethod
    def of_string(cls, value: str) -> Value:
        return cls(kind=ValueKind.STRING, string_value=value)

    @classmethod
    def of_number(cls, value: float) -> Value:
        return cls(kind=ValueKind.NUMBER, number_value=value)

    @classmethod
    def of_bool(cls, value: bool) -> Value:
        return cls(kind=ValueKind.BOOL, bool_value=value)

    @classmethod
    def of_null(cls) -> Value:
        return cls(kind=ValueKind.NULL)

    @classmethod
    def of_struct(cls, value: Struct) -> Value:
        return cls(kind=ValueKind.STRUCT, struct_value=value)

    @classmethod
    def of_list(cls, values: list[Value] | tuple[Value, ...]) -> Value:
        return cls(kind=ValueKind.LIST, list_value=tuple(values))

    def to_python(self) -> Any:
        """Return the plain JSON-compatible form of this value."""

        if self.kind is ValueKind.NULL:
            return None
        if self.kind is ValueKind.STRUCT:
            assert self.struct_value is not None
            return self.struct_value.to_python()
        if self.kind is ValueKind.LIST:
            assert self.list_value is not None
            return [item.to_python() for item in self.list_value]
        slot = _SLOTS[self.kind]
        assert slot is not None
        return getattr(self, slot)


class Struct(BaseModel):
    """An immutable key -> Value document. Equality is deep and instances are hashable."""

    model_config = ConfigDict(frozen=True)

    fields: ReadOnlyDict[str, Value] = Field(default_factory=dict, validate_default=True)

    def __hash__(self) -> int:
        return hash(frozenset(self.fields.items()))

    @classmethod
    def of(cls, fields: Mapping[str, Value]) -> Struct:
        return cls(fields=dict(fields))

    @classmethod
    def empty(cls) -> Struct:
        return cls()

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def get(self, key: str) -> Value | None:
        return self.fields.get(key)

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.fields.items()}


Value.model_rebuild()
Struct.model_rebuild()
