"""
Serialization utilities for accountreload dataclasses.

Accounts and reload results are persisted by the caller, so every public
dataclass can turn itself into a JSON-compatible dict. Live provider
instances are process-local and are always left out.

Usage:
    from dataclasses import dataclass
    from accountreload.serialization import SerializableMixin

    @dataclass
    class Stored(SerializableMixin):
        service: AccountService
        authentication: dict
        instance: object = None

        _exclude_fields = ("instance",)

    Stored(AccountService.IZLY, {"token": "abc"}).to_dict()
    # {"service": "izly", "authentication": {"token": "abc"}}
"""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Type, TypeVar, get_type_hints

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="SerializableMixin")


def serialize_value(value: Any) -> Any:
    """Recursively serialize a value for JSON export.

    Handles:
    - None → None
    - datetime → ISO format string (with UTC if no timezone)
    - Enum → value
    - Dataclass with to_dict() → recursive serialization
    - List/tuple → recursive serialization of items
    - Dict → recursive serialization of values

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable value
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    return value


def deserialize_value(value: Any, target_type: Any) -> Any:
    """Deserialize a value to a target type.

    Handles:
    - str → datetime (if target_type is datetime)
    - str/value → Enum (if target_type is an Enum subclass; a ``parse``
      classmethod on the enum takes precedence)
    - dict → dataclass with from_dict() (if target_type has from_dict)

    Args:
        value: Value to deserialize
        target_type: Target Python type

    Returns:
        Deserialized value
    """
    if value is None:
        return None

    # Optional[X] / X | None → X
    args = getattr(target_type, "__args__", ())
    if type(None) in args:
        for arg in args:
            if arg is not type(None):  # noqa: E721
                target_type = arg
                break

    if target_type is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)

    if isinstance(target_type, type) and issubclass(target_type, Enum):
        parse = getattr(target_type, "parse", None)
        if callable(parse):
            return parse(value)
        if isinstance(value, str):
            for member in target_type:
                if member.value == value or member.name == value:
                    return member
        return value

    if (
        isinstance(target_type, type)
        and is_dataclass(target_type)
        and hasattr(target_type, "from_dict")
        and isinstance(value, dict)
    ):
        return target_type.from_dict(value)

    return value


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, AttributeError, TypeError) as e:
        logger.debug(f"Failed to get type hints for {cls.__name__}: {type(e).__name__}: {e}")
        return {}


class SerializableMixin:
    """Mixin providing consistent serialization for dataclasses.

    Subclasses should be decorated with @dataclass. The mixin provides:
    - to_dict(): Serialize to JSON-compatible dictionary
    - from_dict(): Reconstruct from dictionary

    Configuration:
    - _exclude_fields: Tuple of field names to exclude from serialization
    - _custom_serializers: Dict mapping field names to custom serializer functions
    """

    _exclude_fields: ClassVar[tuple[str, ...]] = ()

    # field_name -> callable(value) -> serialized_value
    _custom_serializers: ClassVar[Dict[str, Any]] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary with consistent datetime/enum handling.

        Raises:
            TypeError: If the class is not a dataclass
        """
        if not is_dataclass(self):
            raise TypeError(f"{self.__class__.__name__} must be a dataclass")

        result: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in self._exclude_fields or f.name.startswith("_"):
                continue

            value = getattr(self, f.name)
            if f.name in self._custom_serializers:
                value = self._custom_serializers[f.name](value)
            else:
                value = serialize_value(value)
            result[f.name] = value

        return result

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Deserialize from dictionary.

        Excluded fields are ignored even when present in ``data`` and fall
        back to their dataclass defaults.

        Raises:
            TypeError: If the class is not a dataclass
        """
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass")

        hints = _type_hints(cls)
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or f.name in cls._exclude_fields:
                continue
            kwargs[f.name] = deserialize_value(data[f.name], hints.get(f.name, Any))

        return cls(**kwargs)


__all__ = [
    "SerializableMixin",
    "serialize_value",
    "deserialize_value",
]
