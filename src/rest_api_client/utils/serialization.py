"""JSON encoding and decoding with fixed wire conventions.

The wire format uses camelCase member names, UTC timestamps rendered as
``2024-01-31T12:00:00.000Z`` and omits null members. Python objects keep
their snake_case attribute names; the serializer renames members on the
way out and matches them back on the way in.

Naming applies to object members (pydantic models and dataclasses).
Dictionary keys are user data and pass through untouched. An explicit
pydantic alias always wins over the naming policy.

Decoding walks the target type to rename members and normalize
timestamps, then hands the result to ``pydantic.TypeAdapter`` for
validation. Unknown members are dropped unless
``ignore_unknown_fields`` is off. A missing member whose field is
Optional without a default decodes to None. A union of several types
binds to the first arm that validates. Any failure surfaces as
:class:`~rest_api_client.exceptions.SerializationError`.

Example:
    >>> serializer = JsonSerializer()
    >>> serializer.encode(User(user_id=1, display_name="Ann"))
    '{"userId":1,"displayName":"Ann"}'
    >>> serializer.decode('{"userId":1,"displayName":"Ann"}', User)
    User(user_id=1, display_name='Ann')
"""

import dataclasses
import inspect
import json
import types
from datetime import date, datetime, time, timezone
from enum import Enum
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel, to_snake

from ..exceptions import SerializationError

DEFAULT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%3fZ"

_UNION_ORIGINS = (Union, types.UnionType)
_SEQUENCE_ORIGINS = (list, set, frozenset, tuple)


class NamingPolicy(str, Enum):
    """How object member names are written to JSON."""

    CAMEL_CASE = "camel_case"
    SNAKE_CASE = "snake_case"
    PRESERVE = "preserve"


_NAMING_FUNCTIONS: Dict[NamingPolicy, Callable[[str], str]] = {
    NamingPolicy.CAMEL_CASE: to_camel,
    NamingPolicy.SNAKE_CASE: to_snake,
    NamingPolicy.PRESERVE: lambda name: name,
}


class SerializerSettings(BaseModel):
    """Serializer configuration.

    A settings object is always used whole; a custom instance replaces
    every default rather than being merged with them.

    :param naming: Member naming policy for models and dataclasses
    :type naming: NamingPolicy
    :param datetime_format: ``strftime`` format; ``%3f`` renders milliseconds
    :type datetime_format: str
    :param ignore_unknown_fields: Drop JSON members with no matching field
    :type ignore_unknown_fields: bool
    :param omit_none: Leave out members whose value is None when encoding
    :type omit_none: bool
    :param utc_datetimes: Normalize datetimes to UTC (naive values are UTC)
    :type utc_datetimes: bool
    """

    model_config = ConfigDict(frozen=True)

    naming: NamingPolicy = Field(NamingPolicy.CAMEL_CASE, description="Member naming")
    datetime_format: str = Field(
        DEFAULT_DATETIME_FORMAT, description="Datetime format for encoding"
    )
    ignore_unknown_fields: bool = Field(True, description="Ignore unknown members")
    omit_none: bool = Field(True, description="Omit None members when encoding")
    utc_datetimes: bool = Field(True, description="Normalize datetimes to UTC")


@lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _adapter(target: Any) -> TypeAdapter:
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable annotations
        return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def _allows_none(annotation: Any) -> bool:
    """True when ``annotation`` accepts None (Optional, Any or a None union arm)."""
    if annotation is Any or annotation is None or annotation is type(None):
        return True
    origin = get_origin(annotation)
    if origin is Annotated:
        return _allows_none(get_args(annotation)[0])
    return origin in _UNION_ORIGINS and type(None) in get_args(annotation)


class JsonSerializer:
    """Stateless JSON encoder/decoder bound to one :class:`SerializerSettings`."""

    def __init__(self, settings: Optional[SerializerSettings] = None):
        self.settings = settings or SerializerSettings()
        self._member_name = _NAMING_FUNCTIONS[self.settings.naming]

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, value: Any) -> str:
        """Encode ``value`` to a compact JSON string.

        :param value: Model, dataclass, mapping, sequence or JSON scalar
        :type value: Any
        :return: JSON text
        :rtype: str
        :raises SerializationError: If the value cannot be represented as JSON
        """
        try:
            return json.dumps(
                self._to_jsonable(value), ensure_ascii=False, separators=(",", ":")
            )
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot encode value of type {type(value).__name__}: {e}",
                target_type=type(value).__name__,
                original_error=e,
            ) from e

    def format_datetime(self, value: datetime) -> str:
        """Render a datetime using the configured format and UTC policy."""
        if self.settings.utc_datetimes:
            value = self._as_utc(value)
        fmt = self.settings.datetime_format.replace(
            "%3f", f"{value.microsecond // 1000:03d}"
        )
        return value.strftime(fmt)

    def _to_jsonable(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return self._to_jsonable(value.value)
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, datetime):
            return self.format_datetime(value)
        if isinstance(value, (date, time)):
            return value.isoformat()
        if isinstance(value, RootModel):
            return self._to_jsonable(value.root)
        if isinstance(value, BaseModel):
            return self._encode_members(
                (
                    (field.alias or self._member_name(name), getattr(value, name))
                    for name, field in type(value).model_fields.items()
                )
            )
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self._encode_members(
                (self._member_name(f.name), getattr(value, f.name))
                for f in dataclasses.fields(value)
            )
        if isinstance(value, dict):
            return {str(k): self._to_jsonable(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._to_jsonable(item) for item in value]
        # Decimal, UUID, Path, bytes and friends
        return _adapter(type(value)).dump_python(value, mode="json")

    def _encode_members(self, members) -> Dict[str, Any]:
        encoded: Dict[str, Any] = {}
        for key, member in members:
            if member is None and self.settings.omit_none:
                continue
            encoded[key] = self._to_jsonable(member)
        return encoded

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, text: str, target: Any = None) -> Any:
        """Decode JSON ``text`` into ``target``.

        :param text: JSON document
        :type text: str
        :param target: Type to decode into; None returns plain JSON values
        :type target: Any
        :return: Decoded value
        :rtype: Any
        :raises SerializationError: On malformed JSON or a type mismatch
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(
                f"Invalid JSON: {e}", target_type=_type_name(target), original_error=e
            ) from e

        if target is None or target is Any:
            return raw

        prepared = self._prepare(raw, target)
        try:
            return _adapter(target).validate_python(prepared)
        except PydanticValidationError as e:
            raise SerializationError(
                f"Cannot convert JSON to {_type_name(target)}: {e}",
                target_type=_type_name(target),
                original_error=e,
            ) from e

    def _prepare(self, data: Any, target: Any) -> Any:
        """Rename members and normalize datetimes according to ``target``."""
        if data is None or target is None or target is Any:
            return data

        origin = get_origin(target)
        args = get_args(target)

        if origin is Annotated:
            return self._prepare(data, args[0])
        if origin in _UNION_ORIGINS:
            candidates = [arg for arg in args if arg is not type(None)]
            if len(candidates) == 1:
                return self._prepare(data, candidates[0])
            if isinstance(data, (dict, list)):
                return self._prepare_union(data, candidates)
            return data
        if origin in _SEQUENCE_ORIGINS and isinstance(data, list):
            if origin is tuple and args and args[-1] is not Ellipsis:
                return [self._prepare(item, arg) for item, arg in zip(data, args)]
            item_type = args[0] if args else Any
            return [self._prepare(item, item_type) for item in data]
        if origin is dict and isinstance(data, dict):
            value_type = args[1] if len(args) == 2 else Any
            return {k: self._prepare(v, value_type) for k, v in data.items()}

        if not inspect.isclass(target):
            return data
        if issubclass(target, RootModel):
            return self._prepare(data, target.model_fields["root"].annotation)
        if issubclass(target, BaseModel) and isinstance(data, dict):
            return self._prepare_model(data, target)
        if dataclasses.is_dataclass(target) and isinstance(data, dict):
            return self._prepare_dataclass(data, target)
        if issubclass(target, datetime) and isinstance(data, str):
            return self._parse_datetime(data)
        return data

    def _prepare_model(self, data: Dict[str, Any], target: type) -> Dict[str, Any]:
        prepared: Dict[str, Any] = {}
        consumed = set()
        for name, field in target.model_fields.items():
            accepted = (
                field.validation_alias
                if isinstance(field.validation_alias, str)
                else field.alias or name
            )
            key = self._find_member(data, (accepted, field.alias, name))
            if key is None:
                if field.is_required() and _allows_none(field.annotation):
                    prepared[accepted] = None
                continue
            consumed.add(key)
            prepared[accepted] = self._prepare(data[key], field.annotation)

        extras = [key for key in data if key not in consumed]
        if target.model_config.get("extra") == "allow":
            prepared.update((key, data[key]) for key in extras)
        else:
            self._check_unknown(extras, target)
        return prepared

    def _prepare_dataclass(self, data: Dict[str, Any], target: type) -> Dict[str, Any]:
        try:
            hints = get_type_hints(target)
        except (NameError, TypeError):
            hints = {}
        prepared: Dict[str, Any] = {}
        consumed = set()
        for f in dataclasses.fields(target):
            if not f.init:
                continue
            key = self._find_member(data, (f.name,))
            if key is None:
                if (
                    f.default is dataclasses.MISSING
                    and f.default_factory is dataclasses.MISSING
                    and f.name in hints
                    and _allows_none(hints[f.name])
                ):
                    prepared[f.name] = None
                continue
            consumed.add(key)
            prepared[f.name] = self._prepare(data[key], hints.get(f.name, Any))
        self._check_unknown([key for key in data if key not in consumed], target)
        return prepared

    def _prepare_union(self, data: Any, candidates: List[Any]) -> Any:
        """Bind ``data`` to the first union arm it validates against.

        Arms are tried in declaration order; when none fits the data is
        returned unchanged so validation of the whole union reports it.
        """
        for candidate in candidates:
            try:
                return _adapter(candidate).validate_python(
                    self._prepare(data, candidate)
                )
            except (SerializationError, PydanticValidationError):
                continue
        return data

    def _find_member(self, data: Dict[str, Any], names) -> Optional[str]:
        """Locate the JSON member matching any of ``names``.

        Each name is tried verbatim, then under the naming policy, then in
        camelCase, so payloads written by other conventions still bind.
        """
        for name in names:
            if not name:
                continue
            for candidate in (name, self._member_name(name), to_camel(name)):
                if candidate in data:
                    return candidate
        return None

    def _check_unknown(self, extras: List[str], target: type) -> None:
        if extras and not self.settings.ignore_unknown_fields:
            raise SerializationError(
                f"Could not find member '{extras[0]}' on object of type "
                f"'{target.__name__}'",
                target_type=target.__name__,
            )

    def _parse_datetime(self, text: str) -> Any:
        """Parse a timestamp with the configured format, falling back to ISO-8601.

        Unparseable text is returned unchanged so validation reports it.
        """
        try:
            value = datetime.strptime(
                text, self.settings.datetime_format.replace("%3f", "%f")
            )
        except ValueError:
            try:
                value = _adapter(datetime).validate_python(text)
            except PydanticValidationError:
                return text
        return self._as_utc(value) if self.settings.utc_datetimes else value

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
