"""Unit tests for the JSON serializer."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

import pytest
from pydantic import BaseModel, ConfigDict, Field, RootModel

from rest_api_client.exceptions import SerializationError
from rest_api_client.utils.serialization import (
    JsonSerializer,
    NamingPolicy,
    SerializerSettings,
)


class Status(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class Address(BaseModel):
    street_name: str
    zip_code: Optional[str] = None


class User(BaseModel):
    user_id: int
    display_name: str
    email_address: Optional[str] = None
    status: Status = Status.ACTIVE
    created_at: Optional[datetime] = None
    addresses: List[Address] = Field(default_factory=list)
    attributes: Dict[str, str] = Field(default_factory=dict)


class AliasedUser(BaseModel):
    user_id: int = Field(alias="UID")


class OpenRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    record_id: int


@dataclass
class Order:
    order_id: int
    total_amount: float
    note: Optional[str] = None
    placed_at: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)


class Contact(BaseModel):
    contact_id: int
    nick_name: Optional[str]


@dataclass
class Row:
    row_id: int
    label: Optional[str]


class Cat(BaseModel):
    cat_name: str


class Dog(BaseModel):
    dog_name: str


class Kennel(BaseModel):
    resident: Union[Cat, Dog]


IdList = RootModel[List[int]]


@pytest.fixture
def serializer():
    return JsonSerializer()


class TestEncode:
    """Test wire conventions on encode."""

    def test_model_members_are_camel_case(self, serializer):
        text = serializer.encode(User(user_id=1, display_name="Ann"))
        assert json.loads(text) == {
            "userId": 1,
            "displayName": "Ann",
            "status": "active",
            "addresses": [],
            "attributes": {},
        }

    def test_none_members_are_omitted(self, serializer):
        text = serializer.encode(Order(order_id=7, total_amount=9.5))
        assert json.loads(text) == {"orderId": 7, "totalAmount": 9.5, "tags": []}

    def test_nested_models_and_dict_keys(self, serializer):
        user = User(
            user_id=1,
            display_name="Ann",
            addresses=[Address(street_name="Main St")],
            attributes={"favourite_color": "blue"},
        )
        payload = json.loads(serializer.encode(user))
        assert payload["addresses"] == [{"streetName": "Main St"}]
        assert payload["attributes"] == {"favourite_color": "blue"}

    def test_explicit_alias_wins(self, serializer):
        assert serializer.encode(AliasedUser(UID=3)) == '{"UID":3}'

    def test_datetime_is_utc_with_milliseconds(self, serializer):
        local = timezone(timedelta(hours=2))
        stamp = datetime(2024, 1, 31, 14, 5, 6, 789123, tzinfo=local)
        text = serializer.encode(Order(order_id=1, total_amount=0, placed_at=stamp))
        assert json.loads(text)["placedAt"] == "2024-01-31T12:05:06.789Z"

    def test_naive_datetime_treated_as_utc(self, serializer):
        assert serializer.encode(datetime(2024, 1, 1, 0, 0)) == '"2024-01-01T00:00:00.000Z"'

    def test_plain_dict_payload(self, serializer):
        assert serializer.encode({"some_key": None, "n": 1}) == '{"some_key":null,"n":1}'

    def test_unencodable_value(self, serializer):
        with pytest.raises(SerializationError):
            serializer.encode(object())


class TestDecode:
    """Test wire conventions on decode."""

    def test_camel_case_into_model(self, serializer):
        user = serializer.decode(
            '{"userId": 1, "displayName": "Ann", "addresses": [{"streetName": "Main"}]}',
            User,
        )
        assert user.user_id == 1
        assert user.display_name == "Ann"
        assert user.addresses[0].street_name == "Main"

    def test_snake_case_members_also_bind(self, serializer):
        user = serializer.decode('{"user_id": 2, "display_name": "Bo"}', User)
        assert user.user_id == 2

    def test_camel_case_into_dataclass(self, serializer):
        order = serializer.decode('{"orderId": 5, "totalAmount": 12.5, "tags": ["a"]}', Order)
        assert order == Order(order_id=5, total_amount=12.5, tags=["a"])

    def test_unknown_members_ignored(self, serializer):
        order = serializer.decode('{"orderId": 5, "totalAmount": 1, "extra": true}', Order)
        assert order.order_id == 5

    def test_unknown_members_rejected_when_strict(self):
        strict = JsonSerializer(SerializerSettings(ignore_unknown_fields=False))
        with pytest.raises(SerializationError, match="extra"):
            strict.decode('{"orderId": 5, "totalAmount": 1, "extra": true}', Order)

    def test_extra_allow_model_keeps_unknown_members(self):
        strict = JsonSerializer(SerializerSettings(ignore_unknown_fields=False))
        record = strict.decode('{"recordId": 1, "other": 2}', OpenRecord)
        assert record.record_id == 1
        assert record.model_extra == {"other": 2}

    def test_datetimes_normalized_to_utc(self, serializer):
        order = serializer.decode(
            '{"orderId": 1, "totalAmount": 0, "placedAt": "2024-01-31T14:00:00+02:00"}',
            Order,
        )
        assert order.placed_at == datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)
        assert order.placed_at.utcoffset() == timedelta(0)

    def test_wire_datetime_format(self, serializer):
        stamp = serializer.decode('"2024-01-31T12:05:06.789Z"', datetime)
        assert stamp == datetime(2024, 1, 31, 12, 5, 6, 789000, tzinfo=timezone.utc)

    def test_list_of_models(self, serializer):
        users = serializer.decode(
            '[{"userId": 1, "displayName": "A"}, {"userId": 2, "displayName": "B"}]',
            List[User],
        )
        assert [u.user_id for u in users] == [1, 2]

    def test_no_target_returns_plain_json(self, serializer):
        assert serializer.decode('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_malformed_json(self, serializer):
        with pytest.raises(SerializationError, match="Invalid JSON"):
            serializer.decode("{not json", User)

    def test_type_mismatch(self, serializer):
        with pytest.raises(SerializationError) as exc_info:
            serializer.decode('{"userId": "abc", "displayName": "Ann"}', User)
        assert exc_info.value.target_type == "User"


class TestRoundTrip:
    def test_omitted_none_decodes_to_default(self, serializer):
        original = Order(
            order_id=9,
            total_amount=3.25,
            placed_at=datetime(2024, 5, 1, 8, 30, 0, 250000, tzinfo=timezone.utc),
        )
        text = serializer.encode(original)
        assert "note" not in json.loads(text)
        assert serializer.decode(text, Order) == original

    def test_model_round_trip(self, serializer):
        original = User(
            user_id=1,
            display_name="Ann",
            status=Status.DISABLED,
            addresses=[Address(street_name="Main", zip_code="12345")],
        )
        assert serializer.decode(serializer.encode(original), User) == original


class TestCustomSettings:
    def test_custom_settings_replace_all_defaults(self):
        settings = SerializerSettings(naming=NamingPolicy.PRESERVE, omit_none=False)
        custom = JsonSerializer(settings)
        payload = json.loads(custom.encode(Order(order_id=1, total_amount=2)))
        assert payload == {
            "order_id": 1,
            "total_amount": 2,
            "note": None,
            "placed_at": None,
            "tags": [],
        }
        # fields not passed keep the model defaults, they are not merged from elsewhere
        assert custom.settings.ignore_unknown_fields is True

    def test_custom_datetime_format(self):
        custom = JsonSerializer(SerializerSettings(datetime_format="%Y/%m/%d %H:%M"))
        stamp = datetime(2024, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert custom.encode(stamp) == '"2024/02/03 04:05"'
        assert custom.decode('"2024/02/03 04:05"', datetime) == stamp

    def test_settings_are_frozen(self):
        settings = SerializerSettings()
        with pytest.raises(Exception):
            settings.omit_none = False


class TestOptionalWithoutDefault:
    """Optional fields with no default value still round-trip when null."""

    def test_model_round_trip(self, serializer):
        original = Contact(contact_id=1, nick_name=None)
        text = serializer.encode(original)
        assert text == '{"contactId":1}'
        assert serializer.decode(text, Contact) == original

    def test_dataclass_round_trip(self, serializer):
        original = Row(row_id=1, label=None)
        text = serializer.encode(original)
        assert text == '{"rowId":1}'
        assert serializer.decode(text, Row) == original

    def test_required_non_optional_still_rejected(self, serializer):
        with pytest.raises(SerializationError):
            serializer.decode("{}", Cat)


class TestPayloadShapes:
    def test_root_model_encodes_its_root(self, serializer):
        assert serializer.encode(IdList([1, 2])) == "[1,2]"

    def test_root_model_decodes(self, serializer):
        assert serializer.decode("[3, 4]", IdList) == IdList([3, 4])

    def test_union_binds_first_matching_arm(self, serializer):
        pet = serializer.decode('{"dogName": "Rex"}', Union[Cat, Dog])
        assert pet == Dog(dog_name="Rex")

    def test_union_inside_model(self, serializer):
        kennel = serializer.decode('{"resident": {"catName": "Tom"}}', Kennel)
        assert kennel.resident == Cat(cat_name="Tom")

    def test_union_without_matching_arm(self, serializer):
        with pytest.raises(SerializationError):
            serializer.decode('{"birdName": "Tweety"}', Union[Cat, Dog])
