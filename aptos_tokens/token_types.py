# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Typed views of the token records the ledger stores.

The node returns Move values as JSON: u64 fields as decimal strings, options
as ``{"vec": []}`` or ``{"vec": [value]}``, and nested structs as objects. The
``parse`` constructors here check that shape and convert it. Anything that does
not fit raises :class:`~aptos_tokens.errors.TypeMismatchError`, which signals a
client built against a different token module than the one deployed.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .account_address import AccountAddress, ParseAddressError
from .errors import TypeMismatchError


def _field(data: Any, name: str, record: str) -> Any:
    if not isinstance(data, dict) or name not in data:
        raise TypeMismatchError(f"{record} has no field {name}: {data}")
    return data[name]


def _u64(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise TypeMismatchError(f"{field} is not a u64: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise TypeMismatchError(f"{field} is not a u64: {value!r}") from e
    if number < 0:
        raise TypeMismatchError(f"{field} is negative: {number}")
    return number


def _str(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise TypeMismatchError(f"{field} is not a string: {value!r}")
    return value


def parse_optional(value: Any) -> Any:
    """Unwrap a Move ``Option``, also accepting a bare value or ``None``."""
    if isinstance(value, dict) and "vec" in value:
        vec = value["vec"]
        if not isinstance(vec, list) or len(vec) > 1:
            raise TypeMismatchError(f"malformed option: {value}")
        return vec[0] if vec else None
    return value


def _optional_u64(value: Any, field: str) -> Optional[int]:
    value = parse_optional(value)
    return None if value is None else _u64(value, field)


@dataclass(frozen=True)
class TokenId:
    """Identifies a token. Equal only if all three fields match exactly."""

    creator: AccountAddress
    collection: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        """The table key form, with the creator in canonical string form."""
        return {
            "creator": str(self.creator),
            "collection": self.collection,
            "name": self.name,
        }

    @staticmethod
    def parse(data: Any) -> TokenId:
        try:
            creator = AccountAddress.from_str_relaxed(
                _str(_field(data, "creator", "TokenId"), "creator")
            )
        except ParseAddressError as e:
            raise TypeMismatchError(f"TokenId creator is not an address: {data}") from e
        return TokenId(
            creator,
            _str(_field(data, "collection", "TokenId"), "collection"),
            _str(_field(data, "name", "TokenId"), "name"),
        )


@dataclass
class CollectionData:
    name: str
    description: str
    uri: str
    count: int
    maximum: Optional[int]

    @staticmethod
    def parse(data: Any) -> CollectionData:
        return CollectionData(
            name=_str(_field(data, "name", "Collection"), "name"),
            description=_str(_field(data, "description", "Collection"), "description"),
            uri=_str(_field(data, "uri", "Collection"), "uri"),
            count=_u64(_field(data, "count", "Collection"), "count"),
            maximum=_optional_u64(data.get("maximum"), "maximum"),
        )


@dataclass
class TokenData:
    collection: str
    name: str
    description: str
    uri: str
    supply: int
    maximum: Optional[int]

    @staticmethod
    def parse(data: Any) -> TokenData:
        supply = _optional_u64(_field(data, "supply", "TokenData"), "supply")
        if supply is None:
            raise TypeMismatchError(f"TokenData supply is unset: {data}")
        return TokenData(
            collection=_str(_field(data, "collection", "TokenData"), "collection"),
            name=_str(_field(data, "name", "TokenData"), "name"),
            description=_str(_field(data, "description", "TokenData"), "description"),
            uri=_str(_field(data, "uri", "TokenData"), "uri"),
            supply=supply,
            maximum=_optional_u64(data.get("maximum"), "maximum"),
        )


@dataclass
class Token:
    """A quantity of one token held by an account."""

    id: TokenId
    value: int

    @staticmethod
    def parse(data: Any) -> Token:
        return Token(
            id=TokenId.parse(_field(data, "id", "Token")),
            value=_u64(_field(data, "value", "Token"), "value"),
        )


@dataclass
class CollectionsResource:
    """The creator-side aggregate holding the collection and token data tables."""

    collections_handle: str
    token_data_handle: str

    @staticmethod
    def parse(resource: Any) -> CollectionsResource:
        data = _field(resource, "data", "Collections")
        return CollectionsResource(
            collections_handle=_str(
                _field(_field(data, "collections", "Collections"), "handle", "Table"),
                "collections.handle",
            ),
            token_data_handle=_str(
                _field(_field(data, "token_data", "Collections"), "handle", "Table"),
                "token_data.handle",
            ),
        )


@dataclass
class TokenStoreResource:
    tokens_handle: str

    @staticmethod
    def parse(resource: Any) -> TokenStoreResource:
        data = _field(resource, "data", "TokenStore")
        return TokenStoreResource(
            tokens_handle=_str(
                _field(_field(data, "tokens", "TokenStore"), "handle", "Table"),
                "tokens.handle",
            )
        )


class Test(unittest.TestCase):
    CREATOR = "0xca843279e3427144cead5e4d5999a3d0ca843279e3427144cead5e4d5999a3d0"

    def test_token_id(self):
        token_id = TokenId.parse(
            {"creator": self.CREATOR, "collection": "Alice's", "name": "Alice's first token"}
        )
        self.assertEqual(token_id.to_dict()["creator"], self.CREATOR)
        self.assertEqual(TokenId.parse(token_id.to_dict()), token_id)
        self.assertEqual(len({token_id, TokenId.parse(token_id.to_dict())}), 1)
        self.assertNotEqual(
            token_id, TokenId(token_id.creator, "Alice's", "alice's first token")
        )

    def test_options(self):
        self.assertIsNone(parse_optional({"vec": []}))
        self.assertEqual(parse_optional({"vec": ["10"]}), "10")
        self.assertEqual(parse_optional("10"), "10")
        with self.assertRaises(TypeMismatchError):
            parse_optional({"vec": ["1", "2"]})

    def test_collection_data(self):
        collection = CollectionData.parse(
            {
                "name": "Alice's",
                "description": "Alice's simple collection",
                "uri": "https://aptos.dev",
                "count": "1",
                "maximum": {"vec": []},
            }
        )
        self.assertEqual(collection.count, 1)
        self.assertIsNone(collection.maximum)

    def test_token_data(self):
        token_data = TokenData.parse(
            {
                "collection": "Alice's",
                "name": "Alice's first token",
                "description": "Alice's simple token",
                "uri": "https://aptos.dev/img/nyan.jpeg",
                "supply": {"vec": ["1"]},
                "maximum": "1",
            }
        )
        self.assertEqual(token_data.supply, 1)
        self.assertEqual(token_data.maximum, 1)

    def test_shape_mismatch(self):
        with self.assertRaises(TypeMismatchError):
            Token.parse({"id": {"creator": "0x1"}, "value": "1"})
        with self.assertRaises(TypeMismatchError):
            Token.parse(
                {
                    "id": {"creator": "0x1", "collection": "c", "name": "n"},
                    "value": "-1",
                }
            )
        with self.assertRaises(TypeMismatchError):
            CollectionsResource.parse({"data": {"collections": {"handle": "0x1"}}})
        with self.assertRaises(TypeMismatchError):
            TokenStoreResource.parse({"type": "0x1::token::TokenStore"})

    def test_resources(self):
        store = TokenStoreResource.parse(
            {"type": "0x1::token::TokenStore", "data": {"tokens": {"handle": "0x5"}}}
        )
        self.assertEqual(store.tokens_handle, "0x5")


if __name__ == "__main__":
    unittest.main()
