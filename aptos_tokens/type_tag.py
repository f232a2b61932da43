# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Fully-qualified Move struct names.

The node identifies resources and table value types by strings such as
``0x1::token::Collections``. Those strings must byte-match what the ledger has
registered, so they are built from a :class:`StructTag` rather than by hand,
and resource listings are matched by parsing each entry's ``type`` back into a
tag instead of comparing raw strings.
"""

from __future__ import annotations

import unittest
from typing import Any, Dict, List, Tuple

from .account_address import AccountAddress


class StructTag:
    """``address::module::name<type_args>``"""

    address: AccountAddress
    module: str
    name: str
    type_args: List[StructTag]

    def __init__(self, address, module, name, type_args=None):
        self.address = address
        self.module = module
        self.name = name
        self.type_args = type_args or []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructTag):
            return NotImplemented
        return (
            self.address == other.address
            and self.module == other.module
            and self.name == other.name
            and self.type_args == other.type_args
        )

    def __str__(self) -> str:
        value = f"{self.address}::{self.module}::{self.name}"
        if len(self.type_args) > 0:
            value += f"<{self.type_args[0]}"
            for type_arg in self.type_args[1:]:
                value += f", {type_arg}"
            value += ">"
        return value

    def __repr__(self) -> str:
        return self.__str__()

    @staticmethod
    def from_str(type_tag: str) -> StructTag:
        """Parse ``0x1::token::Collections`` or a generic such as
        ``0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>``."""
        return StructTag._from_str_internal(type_tag, 0)[0][0]

    @staticmethod
    def _from_str_internal(type_tag: str, index: int) -> Tuple[List[StructTag], int]:
        name = ""
        tags = []
        inner_tags: List[StructTag] = []

        while index < len(type_tag):
            letter = type_tag[index]
            index += 1

            if letter == " ":
                continue

            if letter == "<":
                (inner_tags, index) = StructTag._from_str_internal(type_tag, index)
            elif letter == ",":
                tags.append(StructTag._from_parts(name, inner_tags))
                name = ""
                inner_tags = []
            elif letter == ">":
                break
            else:
                name += letter

        tags.append(StructTag._from_parts(name, inner_tags))
        return (tags, index)

    @staticmethod
    def _from_parts(name: str, inner_tags: List[StructTag]) -> StructTag:
        split = name.split("::")
        if len(split) != 3:
            raise ValueError(f"Not a fully-qualified struct name: {name}")
        return StructTag(
            AccountAddress.from_str_relaxed(split[0]), split[1], split[2], inner_tags
        )

    def to_dict(self) -> Dict[str, Any]:
        """The structured form some node versions return in ``type`` fields."""
        return {
            "address": str(self.address),
            "module": self.module,
            "name": self.name,
            "generic_type_params": [arg.to_dict() for arg in self.type_args],
        }

    @staticmethod
    def parse(value: Any) -> StructTag:
        """Accept either the string or the structured form of a tag."""
        if isinstance(value, str):
            return StructTag.from_str(value)
        return StructTag(
            AccountAddress.from_str_relaxed(value["address"]),
            value["module"],
            value["name"],
            [StructTag.parse(arg) for arg in value.get("generic_type_params", [])],
        )


class Test(unittest.TestCase):
    def test_nested_structs(self):
        l0 = "0x0::l0::L0"
        l10 = "0x1::l10::L10"
        l20 = "0x2::l20::L20"
        l11 = "0x1::l11::L11"
        composite = f"{l0}<{l10}<{l20}>, {l11}>"
        derived = StructTag.from_str(composite)
        self.assertEqual(composite, f"{derived}")

    def test_padded_address_normalizes(self):
        tag = StructTag.from_str(
            "0x0000000000000000000000000000000000000000000000000000000000000001::token::Collections"
        )
        self.assertEqual(str(tag), "0x1::token::Collections")

    def test_structured_form(self):
        tag = StructTag.from_str("0x1::token::TokenStore")
        self.assertEqual(StructTag.parse(tag.to_dict()), tag)
        self.assertEqual(
            tag.to_dict(),
            {
                "address": "0x1",
                "module": "token",
                "name": "TokenStore",
                "generic_type_params": [],
            },
        )

    def test_malformed(self):
        with self.assertRaises(ValueError):
            StructTag.from_str("token::Collections")


if __name__ == "__main__":
    unittest.main()
