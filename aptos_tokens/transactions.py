# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
JSON transaction requests for the node's ``/transactions`` endpoints.

A request travels in three stages:

1. :class:`TransactionPayload` wraps an :class:`EntryFunction` call in a tagged
   union whose ``type`` discriminator selects the call variant.
2. :class:`RawTransaction` adds the sender, sequence number, gas settings and
   expiration. Posted to ``/transactions/signing_message`` it yields the bytes
   to sign.
3. :class:`SignedTransaction` attaches the ed25519 public key and signature and
   is posted to ``/transactions``.

Argument encoding follows the node's JSON conventions and never sends raw JSON
numbers, so 64-bit values keep their precision:

- strings are UTF-8 encoded and hex-encoded (``Encoder.str``)
- u64 values are decimal strings (``Encoder.u64``)
- addresses use their canonical AIP-40 string (``Encoder.address``)
- booleans stay JSON booleans (``Encoder.bool``)

Examples:
    Build the payload that creates a collection::

        payload = TransactionPayload(
            EntryFunction.natural(
                "0x1::token",
                "create_unlimited_collection_script",
                [],
                [
                    TransactionArgument("Alice's", Encoder.str),
                    TransactionArgument("A collection", Encoder.str),
                    TransactionArgument("https://aptos.dev", Encoder.str),
                ],
            )
        )
        payload.to_dict()["arguments"]  # ["416c6963652773", ...]
"""

from __future__ import annotations

import typing
import unittest
from typing import Any, Callable, Dict, List

from .account_address import AccountAddress
from .asymmetric_crypto import PublicKey, Signature

MAX_U64 = 2**64 - 1


class Encoder:
    """JSON argument encoders, one per Move argument type."""

    @staticmethod
    def str(value: str) -> str:
        return value.encode("utf-8").hex()

    @staticmethod
    def bytes(value: bytes) -> str:
        return value.hex()

    @staticmethod
    def u64(value: int) -> str:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"u64 argument must be an int, got {type(value).__name__}")
        if value < 0 or value > MAX_U64:
            raise ValueError(f"u64 argument out of range: {value}")
        return str(value)

    @staticmethod
    def address(value: AccountAddress | str) -> str:
        if isinstance(value, str):
            value = AccountAddress.from_str_relaxed(value)
        return str(value)

    @staticmethod
    def bool(value: bool) -> bool:
        if not isinstance(value, bool):
            raise TypeError(f"bool argument must be a bool, got {type(value).__name__}")
        return value


class TransactionArgument:
    value: Any
    encoder: Callable[[Any], Any]

    def __init__(self, value: Any, encoder: Callable[[Any], Any]):
        self.value = value
        self.encoder = encoder

    def encode(self) -> Any:
        return self.encoder(self.value)


class ModuleId:
    address: AccountAddress
    name: str

    def __init__(self, address: AccountAddress, name: str):
        self.address = address
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleId):
            return NotImplemented
        return self.address == other.address and self.name == other.name

    def __str__(self) -> str:
        return f"{self.address}::{self.name}"

    @staticmethod
    def from_str(module_id: str) -> ModuleId:
        split = module_id.split("::")
        if len(split) != 2:
            raise ValueError(f"Expected <address>::<module>, got {module_id}")
        return ModuleId(AccountAddress.from_str_relaxed(split[0]), split[1])

    def to_dict(self) -> Dict[str, str]:
        return {"address": str(self.address), "name": self.name}


class EntryFunction:
    """A call to ``module::function`` with encoded arguments."""

    module: ModuleId
    function: str
    ty_args: List[str]
    args: List[Any]

    def __init__(
        self, module: ModuleId, function: str, ty_args: List[str], args: List[Any]
    ):
        self.module = module
        self.function = function
        self.ty_args = ty_args
        self.args = args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntryFunction):
            return NotImplemented
        return (
            self.module == other.module
            and self.function == other.function
            and self.ty_args == other.ty_args
            and self.args == other.args
        )

    def __str__(self) -> str:
        return f"{self.module}::{self.function}<{self.ty_args}>({self.args})"

    @staticmethod
    def natural(
        module: str,
        function: str,
        ty_args: List[str],
        args: List[TransactionArgument],
    ) -> EntryFunction:
        """Build a call from a ``0x1::token`` style module string, encoding
        each argument with its encoder."""
        module_id = ModuleId.from_str(module)
        encoded_args = [arg.encode() for arg in args]
        return EntryFunction(module_id, function, ty_args, encoded_args)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "function": {"module": self.module.to_dict(), "name": self.function},
            "type_arguments": list(self.ty_args),
            "arguments": list(self.args),
        }


class TransactionPayload:
    SCRIPT_FUNCTION: str = "script_function_payload"

    value: EntryFunction
    variant: str

    def __init__(self, payload: EntryFunction):
        if isinstance(payload, EntryFunction):
            self.variant = TransactionPayload.SCRIPT_FUNCTION
        else:
            raise TypeError("Invalid type")
        self.value = payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransactionPayload):
            return NotImplemented
        return self.variant == other.variant and self.value == other.value

    def __str__(self) -> str:
        return self.value.__str__()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.variant, **self.value.to_dict()}


class RawTransaction:
    """An unsigned user transaction request."""

    sender: AccountAddress
    sequence_number: int
    payload: TransactionPayload
    max_gas_amount: int
    gas_unit_price: int
    expiration_timestamp_secs: int

    def __init__(
        self,
        sender: AccountAddress,
        sequence_number: int,
        payload: TransactionPayload,
        max_gas_amount: int,
        gas_unit_price: int,
        expiration_timestamp_secs: int,
    ):
        self.sender = sender
        self.sequence_number = sequence_number
        self.payload = payload
        self.max_gas_amount = max_gas_amount
        self.gas_unit_price = gas_unit_price
        self.expiration_timestamp_secs = expiration_timestamp_secs

    def __str__(self) -> str:
        return f"""RawTransaction:
    sender: {self.sender}
    sequence_number: {self.sequence_number}
    payload: {self.payload}
    max_gas_amount: {self.max_gas_amount}
    gas_unit_price: {self.gas_unit_price}
    expiration_timestamp_secs: {self.expiration_timestamp_secs}
"""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": str(self.sender),
            "sequence_number": Encoder.u64(self.sequence_number),
            "max_gas_amount": Encoder.u64(self.max_gas_amount),
            "gas_unit_price": Encoder.u64(self.gas_unit_price),
            "expiration_timestamp_secs": Encoder.u64(self.expiration_timestamp_secs),
            "payload": self.payload.to_dict(),
        }


class SignedTransaction:
    transaction: RawTransaction
    public_key: PublicKey
    signature: Signature

    def __init__(
        self, transaction: RawTransaction, public_key: PublicKey, signature: Signature
    ):
        self.transaction = transaction
        self.public_key = public_key
        self.signature = signature

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.transaction.to_dict(),
            "signature": {
                "type": "ed25519_signature",
                "public_key": str(self.public_key),
                "signature": str(self.signature),
            },
        }


class Test(unittest.TestCase):
    def test_entry_function_payload(self):
        creator = AccountAddress.from_str_relaxed("0xab")
        payload = TransactionPayload(
            EntryFunction.natural(
                "0x1::token_transfers",
                "offer_script",
                [],
                [
                    TransactionArgument("0x1", Encoder.address),
                    TransactionArgument(creator, Encoder.address),
                    TransactionArgument("Alice's", Encoder.str),
                    TransactionArgument(2**64 - 1, Encoder.u64),
                ],
            )
        )
        self.assertEqual(
            payload.to_dict(),
            {
                "type": "script_function_payload",
                "function": {
                    "module": {"address": "0x1", "name": "token_transfers"},
                    "name": "offer_script",
                },
                "type_arguments": [],
                "arguments": [
                    "0x1",
                    str(creator),
                    "416c6963652773",
                    "18446744073709551615",
                ],
            },
        )

    def test_u64_bounds(self):
        with self.assertRaises(ValueError):
            Encoder.u64(-1)
        with self.assertRaises(ValueError):
            Encoder.u64(2**64)
        with self.assertRaises(TypeError):
            Encoder.u64(typing.cast(int, "1"))
        with self.assertRaises(TypeError):
            Encoder.u64(True)

    def test_utf8_strings(self):
        self.assertEqual(Encoder.str(""), "")
        self.assertEqual(bytes.fromhex(Encoder.str("nyan ☺")).decode(), "nyan ☺")

    def test_raw_transaction(self):
        payload = TransactionPayload(
            EntryFunction.natural("0x1::token", "noop", [], [])
        )
        raw = RawTransaction(
            AccountAddress.from_str("0x1"), 7, payload, 4000, 100, 1_700_000_000
        )
        request = raw.to_dict()
        self.assertEqual(request["sequence_number"], "7")
        self.assertEqual(request["max_gas_amount"], "4000")
        self.assertEqual(request["expiration_timestamp_secs"], "1700000000")
        self.assertEqual(request["payload"]["type"], "script_function_payload")


if __name__ == "__main__":
    unittest.main()
