# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Account addresses as they appear in token identifiers and REST paths.

An address is 32 bytes. Its string form follows AIP-40: "special" addresses
(``0x0`` through ``0xf``) are written in SHORT form, every other address in
LONG form, ``0x`` followed by 64 lowercase hex characters. This matters for the
token client because the ``creator`` field of a ``TokenId`` table key is
compared by the node as a string; ``str(address)`` always yields the canonical
form the ledger stores.

Examples:
    Parsing and printing::

        AccountAddress.from_str("0x1")                     # framework address
        AccountAddress.from_str_relaxed("1")               # same, relaxed
        str(AccountAddress.from_str_relaxed("0x0001"))     # "0x1"

    Deriving the address of a freshly generated key::

        private_key = ed25519.PrivateKey.random()
        address = AccountAddress.from_key(private_key.public_key())
"""

from __future__ import annotations

import hashlib
import unittest

from . import asymmetric_crypto, ed25519


class AuthKeyScheme:
    """Scheme byte appended to a public key before hashing it into an address."""

    Ed25519: bytes = b"\x00"


class ParseAddressError(ValueError):
    """An address string or byte sequence could not be parsed."""


class AccountAddress:
    address: bytes
    LENGTH: int = 32

    def __init__(self, address: bytes):
        self.address = address

        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError("Expected address of length 32")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self):
        suffix = self.address.hex()
        if self.is_special():
            suffix = suffix.lstrip("0") or "0"
        return f"0x{suffix}"

    def __repr__(self):
        return self.__str__()

    def is_special(self):
        """True for 0x0 through 0xf, i.e. ``^0{63}[0-9a-f]$`` in hex."""
        return all(b == 0 for b in self.address[:-1]) and self.address[-1] < 0b10000

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """Parse an address in strict AIP-40 form.

        The string must start with ``0x``. Special addresses must use SHORT form
        without padding zeroes; all others must use the full 64 characters.
        """
        if not address.startswith("0x"):
            raise ParseAddressError("Hex string must start with a leading 0x.")

        out = AccountAddress.from_str_relaxed(address)
        # Only special addresses may be written in SHORT form.
        if len(address) != AccountAddress.LENGTH * 2 + 2:
            if not out.is_special():
                raise ParseAddressError(
                    "The given hex string is not a special address, it must be represented "
                    "as 0x + 64 chars."
                )
            elif len(address) != 3:
                raise ParseAddressError(
                    "The given hex string is a special address not in LONG form, "
                    "it must be 0x0 to 0xf without padding zeroes."
                )

        return out

    @staticmethod
    def from_str_relaxed(address: str) -> AccountAddress:
        """Parse an address with or without ``0x``, padded or not."""
        addr = address

        if address[0:2] == "0x":
            addr = address[2:]

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) > 64:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) < AccountAddress.LENGTH * 2:
            pad = "0" * (AccountAddress.LENGTH * 2 - len(addr))
            addr = pad + addr

        try:
            return AccountAddress(bytes.fromhex(addr))
        except ValueError as e:
            if isinstance(e, ParseAddressError):
                raise
            raise ParseAddressError(f"Invalid hex in address: {address}") from e

    @staticmethod
    def from_key(key: asymmetric_crypto.PublicKey) -> AccountAddress:
        """Derive the address that a single ed25519 key authenticates.

        ``sha3_256(public_key_bytes || 0x00)``.
        """
        hasher = hashlib.sha3_256()
        hasher.update(key.to_crypto_bytes())

        if isinstance(key, ed25519.PublicKey):
            hasher.update(AuthKeyScheme.Ed25519)
        else:
            raise TypeError("Unsupported asymmetric_crypto.PublicKey key type.")

        return AccountAddress(hasher.digest())


class Test(unittest.TestCase):
    OTHER = "0xca843279e3427144cead5e4d5999a3d0ca843279e3427144cead5e4d5999a3d0"

    def test_to_standard_string(self):
        self.assertEqual(
            str(
                AccountAddress.from_str_relaxed(
                    "0x0000000000000000000000000000000000000000000000000000000000000000"
                )
            ),
            "0x0",
        )
        self.assertEqual(
            str(
                AccountAddress.from_str_relaxed(
                    "0x0000000000000000000000000000000000000000000000000000000000000001"
                )
            ),
            "0x1",
        )
        self.assertEqual(str(AccountAddress.from_str_relaxed("d")), "0xd")

        # Neither leading nor trailing zeroes get trimmed for non-special addresses.
        value = "0x0000000000000000000000000000000000000000000000000000000000000010"
        self.assertEqual(str(AccountAddress.from_str_relaxed(value)), value)
        value = "0f00000000000000000000000000000000000000000000000000000000000000"
        self.assertEqual(str(AccountAddress.from_str_relaxed(value)), f"0x{value}")

    def test_from_str(self):
        self.assertEqual(str(AccountAddress.from_str("0x1")), "0x1")
        self.assertEqual(str(AccountAddress.from_str(self.OTHER)), self.OTHER)

        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("1")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x0f")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x10")

    def test_from_str_relaxed_rejects(self):
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("0x")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("0x" + "1" * 65)
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("0xzz")

    def test_hash_and_equality(self):
        first = AccountAddress.from_str_relaxed("0x01")
        second = AccountAddress.from_str("0x1")
        self.assertEqual(first, second)
        self.assertEqual(len({first, second}), 1)

    def test_from_key(self):
        private_key = ed25519.PrivateKey.from_str(
            "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        )
        public_key = private_key.public_key()
        expected = hashlib.sha3_256(public_key.to_crypto_bytes() + b"\x00").digest()
        self.assertEqual(AccountAddress.from_key(public_key).address, expected)


if __name__ == "__main__":
    unittest.main()
