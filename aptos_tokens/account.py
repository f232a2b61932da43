# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Signing accounts.

An :class:`Account` pairs an address with the ed25519 private key that
authenticates it. The token client treats it as an opaque signer: it asks for
``address()`` when building a transaction request and hands the node's signing
message to ``sign()``.

Examples:
    Generate, persist and reload an account::

        alice = Account.generate()
        alice.store("./alice.json")
        assert Account.load("./alice.json") == alice

    Import a key exported by the Aptos CLI::

        alice = Account.load_key("ed25519-priv-0x4e5e...")
"""

from __future__ import annotations

import json
import os
import tempfile
import unittest

from . import asymmetric_crypto, ed25519
from .account_address import AccountAddress


class Account:
    """An address and the private key that controls it."""

    account_address: AccountAddress
    private_key: ed25519.PrivateKey

    def __init__(
        self, account_address: AccountAddress, private_key: ed25519.PrivateKey
    ):
        """The address is not checked against the key; prefer :meth:`generate`
        or :meth:`load_key` which derive it."""
        self.account_address = account_address
        self.private_key = private_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return (
            self.account_address == other.account_address
            and self.private_key == other.private_key
        )

    @staticmethod
    def generate() -> Account:
        private_key = ed25519.PrivateKey.random()
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load_key(key: str) -> Account:
        """Build an account from a hex or AIP-80 encoded ed25519 private key."""
        private_key = ed25519.PrivateKey.from_str(key)
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load(path: str) -> Account:
        """Read an account written by :meth:`store`.

        The file is JSON with ``account_address`` and ``private_key`` entries.
        """
        with open(path) as file:
            data = json.load(file)
        return Account(
            AccountAddress.from_str_relaxed(data["account_address"]),
            ed25519.PrivateKey.from_str(data["private_key"]),
        )

    def store(self, path: str):
        """Write the address and the AIP-80 private key to ``path`` in plaintext."""
        data = {
            "account_address": str(self.account_address),
            "private_key": str(self.private_key),
        }
        with open(path, "w") as file:
            json.dump(data, file)

    def address(self) -> AccountAddress:
        return self.account_address

    def auth_key(self) -> str:
        """Authentication key of the current key pair, as a ``0x`` hex string."""
        return str(AccountAddress.from_key(self.private_key.public_key()))

    def sign(self, data: bytes) -> asymmetric_crypto.Signature:
        return self.private_key.sign(data)

    def public_key(self) -> ed25519.PublicKey:
        return self.private_key.public_key()


class Test(unittest.TestCase):
    def test_load_and_store(self):
        (file, path) = tempfile.mkstemp()
        os.close(file)
        try:
            start = Account.generate()
            start.store(path)
            load = Account.load(path)
        finally:
            os.remove(path)

        self.assertEqual(start, load)
        # Auth key and Account address should be the same at start
        self.assertEqual(str(start.address()), start.auth_key())

    def test_key(self):
        message = b"test message"
        account = Account.generate()
        signature = account.sign(message)
        self.assertTrue(account.public_key().verify(message, signature))

    def test_load_key(self):
        key = "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        first = Account.load_key(key)
        second = Account.load_key(key)
        self.assertEqual(first, second)
        self.assertEqual(str(first.private_key), key)


if __name__ == "__main__":
    unittest.main()
