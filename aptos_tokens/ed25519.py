# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Ed25519 signing primitives backed by PyNaCl.

This is the only signature scheme the token client needs: the node accepts a
signed transaction request whose ``signature`` field is
``{"type": "ed25519_signature", "public_key": ..., "signature": ...}``, and
both hex values come straight from :class:`PublicKey` and :class:`Signature`.

Examples:
    Sign a signing message::

        private_key = PrivateKey.random()
        signature = private_key.sign(bytes.fromhex("b5e9..."))
        assert private_key.public_key().verify(bytes.fromhex("b5e9..."), signature)

    Load a key exported by the Aptos CLI::

        key = PrivateKey.from_str("ed25519-priv-0x4e5e...", strict=True)
"""

from __future__ import annotations

import unittest

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from . import asymmetric_crypto


class PrivateKey(asymmetric_crypto.PrivateKey):
    """A 32-byte Ed25519 private key."""

    LENGTH: int = 32

    key: SigningKey

    def __init__(self, key: SigningKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self):
        return self.aip80()

    @staticmethod
    def from_hex(value: str | bytes, strict: bool | None = None) -> PrivateKey:
        """Parse a key from plain hex, ``0x`` hex, AIP-80 or raw bytes.

        :param strict: see :meth:`asymmetric_crypto.PrivateKey.parse_hex_input`.
        :raises ValueError: if the decoded key is not 32 bytes long.
        """
        key_bytes = asymmetric_crypto.PrivateKey.parse_hex_input(
            value, asymmetric_crypto.PrivateKeyVariant.Ed25519, strict
        )
        if len(key_bytes) != PrivateKey.LENGTH:
            raise ValueError(
                f"Expected a {PrivateKey.LENGTH} byte private key, got {len(key_bytes)}"
            )
        return PrivateKey(SigningKey(key_bytes))

    @staticmethod
    def from_str(value: str, strict: bool | None = None) -> PrivateKey:
        return PrivateKey.from_hex(value, strict)

    def hex(self) -> str:
        return f"0x{self.key.encode().hex()}"

    def aip80(self) -> str:
        return PrivateKey.format_private_key(
            self.hex(), asymmetric_crypto.PrivateKeyVariant.Ed25519
        )

    def public_key(self) -> PublicKey:
        return PublicKey(self.key.verify_key)

    @staticmethod
    def random() -> PrivateKey:
        return PrivateKey(SigningKey.generate())

    def sign(self, data: bytes) -> Signature:
        return Signature(self.key.sign(data).signature)


class PublicKey(asymmetric_crypto.PublicKey):
    """A 32-byte Ed25519 public key."""

    LENGTH: int = 32

    key: VerifyKey

    def __init__(self, key: VerifyKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self) -> str:
        return f"0x{self.key.encode().hex()}"

    @staticmethod
    def from_str(value: str) -> PublicKey:
        if value[0:2] == "0x":
            value = value[2:]
        return PublicKey(VerifyKey(bytes.fromhex(value)))

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        try:
            self.key.verify(data, signature.data())
        except BadSignatureError:
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return self.key.encode()


class Signature(asymmetric_crypto.Signature):
    """A 64-byte Ed25519 signature."""

    LENGTH: int = 64

    signature: bytes

    def __init__(self, signature: bytes):
        self.signature = signature

    def __eq__(self, other: object):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.signature == other.signature

    def __str__(self) -> str:
        return f"0x{self.signature.hex()}"

    def data(self) -> bytes:
        return self.signature

    @staticmethod
    def from_str(value: str) -> Signature:
        if value[0:2] == "0x":
            value = value[2:]
        return Signature(bytes.fromhex(value))


class Test(unittest.TestCase):
    def test_private_key_from_str(self):
        private_key_hex = PrivateKey.from_str(
            "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe", False
        )
        private_key_with_prefix = PrivateKey.from_str(
            "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe",
            True,
        )
        private_key_bytes = PrivateKey.from_hex(
            bytes.fromhex(
                "4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
            ),
            False,
        )
        self.assertEqual(private_key_hex.hex(), private_key_with_prefix.hex())
        self.assertEqual(private_key_hex.hex(), private_key_bytes.hex())

    def test_private_key_aip80_formatting(self):
        private_key_with_prefix = "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        self.assertEqual(
            str(PrivateKey.from_str(private_key_with_prefix, True)),
            private_key_with_prefix,
        )

    def test_strict_rejects_plain_hex(self):
        with self.assertRaises(ValueError):
            PrivateKey.from_str(
                "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe",
                True,
            )

    def test_wrong_length(self):
        with self.assertRaises(ValueError):
            PrivateKey.from_str("0x4e5e", False)

    def test_sign_and_verify(self):
        in_value = b"test_message"

        private_key = PrivateKey.random()
        public_key = private_key.public_key()

        signature = private_key.sign(in_value)
        self.assertTrue(public_key.verify(in_value, signature))
        self.assertFalse(public_key.verify(b"other_message", signature))

    def test_hex_round_trip(self):
        private_key = PrivateKey.random()
        public_key = private_key.public_key()
        signature = private_key.sign(b"message")

        self.assertEqual(PublicKey.from_str(str(public_key)), public_key)
        self.assertEqual(Signature.from_str(str(signature)), signature)


if __name__ == "__main__":
    unittest.main()
