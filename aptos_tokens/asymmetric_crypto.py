# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Key protocols shared by the signing primitives.

The token client only needs three capabilities from a key pair: produce a
signature over a signing message, expose the public key that goes into the
signed request, and render that key as hex. These protocols pin that contract
so the transaction path does not depend on a concrete curve.

Private keys can be written in the AIP-80 format, ``<scheme>-priv-0x<hex>``.
:meth:`PrivateKey.parse_hex_input` accepts both that format and a plain hex
string.
"""

from __future__ import annotations

import logging
from enum import Enum

from typing_extensions import Protocol


class PrivateKeyVariant(Enum):
    Ed25519 = "ed25519"


class PrivateKey(Protocol):
    """Interface every private key implementation provides.

    AIP80_PREFIXES maps a :class:`PrivateKeyVariant` to the string prefix used
    when a key is rendered in AIP-80 form.
    """

    AIP80_PREFIXES: dict[PrivateKeyVariant, str] = {
        PrivateKeyVariant.Ed25519: "ed25519-priv-",
    }

    def hex(self) -> str:
        ...

    def public_key(self) -> PublicKey:
        ...

    def sign(self, data: bytes) -> Signature:
        ...

    @staticmethod
    def format_private_key(
        private_key: bytes | str, key_type: PrivateKeyVariant
    ) -> str:
        """Render ``private_key`` as an AIP-80 string for ``key_type``.

        An already prefixed string is normalized rather than prefixed twice.
        """
        if key_type not in PrivateKey.AIP80_PREFIXES:
            raise ValueError(f"Unknown private key type: {key_type}")
        aip80_prefix = PrivateKey.AIP80_PREFIXES[key_type]

        key_value: str | None = None
        if isinstance(private_key, str):
            if private_key.startswith(aip80_prefix):
                key_value = private_key.split("-")[2]
            else:
                key_value = private_key
        elif isinstance(private_key, bytes):
            key_value = f"0x{private_key.hex()}"
        else:
            raise TypeError("Input value must be a string or bytes.")

        return f"{aip80_prefix}{key_value}"

    @staticmethod
    def parse_hex_input(
        value: str | bytes, key_type: PrivateKeyVariant, strict: bool | None = None
    ) -> bytes:
        """Decode a private key given as bytes, hex or an AIP-80 string.

        :param strict: ``True`` only accepts AIP-80 strings, ``False`` silently
            accepts plain hex, ``None`` accepts plain hex but logs a warning.
        """
        if key_type not in PrivateKey.AIP80_PREFIXES:
            raise ValueError(f"Unknown private key type: {key_type}")
        aip80_prefix = PrivateKey.AIP80_PREFIXES[key_type]

        if isinstance(value, str):
            if not strict and not value.startswith(aip80_prefix):
                if strict is None:
                    logging.warning(
                        "It is recommended that private keys are AIP-80 compliant "
                        "(https://github.com/aptos-foundation/AIPs/blob/main/aips/aip-80.md)."
                    )
                if value[0:2] == "0x":
                    value = value[2:]
                return bytes.fromhex(value)
            elif value.startswith(aip80_prefix):
                value = value.split("-")[2]
                if value[0:2] == "0x":
                    value = value[2:]
                return bytes.fromhex(value)
            else:
                if strict:
                    raise ValueError(
                        "Invalid HexString input. Must be AIP-80 compliant string."
                    )
                raise ValueError("Invalid HexString input.")
        elif isinstance(value, bytes):
            return value
        else:
            raise TypeError("Input value must be a string or bytes.")


class PublicKey(Protocol):
    def to_crypto_bytes(self) -> bytes:
        """Raw key bytes as hashed into an authentication key."""
        ...

    def verify(self, data: bytes, signature: Signature) -> bool:
        ...


class Signature(Protocol):
    def data(self) -> bytes:
        ...
