# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Client identification metadata for aptos-tokens.

Every request issued by :class:`aptos_tokens.async_client.RestClient` carries an
``x-aptos-client`` header so node operators can attribute traffic to this
library and its version.

Examples:
    Build the header by hand for a custom HTTP client::

        import httpx
        from aptos_tokens.metadata import Metadata

        headers = {Metadata.APTOS_HEADER: Metadata.get_aptos_header_val()}
        response = httpx.get("https://fullnode.devnet.aptoslabs.com/v1", headers=headers)
"""

import importlib.metadata as metadata
import unittest

# Distribution name used for the version lookup
PACKAGE_NAME = "aptos-tokens"


class Metadata:
    """Static helpers for the client identification header."""

    APTOS_HEADER = "x-aptos-client"

    @staticmethod
    def get_aptos_header_val() -> str:
        """Return ``aptos-tokens-python/{version}``.

        Falls back to ``0.0.0`` when the distribution is not installed, e.g. when
        the package is imported straight from a source checkout.
        """
        try:
            version = metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        return f"aptos-tokens-python/{version}"


class Test(unittest.TestCase):
    def test_header_value(self):
        value = Metadata.get_aptos_header_val()
        self.assertTrue(value.startswith("aptos-tokens-python/"))
        self.assertNotEqual(value.split("/")[1], "")


if __name__ == "__main__":
    unittest.main()
