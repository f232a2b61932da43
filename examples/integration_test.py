# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Runs the token example and protocol checks against a live node.

Skipped unless ``APTOS_NODE_URL`` is set, e.g.::

    APTOS_NODE_URL=http://127.0.0.1:8080/v1 \
    APTOS_FAUCET_URL=http://127.0.0.1:8081 \
    python -m unittest -b examples.integration_test
"""

import os
import unittest

from aptos_tokens.account import Account
from aptos_tokens.async_client import FaucetClient, RestClient
from aptos_tokens.errors import KeyNotFoundError, ResourceNotFoundError
from aptos_tokens.token_client import TokenClient, TokenClientConfig

from .common import FAUCET_AUTH_TOKEN, FAUCET_URL, NODE_URL, TOKEN_MODULE_ADDRESS


@unittest.skipUnless(os.getenv("APTOS_NODE_URL"), "APTOS_NODE_URL is not set")
class Test(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.rest_client = RestClient(NODE_URL)
        self.faucet_client = FaucetClient(FAUCET_URL, self.rest_client, FAUCET_AUTH_TOKEN)
        self.token_client = TokenClient(
            self.rest_client, TokenClientConfig(module_address=TOKEN_MODULE_ADDRESS)
        )

    async def asyncTearDown(self):
        await self.rest_client.close()

    async def test_simple_nft(self):
        from . import simple_nft

        await simple_nft.main()

    async def test_missing_records(self):
        alice = Account.generate()
        await self.faucet_client.fund_account(alice.address(), 100_000_000)

        with self.assertRaises(ResourceNotFoundError):
            await self.token_client.get_collection_data(alice.address(), "None")

        await self.token_client.create_collection(alice, "Some", "", "")
        with self.assertRaises(KeyNotFoundError):
            await self.token_client.get_token_data(alice.address(), "None", "None")
        collection = await self.token_client.get_collection_data(
            alice.address(), "Some"
        )
        self.assertEqual(collection.count, 0)


if __name__ == "__main__":
    unittest.main(buffer=True)
