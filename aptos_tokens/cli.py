# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Command-line reads of token records.

Supported commands:
    - collection-data: the collection record of ``--creator``/``--collection``
    - token-data: the token data of ``--creator``/``--collection``/``--name``
    - token-balance: what ``--account`` holds of that token

Each prints the record as JSON. A missing record is reported on stderr with
exit status 1.

Examples:
    Look up Bob's balance of one of Alice's tokens::

        python -m aptos_tokens.cli token-balance \
            --rest-api http://localhost:8080/v1 \
            --creator 0xca84... \
            --collection "Alice's" \
            --name "Alice's first token" \
            --account 0x3b1f...
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import io
import json
import logging
import sys
import unittest
from typing import Any, Dict, List
from unittest.mock import patch

from . import async_client
from .account import Account
from .account_address import AccountAddress
from .async_client import RestClient
from .errors import KeyNotFoundError, ResourceNotFoundError
from .ledger_emulator import LedgerEmulator
from .token_client import TokenClient, TokenClientConfig


async def query(
    command: str,
    rest_api: str,
    creator: AccountAddress,
    collection: str,
    name: str | None = None,
    account: AccountAddress | None = None,
    module_address: str = "0x1",
) -> Dict[str, Any]:
    """Run one read command and return its record as a JSON-ready dict."""
    rest_client = RestClient(rest_api)
    token_client = TokenClient(
        rest_client, TokenClientConfig(module_address=module_address)
    )
    try:
        if command == "collection-data":
            collection_data = await token_client.get_collection_data(
                creator, collection
            )
            return dataclasses.asdict(collection_data)
        if name is None:
            raise ValueError(f"{command} needs a token name")
        if command == "token-data":
            token_data = await token_client.get_token_data(creator, collection, name)
            return dataclasses.asdict(token_data)
        if account is None:
            raise ValueError(f"{command} needs an account")
        token_id = token_client.token_id(creator, collection, name)
        token = await token_client.get_token_balance_for_account(account, token_id)
        return {"id": token.id.to_dict(), "value": token.value}
    finally:
        await rest_client.close()


async def main(args: List[str]) -> int:
    parser = argparse.ArgumentParser(description="Aptos token reads")
    parser.add_argument(
        "command",
        type=str,
        help="The record to read",
        choices=["collection-data", "token-data", "token-balance"],
    )
    parser.add_argument(
        "--rest-api",
        help="Node REST API endpoint URL (e.g., http://localhost:8080/v1)",
        type=str,
    )
    parser.add_argument(
        "--creator",
        help="Address of the account that created the collection",
        type=AccountAddress.from_str_relaxed,
    )
    parser.add_argument("--collection", help="Collection name", type=str)
    parser.add_argument("--name", help="Token name", type=str)
    parser.add_argument(
        "--account",
        help="Holder whose balance to read",
        type=AccountAddress.from_str_relaxed,
    )
    parser.add_argument(
        "--module-address",
        help="Address the token modules are published at",
        type=str,
        default="0x1",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests")
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed_args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_args.rest_api is None:
        parser.error("Missing required argument '--rest-api'")
    if parsed_args.creator is None:
        parser.error("Missing required argument '--creator'")
    if parsed_args.collection is None:
        parser.error("Missing required argument '--collection'")
    if parsed_args.command != "collection-data" and parsed_args.name is None:
        parser.error("Missing required argument '--name'")
    if parsed_args.command == "token-balance" and parsed_args.account is None:
        parser.error("Missing required argument '--account'")

    try:
        record = await query(
            parsed_args.command,
            parsed_args.rest_api,
            parsed_args.creator,
            parsed_args.collection,
            parsed_args.name,
            parsed_args.account,
            parsed_args.module_address,
        )
    except (KeyNotFoundError, ResourceNotFoundError) as e:
        print(f"Not found: {e}", file=sys.stderr)
        return 1

    print(json.dumps(record, indent=2))
    return 0


class Test(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.ledger = LedgerEmulator()
        self.alice = Account.generate()
        rest_client = self.rest_client(self.ledger.base_url)
        await async_client.FaucetClient(self.ledger.faucet_url, rest_client).fund_account(
            self.alice.address(), 1_000
        )
        token_client = TokenClient(rest_client)
        await token_client.create_collection(self.alice, "Alice's", "Simple", "uri")
        await token_client.create_token(
            self.alice, "Alice's", "First", "First token", 3, "uri", 10
        )
        await rest_client.close()

    def rest_client(self, rest_api: str) -> RestClient:
        config = async_client.ClientConfig(transaction_poll_interval=0.01)
        return async_client.RestClient(
            rest_api, config, transport=self.ledger.transport()
        )

    async def run_cli(self, *args: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with patch(f"{__name__}.RestClient", side_effect=self.rest_client):
            with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
                status = await main(
                    [
                        *args,
                        "--rest-api",
                        self.ledger.base_url,
                        "--creator",
                        str(self.alice.address()),
                        "--collection",
                        "Alice's",
                    ]
                )
        return (status, stdout.getvalue(), stderr.getvalue())

    async def test_collection_data(self):
        (status, out, _) = await self.run_cli("collection-data")
        self.assertEqual(status, 0)
        self.assertEqual(json.loads(out)["description"], "Simple")
        self.assertEqual(json.loads(out)["count"], 1)

    async def test_token_balance(self):
        (status, out, _) = await self.run_cli(
            "token-balance", "--name", "First", "--account", str(self.alice.address())
        )
        self.assertEqual(status, 0)
        self.assertEqual(json.loads(out)["value"], 3)
        self.assertEqual(json.loads(out)["id"]["creator"], str(self.alice.address()))

    async def test_not_found(self):
        (status, out, err) = await self.run_cli("token-data", "--name", "Second")
        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertIn("Not found", err)

    async def test_query_requires_name_and_account(self):
        with patch(f"{__name__}.RestClient", side_effect=self.rest_client):
            with self.assertRaises(ValueError):
                await query(
                    "token-data", self.ledger.base_url, self.alice.address(), "Alice's"
                )
            with self.assertRaises(ValueError):
                await query(
                    "token-balance",
                    self.ledger.base_url,
                    self.alice.address(),
                    "Alice's",
                    "First",
                )

    async def test_missing_argument(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                await main(["token-data", "--rest-api", self.ledger.base_url])


def run():
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    run()
