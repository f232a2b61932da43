# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Mint a token and move it between two accounts with offer and claim.

Alice creates a collection and a single-unit token in it, offers the token to
Bob, cancels, offers again, and Bob claims it. Balances are printed after each
step. Run against a node with a faucet::

    python -m examples.simple_nft
"""

import asyncio
import json

from aptos_tokens.account import Account
from aptos_tokens.async_client import FaucetClient, RestClient
from aptos_tokens.token_client import TokenClient, TokenClientConfig

from .common import FAUCET_AUTH_TOKEN, FAUCET_URL, NODE_URL, TOKEN_MODULE_ADDRESS

COLLECTION = "Alice's"
TOKEN = "Alice's first token"


async def print_balances(token_client: TokenClient, alice: Account, bob: Account):
    token_id = token_client.token_id(alice.address(), COLLECTION, TOKEN)
    alice_balance = token_client.get_token_balance(alice.address(), token_id)
    bob_balance = token_client.get_token_balance(bob.address(), token_id)
    [alice_balance, bob_balance] = await asyncio.gather(*[alice_balance, bob_balance])
    print(f"Alice's token balance: {alice_balance}")
    print(f"Bob's token balance: {bob_balance}")


async def main():
    # :!:>section_1
    rest_client = RestClient(NODE_URL)
    faucet_client = FaucetClient(FAUCET_URL, rest_client, FAUCET_AUTH_TOKEN)
    token_client = TokenClient(
        rest_client, TokenClientConfig(module_address=TOKEN_MODULE_ADDRESS)
    )  # <:!:section_1

    alice = Account.generate()
    bob = Account.generate()

    print("\n=== Addresses ===")
    print(f"Alice: {alice.address()}")
    print(f"Bob: {bob.address()}")

    alice_fund = faucet_client.fund_account(alice.address(), 100_000_000)
    bob_fund = faucet_client.fund_account(bob.address(), 100_000_000)
    await asyncio.gather(*[alice_fund, bob_fund])

    print("\n=== Creating Collection and Token ===")

    # :!:>section_2
    await token_client.create_collection(
        alice, COLLECTION, "Alice's simple collection", "https://aptos.dev"
    )
    await token_client.create_token(
        alice,
        COLLECTION,
        TOKEN,
        "Alice's simple token",
        1,
        "https://aptos.dev/img/nyan.jpeg",
        0,
    )  # <:!:section_2

    # :!:>section_3
    collection_data = await token_client.get_collection_data(
        alice.address(), COLLECTION
    )
    print(f"Alice's collection: {json.dumps(collection_data.__dict__, indent=4)}")
    token_data = await token_client.get_token_data(alice.address(), COLLECTION, TOKEN)
    print(f"Alice's token data: {json.dumps(token_data.__dict__, indent=4)}")
    # <:!:section_3
    await print_balances(token_client, alice, bob)

    print("\n=== Offering the token to Bob ===")
    # :!:>section_4
    await token_client.offer_token(
        alice, bob.address(), alice.address(), COLLECTION, TOKEN, 1
    )  # <:!:section_4
    await print_balances(token_client, alice, bob)

    print("\n=== Cancelling the offer ===")
    await token_client.cancel_token_offer(
        alice, bob.address(), alice.address(), COLLECTION, TOKEN
    )
    await print_balances(token_client, alice, bob)

    print("\n=== Offering again, Bob claims ===")
    await token_client.offer_token(
        alice, bob.address(), alice.address(), COLLECTION, TOKEN, 1
    )
    # :!:>section_5
    await token_client.claim_token(
        bob, alice.address(), alice.address(), COLLECTION, TOKEN
    )  # <:!:section_5
    await print_balances(token_client, alice, bob)

    await rest_client.close()


if __name__ == "__main__":
    asyncio.run(main())
