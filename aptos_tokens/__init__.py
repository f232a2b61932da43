# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
aptos-tokens - Python client for Aptos table-based tokens.

Creates collections and tokens, moves tokens with the offer/claim/cancel
protocol, and reads collection, token data and balance records from a node's
REST API.

Modules:
    - token_client: :class:`TokenClient`, the write and read operations
    - token_types: typed records (``TokenId``, ``CollectionData``, ...)
    - async_client: :class:`RestClient` and :class:`FaucetClient` over httpx
    - transactions: JSON entry-function payloads and transaction requests
    - errors: the exception hierarchy rooted at ``ApiError``
    - account, account_address, ed25519, asymmetric_crypto: keys and signers
    - type_tag: fully-qualified Move struct names
    - ledger_emulator: in-memory node used by the test suites
    - cli: ``python -m aptos_tokens.cli`` record lookups

Examples:
    Read a balance::

        from aptos_tokens.async_client import RestClient
        from aptos_tokens.token_client import TokenClient

        rest_client = RestClient("http://localhost:8080/v1")
        token_client = TokenClient(rest_client)
        token_id = token_client.token_id(creator, "Alice's", "Alice's first token")
        print(await token_client.get_token_balance(holder, token_id))
        await rest_client.close()
"""
