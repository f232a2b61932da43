# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Network settings shared by the example scripts.

Environment Variables:
    APTOS_NODE_URL: Node REST API endpoint
    APTOS_FAUCET_URL: Faucet used to fund generated accounts
    FAUCET_AUTH_TOKEN: Bearer token for the faucet, if it requires one
    APTOS_TOKEN_MODULE_ADDRESS: Address the token modules are published at

Defaults point at a local testnet, e.g. one started with
``aptos node run-local-testnet --with-faucet``.
"""

import os

# :!:>section_1
FAUCET_URL = os.getenv("APTOS_FAUCET_URL", "http://127.0.0.1:8081")
FAUCET_AUTH_TOKEN = os.getenv("FAUCET_AUTH_TOKEN")
NODE_URL = os.getenv("APTOS_NODE_URL", "http://127.0.0.1:8080/v1")
TOKEN_MODULE_ADDRESS = os.getenv("APTOS_TOKEN_MODULE_ADDRESS", "0x1")
# <:!:section_1
