"""
Example scripts for aptos-tokens.

    - simple_nft.py: create a collection and token, then offer, cancel and claim it
    - integration_test.py: runs the example and protocol checks against a live node
    - common.py: network settings read from the environment

Run from the repository root::

    python -m examples.simple_nft

All settings come from environment variables, see :mod:`examples.common`.
"""
