# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Client for the table-based token standard and its offer/claim transfer protocol.

Tokens are created by a creator account inside a named collection. Ownership
moves in two steps: the holder *offers* an amount to a receiver, which
withdraws it into a pending offer, and the receiver *claims* it. Until then the
holder may *cancel* the offer and get the amount back. Pending offers live on
the ledger only; this client keeps no state of its own.

Storage layout the read path relies on:
    - The creator's ``<module>::token::Collections`` resource holds two tables:
      ``collections`` (collection name -> ``Collection``) and ``token_data``
      (``TokenId`` -> ``TokenData``).
    - Every holder's ``<module>::token::TokenStore`` resource holds the
      ``tokens`` table (``TokenId`` -> ``Token``).

Every write submits one transaction, waits for it to be final and returns its
hash. Reads first resolve a table handle from a resource, then look up one
item. Nothing is cached and nothing is retried.

Examples:
    Mint a token and hand it to Bob::

        client = RestClient(NODE_URL)
        token_client = TokenClient(client)

        await token_client.create_collection(
            alice, "Alice's", "Alice's simple collection", "https://aptos.dev"
        )
        await token_client.create_token(
            alice,
            "Alice's",
            "Alice's first token",
            "Alice's simple token",
            1,
            "https://aptos.dev/img/nyan.jpeg",
            0,
        )
        await token_client.offer_token(
            alice, bob.address(), alice.address(), "Alice's", "Alice's first token", 1
        )
        await token_client.claim_token(
            bob, alice.address(), alice.address(), "Alice's", "Alice's first token"
        )

        token_id = token_client.token_id(
            alice.address(), "Alice's", "Alice's first token"
        )
        assert await token_client.get_token_balance(bob.address(), token_id) == 1
"""

import logging
import re
import unittest
from dataclasses import dataclass
from typing import List, Optional

import httpx

from .account import Account
from .account_address import AccountAddress
from .async_client import ClientConfig, FaucetClient, RestClient
from .errors import (
    AccountNotFound,
    ConfirmationTimeoutError,
    KeyNotFoundError,
    ResourceNotFoundError,
    SubmissionError,
    TransactionRejectedError,
    TypeMismatchError,
)
from .ledger_emulator import LedgerEmulator
from .token_types import (
    CollectionData,
    CollectionsResource,
    Token,
    TokenData,
    TokenId,
    TokenStoreResource,
)
from .transactions import (
    MAX_U64,
    Encoder,
    EntryFunction,
    TransactionArgument,
    TransactionPayload,
)
from .type_tag import StructTag

MAX_ROYALTY_POINTS = 1_000_000


@dataclass
class TokenClientConfig:
    """Settings for :class:`TokenClient`.

    Attributes:
        max_gas_amount: Gas ceiling for every token transaction.
        module_address: Address the ``token`` and ``token_transfers`` modules
            are published at.
        raise_on_failed_transaction: Raise :class:`TransactionRejectedError`
            when a transaction commits with a failed status. When ``False`` the
            hash is returned anyway and a warning is logged, leaving the caller
            to inspect :meth:`RestClient.transaction_by_hash`.
        transaction_wait_in_seconds: How long a write waits for finality.
            ``None`` uses the REST client's setting.
    """

    max_gas_amount: int = 4000
    module_address: str = "0x1"
    raise_on_failed_transaction: bool = True
    transaction_wait_in_seconds: Optional[float] = None


def _check_u64(name: str, value: int):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_U64:
        raise ValueError(f"{name} must be between 0 and {MAX_U64}, got {value}")


class TokenClient:
    """Creates, transfers and reads tokens through a :class:`RestClient`."""

    _client: RestClient
    config: TokenClientConfig

    def __init__(self, client: RestClient, config: Optional[TokenClientConfig] = None):
        self._client = client
        self.config = config if config is not None else TokenClientConfig()
        self._module_address = AccountAddress.from_str_relaxed(
            self.config.module_address
        )

    def _type(self, module: str, name: str) -> str:
        return f"{self._module_address}::{module}::{name}"

    def _entry_function(
        self, module: str, function: str, args: List[TransactionArgument]
    ) -> TransactionPayload:
        return TransactionPayload(
            EntryFunction.natural(f"{self._module_address}::{module}", function, [], args)
        )

    @staticmethod
    def token_id(creator: AccountAddress, collection_name: str, name: str) -> TokenId:
        return TokenId(creator, collection_name, name)

    async def submit_transaction_helper(
        self,
        signer: Account,
        payload: TransactionPayload,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Sign ``payload`` as ``signer``, broadcast it and wait until it is final.

        Args:
            signer: Account that pays for and authorizes the transaction.
            payload: The entry function call to run.
            sequence_number: Pin the transaction's sequence number. Resending
                with the same pinned number after a timeout cannot execute the
                operation twice; the ledger rejects the duplicate.

        Returns:
            str: The transaction hash.

        Raises:
            SubmissionError: The request never reached the mempool.
            ConfirmationTimeoutError: The transaction was broadcast but its
                outcome was not seen in time. It may still commit.
            TransactionRejectedError: The transaction committed with a failed
                status and ``raise_on_failed_transaction`` is set.
        """
        raw_transaction = await self._client.create_transaction(
            signer, payload, sequence_number, self.config.max_gas_amount
        )
        signed_transaction = await self._client.sign_transaction(
            signer, raw_transaction
        )
        txn_hash = await self._client.submit_transaction(signed_transaction)
        txn = await self._client.wait_for_transaction(
            txn_hash, self.config.transaction_wait_in_seconds
        )
        if not txn.get("success"):
            if self.config.raise_on_failed_transaction:
                raise TransactionRejectedError(txn_hash, txn.get("vm_status"))
            logging.warning(
                f"transaction {txn_hash} failed with {txn.get('vm_status')}, ignoring"
            )
        return txn_hash

    #
    # Write path
    #

    async def create_collection(
        self,
        signer: Account,
        name: str,
        description: str,
        uri: str,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Create a collection with no maximum under the signer's account.

        Args:
            signer: The creator.
            name: Collection name, unique per creator.
            description: Free text stored with the collection.
            uri: Link to collection metadata.
            sequence_number: See :meth:`submit_transaction_helper`.

        Returns:
            str: Transaction hash of the creation.

        Raises:
            TransactionRejectedError: The creator already has a collection
                with this name.
        """
        payload = self._entry_function(
            "token",
            "create_unlimited_collection_script",
            [
                TransactionArgument(name, Encoder.str),
                TransactionArgument(description, Encoder.str),
                TransactionArgument(uri, Encoder.str),
            ],
        )
        return await self.submit_transaction_helper(signer, payload, sequence_number)

    async def create_token(
        self,
        signer: Account,
        collection_name: str,
        name: str,
        description: str,
        supply: int,
        uri: str,
        royalty_points_per_million: int,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Mint ``supply`` units of a new token into the creator's TokenStore.

        Supply tracking is always enabled for tokens created here.

        Args:
            signer: The creator; must own ``collection_name``.
            collection_name: Existing collection of the signer.
            name: Token name, unique within the collection.
            description: Free text stored with the token data.
            supply: Units minted. Must be a non-negative int.
            uri: Link to token metadata, e.g. an image.
            royalty_points_per_million: Creator royalty, between 0 and
                1,000,000 inclusive.
            sequence_number: See :meth:`submit_transaction_helper`.

        Returns:
            str: Transaction hash of the mint.

        Raises:
            ValueError: ``supply`` or ``royalty_points_per_million`` is out of
                range. Nothing is submitted.
            TransactionRejectedError: The collection does not exist or the
                token name is taken.
        """
        _check_u64("supply", supply)
        _check_u64("royalty_points_per_million", royalty_points_per_million)
        if royalty_points_per_million > MAX_ROYALTY_POINTS:
            raise ValueError(
                f"royalty_points_per_million must be at most {MAX_ROYALTY_POINTS}, "
                f"got {royalty_points_per_million}"
            )

        payload = self._entry_function(
            "token",
            "create_unlimited_token_script",
            [
                TransactionArgument(collection_name, Encoder.str),
                TransactionArgument(name, Encoder.str),
                TransactionArgument(description, Encoder.str),
                TransactionArgument(True, Encoder.bool),
                TransactionArgument(supply, Encoder.u64),
                TransactionArgument(uri, Encoder.str),
                TransactionArgument(royalty_points_per_million, Encoder.u64),
            ],
        )
        return await self.submit_transaction_helper(signer, payload, sequence_number)

    async def offer_token(
        self,
        signer: Account,
        receiver: AccountAddress,
        creator: AccountAddress,
        collection_name: str,
        name: str,
        amount: int,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Move ``amount`` units out of the signer's TokenStore into an offer
        that ``receiver`` can claim.

        Repeated offers of the same token to the same receiver accumulate.

        Raises:
            ValueError: ``amount`` is negative or not an int.
            TransactionRejectedError: The signer holds fewer than ``amount``.
        """
        _check_u64("amount", amount)
        payload = self._entry_function(
            "token_transfers",
            "offer_script",
            [
                TransactionArgument(receiver, Encoder.address),
                TransactionArgument(creator, Encoder.address),
                TransactionArgument(collection_name, Encoder.str),
                TransactionArgument(name, Encoder.str),
                TransactionArgument(amount, Encoder.u64),
            ],
        )
        return await self.submit_transaction_helper(signer, payload, sequence_number)

    async def claim_token(
        self,
        signer: Account,
        sender: AccountAddress,
        creator: AccountAddress,
        collection_name: str,
        name: str,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Claim everything ``sender`` offered the signer for this token.

        Raises:
            TransactionRejectedError: No such offer is pending.
        """
        payload = self._entry_function(
            "token_transfers",
            "claim_script",
            [
                TransactionArgument(sender, Encoder.address),
                TransactionArgument(creator, Encoder.address),
                TransactionArgument(collection_name, Encoder.str),
                TransactionArgument(name, Encoder.str),
            ],
        )
        return await self.submit_transaction_helper(signer, payload, sequence_number)

    async def cancel_token_offer(
        self,
        signer: Account,
        receiver: AccountAddress,
        creator: AccountAddress,
        collection_name: str,
        name: str,
        sequence_number: Optional[int] = None,
    ) -> str:
        """Withdraw a pending offer to ``receiver``; the amount returns to the signer."""
        payload = self._entry_function(
            "token_transfers",
            "cancel_offer_script",
            [
                TransactionArgument(receiver, Encoder.address),
                TransactionArgument(creator, Encoder.address),
                TransactionArgument(collection_name, Encoder.str),
                TransactionArgument(name, Encoder.str),
            ],
        )
        return await self.submit_transaction_helper(signer, payload, sequence_number)

    #
    # Read path
    #

    async def get_collection_data(
        self, creator: AccountAddress, collection_name: str
    ) -> CollectionData:
        """Read a collection record.

        Scans the creator's resource listing for the ``Collections`` resource
        and looks ``collection_name`` up in its ``collections`` table.

        Raises:
            ResourceNotFoundError: The creator has never created a collection
                (``AccountNotFound`` if the account itself is unknown).
            KeyNotFoundError: The creator has no collection of that name.
        """
        collections_type = self._type("token", "Collections")
        collections_tag = StructTag.from_str(collections_type)
        resources = await self._client.account_resources(creator)
        for resource in resources:
            # Types StructTag cannot represent, such as Vault<u64>, are never Collections.
            try:
                tag = StructTag.parse(resource["type"])
            except (KeyError, TypeError, ValueError):
                continue
            if tag == collections_tag:
                collections = CollectionsResource.parse(resource)
                break
        else:
            raise ResourceNotFoundError(
                f"{collections_type} - {creator}", collections_type
            )

        item = await self._client.get_table_item(
            collections.collections_handle,
            "0x1::string::String",
            self._type("token", "Collection"),
            collection_name,
        )
        return CollectionData.parse(item)

    async def get_token_data(
        self, creator: AccountAddress, collection_name: str, token_name: str
    ) -> TokenData:
        """Read the shared metadata of a token.

        Raises:
            ResourceNotFoundError: The creator has never created a collection.
            KeyNotFoundError: No such token, including when the collection
                itself does not exist.
        """
        resource = await self._client.account_resource(
            creator, self._type("token", "Collections")
        )
        collections = CollectionsResource.parse(resource)
        token_id = self.token_id(creator, collection_name, token_name)
        item = await self._client.get_table_item(
            collections.token_data_handle,
            self._type("token", "TokenId"),
            self._type("token", "TokenData"),
            token_id.to_dict(),
        )
        return TokenData.parse(item)

    async def get_token_balance_for_account(
        self, account: AccountAddress, token_id: TokenId
    ) -> Token:
        """Read the signer-side record of a token held by ``account``.

        Raises:
            ResourceNotFoundError: ``account`` has never held any token.
            KeyNotFoundError: ``account`` has never held this token. An account
                that held it and gave it away still has a record with value 0.
        """
        resource = await self._client.account_resource(
            account, self._type("token", "TokenStore")
        )
        store = TokenStoreResource.parse(resource)
        item = await self._client.get_table_item(
            store.tokens_handle,
            self._type("token", "TokenId"),
            self._type("token", "Token"),
            token_id.to_dict(),
        )
        return Token.parse(item)

    async def get_token_balance(self, account: AccountAddress, token_id: TokenId) -> int:
        """Units of ``token_id`` held by ``account``, 0 if it never held any."""
        try:
            token = await self.get_token_balance_for_account(account, token_id)
        except (KeyNotFoundError, ResourceNotFoundError):
            return 0
        return token.value


class Test(unittest.IsolatedAsyncioTestCase):
    COLLECTION = "Alice's"
    TOKEN = "Alice's first token"

    async def asyncSetUp(self):
        self.ledger = LedgerEmulator()
        self.rest_client = RestClient(
            self.ledger.base_url,
            ClientConfig(transaction_poll_interval=0.01),
            transport=self.ledger.transport(),
        )
        self.faucet = FaucetClient(self.ledger.faucet_url, self.rest_client)
        self.token_client = TokenClient(self.rest_client)

        self.alice = Account.generate()
        self.bob = Account.generate()
        await self.faucet.fund_account(self.alice.address(), 10_000)
        await self.faucet.fund_account(self.bob.address(), 5_000)

    async def asyncTearDown(self):
        await self.rest_client.close()

    async def mint(self, supply: int = 1):
        await self.token_client.create_collection(
            self.alice, self.COLLECTION, "Alice's simple collection", "https://aptos.dev"
        )
        await self.token_client.create_token(
            self.alice,
            self.COLLECTION,
            self.TOKEN,
            "Alice's simple token",
            supply,
            "https://aptos.dev/img/nyan.jpeg",
            0,
        )
        return self.token_client.token_id(
            self.alice.address(), self.COLLECTION, self.TOKEN
        )

    async def test_offer_claim_cancel(self):
        alice = self.alice.address()
        bob = self.bob.address()
        token_id = await self.mint()

        collection = await self.token_client.get_collection_data(
            alice, self.COLLECTION
        )
        self.assertEqual(collection.description, "Alice's simple collection")
        self.assertEqual(collection.count, 1)
        token_data = await self.token_client.get_token_data(
            alice, self.COLLECTION, self.TOKEN
        )
        self.assertEqual(token_data.name, self.TOKEN)
        self.assertEqual(token_data.supply, 1)

        balance = await self.token_client.get_token_balance_for_account(alice, token_id)
        self.assertEqual(balance.value, 1)
        self.assertEqual(balance.id, token_id)

        await self.token_client.offer_token(
            self.alice, bob, alice, self.COLLECTION, self.TOKEN, 1
        )
        balance = await self.token_client.get_token_balance_for_account(alice, token_id)
        self.assertEqual(balance.value, 0)

        await self.token_client.cancel_token_offer(
            self.alice, bob, alice, self.COLLECTION, self.TOKEN
        )
        balance = await self.token_client.get_token_balance_for_account(alice, token_id)
        self.assertEqual(balance.value, 1)
        self.assertEqual(await self.token_client.get_token_balance(bob, token_id), 0)

        await self.token_client.offer_token(
            self.alice, bob, alice, self.COLLECTION, self.TOKEN, 1
        )
        balance = await self.token_client.get_token_balance_for_account(alice, token_id)
        self.assertEqual(balance.value, 0)

        await self.token_client.claim_token(
            self.bob, alice, alice, self.COLLECTION, self.TOKEN
        )
        balance = await self.token_client.get_token_balance_for_account(alice, token_id)
        self.assertEqual(balance.value, 0)
        balance = await self.token_client.get_token_balance_for_account(
            bob,
            TokenId(
                AccountAddress.from_str(str(alice)), self.COLLECTION, self.TOKEN
            ),
        )
        self.assertEqual(balance.value, 1)

        token_data = await self.token_client.get_token_data(
            alice, self.COLLECTION, self.TOKEN
        )
        self.assertEqual(token_data.supply, 1)

    async def test_partial_offer_conserves_units(self):
        alice = self.alice.address()
        bob = self.bob.address()
        token_id = await self.mint(supply=5)

        await self.token_client.offer_token(
            self.alice, bob, alice, self.COLLECTION, self.TOKEN, 2
        )
        await self.token_client.claim_token(
            self.bob, alice, alice, self.COLLECTION, self.TOKEN
        )
        self.assertEqual(await self.token_client.get_token_balance(alice, token_id), 3)
        self.assertEqual(await self.token_client.get_token_balance(bob, token_id), 2)

    async def test_collection_round_trip(self):
        description = "Ünïcode ☺ description\nwith newline"
        uri = "https://example.com/a?b=c&d=%20"
        await self.token_client.create_collection(
            self.alice, "Round trip", description, uri
        )
        collection = await self.token_client.get_collection_data(
            self.alice.address(), "Round trip"
        )
        self.assertEqual(collection.name, "Round trip")
        self.assertEqual(collection.description, description)
        self.assertEqual(collection.uri, uri)
        self.assertIsNone(collection.maximum)

    async def test_reads_are_stable(self):
        token_id = await self.mint()
        versions = len(self.ledger.transactions)
        first = await self.token_client.get_token_balance_for_account(
            self.alice.address(), token_id
        )
        second = await self.token_client.get_token_balance_for_account(
            self.alice.address(), token_id
        )
        self.assertEqual(first, second)
        self.assertEqual(len(self.ledger.transactions), versions)

    async def test_missing_records(self):
        await self.mint()
        with self.assertRaises(KeyNotFoundError):
            await self.token_client.get_token_data(
                self.alice.address(), "No such collection", self.TOKEN
            )
        with self.assertRaises(KeyNotFoundError):
            await self.token_client.get_collection_data(
                self.alice.address(), "No such collection"
            )
        with self.assertRaises(ResourceNotFoundError):
            await self.token_client.get_collection_data(
                self.bob.address(), self.COLLECTION
            )
        with self.assertRaises(ResourceNotFoundError):
            await self.token_client.get_token_data(
                self.bob.address(), self.COLLECTION, self.TOKEN
            )
        with self.assertRaises(AccountNotFound):
            await self.token_client.get_collection_data(
                Account.generate().address(), self.COLLECTION
            )

        token_id = self.token_client.token_id(
            self.alice.address(), self.COLLECTION, self.TOKEN
        )
        with self.assertRaises(ResourceNotFoundError):
            await self.token_client.get_token_balance_for_account(
                self.bob.address(), token_id
            )
        other = self.token_client.token_id(
            self.alice.address(), self.COLLECTION, "Another token"
        )
        with self.assertRaises(KeyNotFoundError):
            await self.token_client.get_token_balance_for_account(
                self.alice.address(), other
            )
        self.assertEqual(
            await self.token_client.get_token_balance(self.alice.address(), other), 0
        )

    async def test_rejected_transaction(self):
        token_id = await self.mint()
        alice = self.alice.address()
        with self.assertRaises(TransactionRejectedError) as cm:
            await self.token_client.claim_token(
                self.bob, alice, alice, self.COLLECTION, self.TOKEN
            )
        self.assertIn("ETOKEN_OFFER_NOT_EXIST", cm.exception.vm_status)

        lenient = TokenClient(
            self.rest_client, TokenClientConfig(raise_on_failed_transaction=False)
        )
        with self.assertLogs(level="WARNING"):
            txn_hash = await lenient.offer_token(
                self.alice, self.bob.address(), alice, self.COLLECTION, self.TOKEN, 2
            )
        txn = await self.rest_client.transaction_by_hash(txn_hash)
        self.assertFalse(txn["success"])
        self.assertEqual(await self.token_client.get_token_balance(alice, token_id), 1)

    async def test_confirmation_timeout(self):
        self.ledger.pending_polls = 1_000
        impatient = TokenClient(
            self.rest_client, TokenClientConfig(transaction_wait_in_seconds=0.03)
        )
        with self.assertRaises(ConfirmationTimeoutError) as cm:
            await impatient.create_collection(self.alice, "Slow", "", "")

        # The transaction still lands once the ledger catches up.
        self.ledger.pending_polls = 0
        txn = await self.rest_client.wait_for_transaction(cm.exception.txn_hash)
        self.assertTrue(txn["success"])

    async def test_pinned_sequence_number(self):
        await self.token_client.create_collection(
            self.alice, "Once", "", "", sequence_number=0
        )
        with self.assertRaises(SubmissionError):
            await self.token_client.create_collection(
                self.alice, "Once", "", "", sequence_number=0
            )
        collection = await self.token_client.get_collection_data(
            self.alice.address(), "Once"
        )
        self.assertEqual(collection.count, 0)

    async def test_sequence_number_unreadable(self):
        def refuse_accounts(status_code: Optional[int]):
            def handler(request: httpx.Request) -> httpx.Response:
                if request.method == "GET" and re.fullmatch(
                    r"/v1/accounts/[^/]+", request.url.path
                ):
                    if status_code is None:
                        raise httpx.ConnectError("connection refused", request=request)
                    return httpx.Response(status_code, json={"message": "down"})
                return self.ledger.handler(request)

            return handler

        submitted = len(self.ledger.transactions)
        for status_code in (None, 500):
            rest_client = RestClient(
                self.ledger.base_url,
                ClientConfig(transaction_poll_interval=0.01),
                transport=httpx.MockTransport(refuse_accounts(status_code)),
            )
            with self.assertRaises(SubmissionError):
                await TokenClient(rest_client).create_collection(
                    self.alice, "Unreachable", "", ""
                )
            await rest_client.close()
        self.assertEqual(len(self.ledger.transactions), submitted)

    async def test_collection_beside_unrelated_resources(self):
        resources = self.ledger.accounts[str(self.alice.address())]["resources"]
        resources["0xcafe::vault::Vault<u64>"] = {"x": "1"}
        resources["0xcafe::blob::Blob<vector<u8>>"] = {"bytes": "0x00"}
        await self.mint()
        collection = await self.token_client.get_collection_data(
            self.alice.address(), self.COLLECTION
        )
        self.assertEqual(collection.count, 1)

        resources = self.ledger.accounts[str(self.bob.address())]["resources"]
        resources["0xcafe::vault::Vault<u64>"] = {"x": "1"}
        with self.assertRaises(ResourceNotFoundError):
            await self.token_client.get_collection_data(
                self.bob.address(), self.COLLECTION
            )

        resources[self.ledger.collections_type] = {"collections": {"handle": 7}}
        with self.assertRaises(TypeMismatchError):
            await self.token_client.get_collection_data(
                self.bob.address(), self.COLLECTION
            )

    async def test_default_configs_are_independent(self):
        first = TokenClient(self.rest_client)
        second = TokenClient(self.rest_client)
        first.config.raise_on_failed_transaction = False
        self.assertTrue(second.config.raise_on_failed_transaction)
        (one, two) = (RestClient(self.ledger.base_url), RestClient(self.ledger.base_url))
        self.assertIsNot(one.client_config, two.client_config)
        await one.close()
        await two.close()

    async def test_validation(self):
        submitted = len(self.ledger.transactions)
        alice = self.alice.address()
        with self.assertRaises(ValueError):
            await self.token_client.create_token(
                self.alice, self.COLLECTION, self.TOKEN, "", 1, "", 1_000_001
            )
        with self.assertRaises(ValueError):
            await self.token_client.create_token(
                self.alice, self.COLLECTION, self.TOKEN, "", -1, "", 0
            )
        with self.assertRaises(ValueError):
            await self.token_client.offer_token(
                self.alice, self.bob.address(), alice, self.COLLECTION, self.TOKEN, -1
            )
        self.assertEqual(len(self.ledger.transactions), submitted)

    async def test_custom_module_address(self):
        ledger = LedgerEmulator(module_address="0x3")
        rest_client = RestClient(
            ledger.base_url,
            ClientConfig(transaction_poll_interval=0.01),
            transport=ledger.transport(),
        )
        token_client = TokenClient(rest_client, TokenClientConfig(module_address="0x3"))
        await token_client.create_collection(self.alice, "Threes", "third", "")
        collection = await token_client.get_collection_data(
            self.alice.address(), "Threes"
        )
        self.assertEqual(collection.description, "third")

        mismatched = TokenClient(rest_client)
        with self.assertRaises(SubmissionError):
            await mismatched.create_collection(self.alice, "Ones", "", "")
        await rest_client.close()


if __name__ == "__main__":
    unittest.main()
