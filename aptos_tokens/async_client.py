# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Asynchronous REST client for an Aptos node.

:class:`RestClient` is the transport the token client is built on. It covers the
two services the token protocol needs:

- **Transaction submission**: :meth:`RestClient.create_transaction`,
  :meth:`RestClient.sign_transaction`, :meth:`RestClient.submit_transaction`
  and :meth:`RestClient.wait_for_transaction`.
- **Table queries**: :meth:`RestClient.account_resource`,
  :meth:`RestClient.account_resources` and :meth:`RestClient.get_table_item`.

Responses are classified into the exceptions of :mod:`aptos_tokens.errors`;
nothing is retried.

Examples:
    Submit a payload and wait for it::

        client = RestClient("http://localhost:8080/v1")
        raw = await client.create_transaction(alice, payload)
        signed = await client.sign_transaction(alice, raw)
        txn_hash = await client.submit_transaction(signed)
        txn = await client.wait_for_transaction(txn_hash)
        assert txn["success"]
        await client.close()

    Fund a fresh account on a test network::

        faucet = FaucetClient("http://localhost:8081", client)
        await faucet.fund_account(alice.address(), 100_000_000)
"""

import asyncio
import json
import logging
import time
import unittest
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

from .account import Account
from .account_address import AccountAddress
from .ed25519 import Signature
from .errors import (
    AccountNotFound,
    ApiError,
    ConfirmationTimeoutError,
    KeyNotFoundError,
    ResourceNotFoundError,
    SubmissionError,
    TypeMismatchError,
)
from .metadata import Metadata
from .transactions import (
    EntryFunction,
    RawTransaction,
    SignedTransaction,
    TransactionPayload,
)


@dataclass
class ClientConfig:
    """Common configuration for clients, particularly for submitting transactions.

    ``transaction_wait_in_seconds`` bounds :meth:`RestClient.wait_for_transaction`
    and ``transaction_poll_interval`` is the delay between status checks.
    """

    expiration_ttl: int = 600
    gas_unit_price: int = 100
    max_gas_amount: int = 100_000
    transaction_wait_in_seconds: float = 20
    transaction_poll_interval: float = 1.0
    http2: bool = True
    api_key: Optional[str] = None


class RestClient:
    """A wrapper around the node's REST API."""

    _chain_id: Optional[int]
    client: httpx.AsyncClient
    client_config: ClientConfig
    base_url: str

    def __init__(
        self,
        base_url: str,
        client_config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        :param base_url: Node REST endpoint, e.g. ``http://localhost:8080/v1``.
        :param client_config: Gas, expiration and wait settings. Each client
            gets its own defaults when omitted.
        :param transport: Replaces the network transport, e.g. with an
            ``httpx.MockTransport`` serving an in-memory ledger.
        """
        self.base_url = base_url.rstrip("/")
        client_config = client_config if client_config is not None else ClientConfig()
        # Default limits
        limits = httpx.Limits()
        # Default timeouts but do not set a pool timeout, since the idea is that jobs will wait as
        # long as progress is being made.
        timeout = httpx.Timeout(60.0, pool=None)
        # Default headers
        headers = {Metadata.APTOS_HEADER: Metadata.get_aptos_header_val()}
        self.client = httpx.AsyncClient(
            http2=client_config.http2,
            limits=limits,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self.client_config = client_config
        self._chain_id = None
        if client_config.api_key:
            self.client.headers["Authorization"] = f"Bearer {client_config.api_key}"

    async def close(self):
        await self.client.aclose()

    async def info(self) -> Dict[str, str]:
        """Ledger information: chain id, ledger version and timestamp."""
        response = await self.client.get(self.base_url)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    async def chain_id(self) -> int:
        if not self._chain_id:
            info = await self.info()
            self._chain_id = int(info["chain_id"])
        return self._chain_id

    #
    # Account accessors
    #

    async def account(
        self, account_address: AccountAddress, ledger_version: Optional[int] = None
    ) -> Dict[str, str]:
        """
        Fetch the authentication key and the sequence number for an account address.

        :param account_address: Address of the account.
        :param ledger_version: Ledger version to get state of account. If not provided, it will be the latest version.
        :return: The authentication key and sequence number for the specified address.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}",
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise AccountNotFound(f"{account_address}", account_address)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def account_sequence_number(
        self, account_address: AccountAddress, ledger_version: Optional[int] = None
    ) -> int:
        """
        Fetch the current sequence number for an account address. Accounts the
        ledger has not seen yet start at 0.
        """
        try:
            account_res = await self.account(account_address, ledger_version)
            return int(account_res["sequence_number"])
        except AccountNotFound:
            return 0

    async def account_resource(
        self,
        account_address: AccountAddress,
        resource_type: str,
        ledger_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Retrieves an individual resource from a given account and at a specific ledger version.

        :param account_address: Address of the account.
        :param resource_type: Name of struct to retrieve e.g. 0x1::token::Collections.
        :param ledger_version: Ledger version to get state of account. If not provided, it will be the latest version.
        :raises ResourceNotFoundError: The account does not hold the resource.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}/resource/{resource_type}",
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise ResourceNotFoundError(
                f"{resource_type} - {account_address}", resource_type
            )
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def account_resources(
        self,
        account_address: AccountAddress,
        ledger_version: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Retrieves all account resources for a given account and a specific ledger version.

        :raises AccountNotFound: The ledger has no such account.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}/resources",
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise AccountNotFound(f"{account_address}", account_address)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def get_table_item(
        self,
        handle: str,
        key_type: str,
        value_type: str,
        key: Any,
        ledger_version: Optional[int] = None,
    ) -> Any:
        """
        Retrieve an item from a Move table by its key.

        :param handle: The table handle identifying the table
        :param key_type: The Move type of the key (e.g., "0x1::string::String")
        :param value_type: The Move type of the value (e.g., "0x1::token::Collection")
        :param key: The key value to look up, in its JSON form
        :param ledger_version: Ledger version to query. If not provided, uses the latest version
        :raises KeyNotFoundError: The table holds no item for ``key``.
        :raises TypeMismatchError: The node rejected the type descriptors or
            could not decode ``key`` as ``key_type``.
        """
        response = await self._post(
            endpoint=f"tables/{handle}/item",
            data={
                "key_type": key_type,
                "value_type": value_type,
                "key": key,
            },
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise KeyNotFoundError(f"{key} not in table {handle}", handle, key)
        if response.status_code == 400:
            raise TypeMismatchError(
                f"{response.text} - {key_type} -> {value_type}", response.status_code
            )
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    #
    # Transactions
    #

    async def create_transaction(
        self,
        sender: Account | AccountAddress,
        payload: TransactionPayload,
        sequence_number: Optional[int] = None,
        max_gas_amount: Optional[int] = None,
    ) -> RawTransaction:
        """
        Build an unsigned transaction request.

        :param sequence_number: Pin the sequence number instead of reading it
            from the ledger. A second transaction with the same pinned number
            is rejected by the ledger.
        :param max_gas_amount: Override ``ClientConfig.max_gas_amount``.
        :raises SubmissionError: The sender's sequence number could not be
            read. Nothing was broadcast.
        """
        if isinstance(sender, Account):
            sender_address = sender.address()
        else:
            sender_address = sender

        if sequence_number is None:
            try:
                sequence_number = await self.account_sequence_number(sender_address)
            except (httpx.HTTPError, ApiError) as e:
                raise SubmissionError(
                    f"sequence number of {sender_address}: {e}",
                    getattr(e, "status_code", None),
                ) from e
        return RawTransaction(
            sender_address,
            sequence_number,
            payload,
            max_gas_amount or self.client_config.max_gas_amount,
            self.client_config.gas_unit_price,
            int(time.time()) + self.client_config.expiration_ttl,
        )

    async def signing_message(self, transaction: RawTransaction) -> bytes:
        """Ask the node for the bytes ``transaction``'s sender has to sign."""
        response = await self._submission_post(
            "transactions/signing_message", transaction.to_dict()
        )
        message = response.json()["message"]
        return bytes.fromhex(message[2:] if message.startswith("0x") else message)

    async def sign_transaction(
        self, sender: Account, transaction: RawTransaction
    ) -> SignedTransaction:
        message = await self.signing_message(transaction)
        signature = sender.sign(message)
        return SignedTransaction(transaction, sender.public_key(), signature)

    async def submit_transaction(self, signed_transaction: SignedTransaction) -> str:
        """
        Broadcast a signed transaction and return its hash.

        :raises SubmissionError: The node refused the request or could not be
            reached. The transaction did not enter the mempool.
        """
        response = await self._submission_post(
            "transactions", signed_transaction.to_dict()
        )
        txn_hash = response.json()["hash"]
        logging.info(
            f"submitted {txn_hash} from {signed_transaction.transaction.sender} "
            f"seq {signed_transaction.transaction.sequence_number}"
        )
        return txn_hash

    async def create_and_submit(
        self,
        sender: Account,
        payload: TransactionPayload,
        sequence_number: Optional[int] = None,
        max_gas_amount: Optional[int] = None,
    ) -> str:
        """Build, sign and broadcast ``payload`` without waiting for it."""
        raw_transaction = await self.create_transaction(
            sender, payload, sequence_number, max_gas_amount
        )
        signed_transaction = await self.sign_transaction(sender, raw_transaction)
        return await self.submit_transaction(signed_transaction)

    async def _final_transaction(self, txn_hash: str) -> Optional[Dict[str, Any]]:
        response = await self._get(endpoint=f"transactions/by_hash/{txn_hash}")
        # An unknown hash is treated as not yet indexed.
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        txn = response.json()
        if txn["type"] == "pending_transaction":
            return None
        return txn

    async def wait_for_transaction(
        self, txn_hash: str, timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Poll until ``txn_hash`` leaves the pending state and return the
        committed transaction. Its ``success`` and ``vm_status`` fields carry
        the execution outcome; this method does not judge them.

        The deadline is wall-clock time and includes the status requests
        themselves; a request still outstanding at the deadline is abandoned.
        A status request that fails in transport counts as "still pending":
        the transaction has already been broadcast, so the failure says
        nothing about its outcome.

        :param timeout: Seconds to wait, defaults to
            ``ClientConfig.transaction_wait_in_seconds``.
        :raises ConfirmationTimeoutError: No outcome observed within
            ``timeout``. The transaction is not cancelled and may still commit.
        """
        timeout = (
            timeout
            if timeout is not None
            else self.client_config.transaction_wait_in_seconds
        )
        interval = self.client_config.transaction_poll_interval
        start = time.monotonic()
        deadline = start + timeout
        while True:
            # Every poll gets at least one interval, even past the deadline.
            budget = max(deadline - time.monotonic(), interval)
            try:
                txn = await asyncio.wait_for(self._final_transaction(txn_hash), budget)
            except (asyncio.TimeoutError, httpx.HTTPError) as e:
                logging.warning(f"status check of {txn_hash} failed: {e!r}")
                txn = None
            if txn is not None:
                logging.info(
                    f"transaction {txn_hash} committed: {txn.get('vm_status')} "
                    f"(success={txn.get('success')})"
                )
                return txn
            waited = time.monotonic() - start
            if waited >= timeout:
                logging.warning(f"transaction {txn_hash} timed out after {waited:.2f}s")
                raise ConfirmationTimeoutError(txn_hash, waited)
            await asyncio.sleep(min(interval, deadline - time.monotonic()))

    async def transaction_by_hash(self, txn_hash: str) -> Dict[str, Any]:
        response = await self._get(endpoint=f"transactions/by_hash/{txn_hash}")
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    async def _submission_post(
        self, endpoint: str, data: Dict[str, Any]
    ) -> httpx.Response:
        try:
            response = await self._post(endpoint=endpoint, data=data)
        except httpx.HTTPError as e:
            raise SubmissionError(f"{endpoint}: {e}") from e
        if response.status_code >= 400:
            raise SubmissionError(response.text, response.status_code)
        return response

    async def _post(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        return await self.client.post(
            url=f"{self.base_url}/{endpoint}",
            params=params,
            headers=headers,
            json=data,
        )

    async def _get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        return await self.client.get(
            url=f"{self.base_url}/{endpoint}",
            params=params,
        )


class FaucetClient:
    """Faucet creates and funds accounts. This is a thin wrapper around that."""

    base_url: str
    rest_client: RestClient
    headers: Dict[str, str]

    def __init__(
        self, base_url: str, rest_client: RestClient, auth_token: Optional[str] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.rest_client = rest_client
        self.headers = {}
        if auth_token:
            self.headers["Authorization"] = f"Bearer {auth_token}"

    async def close(self):
        await self.rest_client.close()

    async def fund_account(
        self, address: AccountAddress, amount: int, wait_for_transaction=True
    ) -> str:
        """This creates an account if it does not exist and mints the specified amount of
        coins into that account."""
        request = f"{self.base_url}/mint?amount={amount}&address={address}"
        response = await self.rest_client.client.post(request, headers=self.headers)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        txn_hash = response.json()[0]
        if wait_for_transaction:
            await self.rest_client.wait_for_transaction(txn_hash)
        return txn_hash

    async def healthy(self) -> bool:
        response = await self.rest_client.client.get(self.base_url)
        return "tap:ok" == response.text


class Test(unittest.IsolatedAsyncioTestCase):
    BASE_URL = "http://node.test/v1"

    def client(
        self, handler: Callable[[httpx.Request], httpx.Response], **config: Any
    ) -> RestClient:
        client_config = ClientConfig(transaction_poll_interval=0.01, **config)
        return RestClient(
            self.BASE_URL, client_config, transport=httpx.MockTransport(handler)
        )

    def payload(self) -> TransactionPayload:
        return TransactionPayload(EntryFunction.natural("0x1::token", "noop", [], []))

    async def test_headers(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"chain_id": 4})

        client = self.client(handler, api_key="secret")
        self.assertEqual(await client.chain_id(), 4)
        self.assertEqual(await client.chain_id(), 4)
        await client.close()

        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].headers["Authorization"], "Bearer secret")
        self.assertEqual(
            seen[0].headers[Metadata.APTOS_HEADER], Metadata.get_aptos_header_val()
        )

    async def test_table_item_classification(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body["key"] == "missing":
                return httpx.Response(404, json={"error_code": "table_item_not_found"})
            if body["key_type"] != "0x1::string::String":
                return httpx.Response(400, json={"error_code": "invalid_input"})
            return httpx.Response(200, json={"name": body["key"]})

        client = self.client(handler)
        item = await client.get_table_item(
            "0xab", "0x1::string::String", "0x1::token::Collection", "present"
        )
        self.assertEqual(item, {"name": "present"})
        with self.assertRaises(KeyNotFoundError) as cm:
            await client.get_table_item(
                "0xab", "0x1::string::String", "0x1::token::Collection", "missing"
            )
        self.assertEqual(cm.exception.handle, "0xab")
        with self.assertRaises(TypeMismatchError):
            await client.get_table_item(
                "0xab", "0x1::string::Strin", "0x1::token::Collection", "present"
            )
        await client.close()

    async def test_missing_resources(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error_code": "resource_not_found"})

        client = self.client(handler)
        address = AccountAddress.from_str("0x1")
        with self.assertRaises(ResourceNotFoundError) as cm:
            await client.account_resource(address, "0x1::token::TokenStore")
        self.assertEqual(cm.exception.resource, "0x1::token::TokenStore")
        with self.assertRaises(AccountNotFound):
            await client.account_resources(address)
        self.assertEqual(await client.account_sequence_number(address), 0)
        await client.close()

    async def test_submit(self):
        alice = Account.generate()
        submitted: List[Dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == "/v1/transactions/signing_message":
                return httpx.Response(200, json={"message": "0xcafe"})
            if path == "/v1/transactions":
                submitted.append(json.loads(request.content))
                return httpx.Response(202, json={"hash": "0x01"})
            return httpx.Response(404)

        client = self.client(handler, max_gas_amount=50)
        txn_hash = await client.create_and_submit(
            alice, self.payload(), sequence_number=3
        )
        await client.close()

        self.assertEqual(txn_hash, "0x01")
        request = submitted[0]
        self.assertEqual(request["sender"], str(alice.address()))
        self.assertEqual(request["sequence_number"], "3")
        self.assertEqual(request["max_gas_amount"], "50")
        self.assertEqual(request["signature"]["type"], "ed25519_signature")
        signature = Signature.from_str(request["signature"]["signature"])
        self.assertTrue(alice.public_key().verify(bytes.fromhex("cafe"), signature))

    async def test_submission_errors(self):
        def refused(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "invalid payload"})

        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        for handler in (refused, unreachable):
            client = self.client(handler)
            with self.assertRaises(SubmissionError):
                await client.create_and_submit(
                    Account.generate(), self.payload(), sequence_number=0
                )
            await client.close()

    async def test_wait_for_transaction(self):
        polls = []

        def handler(request: httpx.Request) -> httpx.Response:
            polls.append(request)
            if len(polls) == 1:
                return httpx.Response(404)
            if len(polls) == 2:
                return httpx.Response(200, json={"type": "pending_transaction"})
            return httpx.Response(
                200,
                json={
                    "type": "user_transaction",
                    "success": False,
                    "vm_status": "Move abort",
                },
            )

        client = self.client(handler)
        txn = await client.wait_for_transaction("0x02")
        await client.close()
        self.assertFalse(txn["success"])
        self.assertEqual(txn["vm_status"], "Move abort")

    async def test_wait_times_out(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"type": "pending_transaction"})

        client = self.client(handler)
        with self.assertRaises(ConfirmationTimeoutError) as cm:
            await client.wait_for_transaction("0x03", timeout=0.03)
        await client.close()
        self.assertEqual(cm.exception.txn_hash, "0x03")

    async def test_sequence_number_errors(self):
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        def unavailable(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"message": "unavailable"})

        for handler in (unreachable, unavailable):
            client = self.client(handler)
            with self.assertRaises(SubmissionError):
                await client.create_and_submit(Account.generate(), self.payload())
            await client.close()

        client = self.client(unavailable)
        with self.assertRaises(SubmissionError) as cm:
            await client.create_transaction(Account.generate(), self.payload())
        await client.close()
        self.assertEqual(cm.exception.status_code, 503)

    async def test_wait_survives_transport_errors(self):
        polls = []

        def handler(request: httpx.Request) -> httpx.Response:
            polls.append(request)
            if len(polls) == 1:
                raise httpx.ReadTimeout("read timed out", request=request)
            return httpx.Response(200, json={"type": "user_transaction", "success": True})

        client = self.client(handler)
        with self.assertLogs(level="WARNING"):
            txn = await client.wait_for_transaction("0x05")
        self.assertTrue(txn["success"])
        self.assertEqual(len(polls), 2)

        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        await client.close()
        client = self.client(unreachable)
        with self.assertRaises(ConfirmationTimeoutError):
            await client.wait_for_transaction("0x05", timeout=0.03)
        await client.close()

    async def test_wait_deadline_includes_requests(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"type": "user_transaction"})

        client = self.client(handler)
        start = time.monotonic()
        with self.assertRaises(ConfirmationTimeoutError) as cm:
            await client.wait_for_transaction("0x06", timeout=0.05)
        await client.close()
        self.assertLess(time.monotonic() - start, 1)
        self.assertGreaterEqual(cm.exception.waited_seconds, 0.05)

    async def test_fund_account(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/mint":
                self.assertEqual(request.url.params["amount"], "500")
                return httpx.Response(200, json=["0x04"])
            return httpx.Response(200, json={"type": "user_transaction"})

        client = self.client(handler)
        faucet = FaucetClient("http://faucet.test", client, auth_token="t")
        txn_hash = await faucet.fund_account(AccountAddress.from_str("0x1"), 500)
        await faucet.close()
        self.assertEqual(txn_hash, "0x04")


if __name__ == "__main__":
    unittest.main()
