# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
An in-memory ledger that answers the node REST calls the token client makes.

It is served through ``httpx.MockTransport`` so :class:`RestClient` runs its
real request and classification code against it::

    ledger = LedgerEmulator()
    client = RestClient(ledger.base_url, transport=ledger.transport())

Transactions execute on submission. Signatures are checked against the sender
address, sequence numbers must match exactly, and the token and
token_transfers entry functions are interpreted with the same abort conditions
as the on-chain modules. Failed executions still commit and consume the
sequence number, with ``success`` false and an abort in ``vm_status``.

Setting :attr:`LedgerEmulator.pending_polls` makes status queries report a
transaction as pending that many times before it becomes visible.
"""

import hashlib
import json
import re
import unittest
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .account_address import AccountAddress, ParseAddressError
from .ed25519 import PublicKey, Signature

SEQUENCE_NUMBER_TOO_OLD = "SEQUENCE_NUMBER_TOO_OLD"
SEQUENCE_NUMBER_TOO_NEW = "SEQUENCE_NUMBER_TOO_NEW"


class MoveAbort(Exception):
    """Execution aborted; committed with ``success`` false."""


class InvalidRequest(Exception):
    """Rejected before execution, surfaced as HTTP 400."""


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _address(value: Any) -> str:
    try:
        return str(AccountAddress.from_str_relaxed(value))
    except (ParseAddressError, TypeError) as e:
        raise InvalidRequest(f"invalid address argument: {value!r}") from e


def _utf8(value: Any) -> str:
    try:
        return bytes.fromhex(value).decode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidRequest(f"invalid string argument: {value!r}") from e


def _u64(value: Any) -> int:
    if not isinstance(value, str) or not value.isdigit():
        raise InvalidRequest(f"invalid u64 argument: {value!r}")
    return int(value)


class LedgerEmulator:
    base_url: str
    faucet_url: str
    module_address: str
    pending_polls: int

    def __init__(
        self,
        base_url: str = "http://ledger.test/v1",
        faucet_url: str = "http://faucet.test",
        module_address: str = "0x1",
        chain_id: int = 4,
    ):
        self.base_url = base_url
        self.faucet_url = faucet_url
        self.module_address = _address(module_address)
        self.chain_id = chain_id
        self.pending_polls = 0
        self.version = 0

        self.accounts: Dict[str, Dict[str, Any]] = {}
        # handle -> (key_type, value_type, items keyed by canonical JSON)
        self.tables: Dict[str, Tuple[str, str, Dict[str, Any]]] = {}
        # (sender, receiver, token id key) -> amount
        self.offers: Dict[Tuple[str, str, str], int] = {}
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.polls: Dict[str, int] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    #
    # Type names
    #

    def type_name(self, module: str, name: str) -> str:
        return f"{self.module_address}::{module}::{name}"

    @property
    def collections_type(self) -> str:
        return self.type_name("token", "Collections")

    @property
    def token_store_type(self) -> str:
        return self.type_name("token", "TokenStore")

    #
    # State
    #

    def create_account(self, address: str) -> Dict[str, Any]:
        if address not in self.accounts:
            self.accounts[address] = {
                "sequence_number": 0,
                "resources": {
                    "0x1::account::Account": {"sequence_number": "0"},
                },
            }
        return self.accounts[address]

    def create_table(self, key_type: str, value_type: str) -> str:
        handle = f"0x{len(self.tables) + 1:x}"
        self.tables[handle] = (key_type, value_type, {})
        return handle

    def resource(self, address: str, resource_type: str) -> Optional[Dict[str, Any]]:
        account = self.accounts.get(address)
        if account is None:
            return None
        return account["resources"].get(resource_type)

    def collections(self, address: str) -> Dict[str, Any]:
        account = self.create_account(address)
        resource = account["resources"].get(self.collections_type)
        if resource is None:
            token_id = self.type_name("token", "TokenId")
            resource = {
                "collections": {
                    "handle": self.create_table(
                        "0x1::string::String", self.type_name("token", "Collection")
                    )
                },
                "token_data": {
                    "handle": self.create_table(
                        token_id, self.type_name("token", "TokenData")
                    )
                },
            }
            account["resources"][self.collections_type] = resource
        return resource

    def token_store(self, address: str) -> Dict[str, Any]:
        account = self.create_account(address)
        resource = account["resources"].get(self.token_store_type)
        if resource is None:
            resource = {
                "tokens": {
                    "handle": self.create_table(
                        self.type_name("token", "TokenId"),
                        self.type_name("token", "Token"),
                    )
                }
            }
            account["resources"][self.token_store_type] = resource
        return resource

    def table_items(self, handle: str) -> Dict[str, Any]:
        return self.tables[handle][2]

    def deposit(self, address: str, token_id: Dict[str, str], amount: int):
        items = self.table_items(self.token_store(address)["tokens"]["handle"])
        key = _canonical(token_id)
        token = items.setdefault(key, {"id": dict(token_id), "value": "0"})
        token["value"] = str(int(token["value"]) + amount)

    def withdraw(self, address: str, token_id: Dict[str, str], amount: int):
        store = self.resource(address, self.token_store_type)
        items = self.table_items(store["tokens"]["handle"]) if store else {}
        token = items.get(_canonical(token_id))
        if token is None or int(token["value"]) < amount:
            raise MoveAbort("EINSUFFICIENT_BALANCE")
        token["value"] = str(int(token["value"]) - amount)

    #
    # Entry functions
    #

    def execute(self, sender: str, function: str, args: List[Any]):
        if function == "token::create_unlimited_collection_script":
            self.create_collection(sender, *args)
        elif function == "token::create_unlimited_token_script":
            self.create_token(sender, *args)
        elif function == "token_transfers::offer_script":
            self.offer(sender, *args)
        elif function == "token_transfers::claim_script":
            self.claim(sender, *args)
        elif function == "token_transfers::cancel_offer_script":
            self.cancel_offer(sender, *args)
        else:
            raise InvalidRequest(f"function not found: {function}")

    def create_collection(self, sender: str, name: str, description: str, uri: str):
        items = self.table_items(self.collections(sender)["collections"]["handle"])
        key = _canonical(name)
        if key in items:
            raise MoveAbort("ECOLLECTION_ALREADY_EXISTS")
        items[key] = {
            "name": name,
            "description": description,
            "uri": uri,
            "count": "0",
            "maximum": {"vec": []},
        }

    def create_token(
        self,
        sender: str,
        collection: str,
        name: str,
        description: str,
        monitor_supply: bool,
        supply: int,
        uri: str,
        royalty_points_per_million: int,
    ):
        resource = self.resource(sender, self.collections_type)
        if resource is None:
            raise MoveAbort("ECOLLECTIONS_NOT_PUBLISHED")
        collections = self.table_items(resource["collections"]["handle"])
        if _canonical(collection) not in collections:
            raise MoveAbort("ECOLLECTION_NOT_PUBLISHED")
        token_id = {"creator": sender, "collection": collection, "name": name}
        token_data = self.table_items(resource["token_data"]["handle"])
        key = _canonical(token_id)
        if key in token_data:
            raise MoveAbort("ETOKEN_ALREADY_EXISTS")

        record = collections[_canonical(collection)]
        record["count"] = str(int(record["count"]) + 1)
        token_data[key] = {
            "collection": collection,
            "name": name,
            "description": description,
            "uri": uri,
            "supply": {"vec": [str(supply)] if monitor_supply else []},
            "maximum": {"vec": []},
            "royalty": {"royalty_points_per_million": str(royalty_points_per_million)},
        }
        if supply > 0:
            self.deposit(sender, token_id, supply)

    def offer(
        self,
        sender: str,
        receiver: str,
        creator: str,
        collection: str,
        name: str,
        amount: int,
    ):
        token_id = {"creator": creator, "collection": collection, "name": name}
        self.withdraw(sender, token_id, amount)
        key = (sender, receiver, _canonical(token_id))
        self.offers[key] = self.offers.get(key, 0) + amount

    def claim(self, receiver: str, sender: str, creator: str, collection: str, name: str):
        token_id = {"creator": creator, "collection": collection, "name": name}
        amount = self.offers.pop((sender, receiver, _canonical(token_id)), None)
        if amount is None:
            raise MoveAbort("ETOKEN_OFFER_NOT_EXIST")
        self.deposit(receiver, token_id, amount)

    def cancel_offer(
        self, sender: str, receiver: str, creator: str, collection: str, name: str
    ):
        token_id = {"creator": creator, "collection": collection, "name": name}
        amount = self.offers.pop((sender, receiver, _canonical(token_id)), None)
        if amount is None:
            raise MoveAbort("ETOKEN_OFFER_NOT_EXIST")
        self.deposit(sender, token_id, amount)

    def decode_arguments(self, function: str, args: List[Any]) -> List[Any]:
        decoders = {
            "token::create_unlimited_collection_script": [_utf8, _utf8, _utf8],
            "token::create_unlimited_token_script": [
                _utf8,
                _utf8,
                _utf8,
                lambda v: v,
                _u64,
                _utf8,
                _u64,
            ],
            "token_transfers::offer_script": [
                _address,
                _address,
                _utf8,
                _utf8,
                _u64,
            ],
            "token_transfers::claim_script": [_address, _address, _utf8, _utf8],
            "token_transfers::cancel_offer_script": [_address, _address, _utf8, _utf8],
        }
        if function not in decoders:
            raise InvalidRequest(f"function not found: {function}")
        if len(args) != len(decoders[function]):
            raise InvalidRequest(f"wrong number of arguments for {function}")
        return [decode(arg) for decode, arg in zip(decoders[function], args)]

    #
    # Transactions
    #

    def signing_message(self, request: Dict[str, Any]) -> bytes:
        unsigned = {k: v for k, v in request.items() if k != "signature"}
        return hashlib.sha3_256(
            b"APTOS::RawTransaction" + _canonical(unsigned).encode()
        ).digest()

    def commit(self, request: Dict[str, Any], success: bool, vm_status: str) -> str:
        txn_hash = "0x" + hashlib.sha3_256(_canonical(request).encode()).hexdigest()
        self.version += 1
        self.transactions[txn_hash] = {
            **request,
            "type": "user_transaction",
            "hash": txn_hash,
            "version": str(self.version),
            "success": success,
            "vm_status": vm_status,
        }
        return txn_hash

    def submit(self, request: Dict[str, Any]) -> str:
        try:
            sender = _address(request["sender"])
            signature = request["signature"]
            public_key = PublicKey.from_str(signature["public_key"])
            valid = public_key.verify(
                self.signing_message(request), Signature.from_str(signature["signature"])
            )
            payload = request["payload"]
            module = payload["function"]["module"]
            sequence_number = _u64(request["sequence_number"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidRequest(f"malformed transaction: {e}") from e

        if not valid or str(AccountAddress.from_key(public_key)) != sender:
            raise InvalidRequest("INVALID_SIGNATURE")
        if payload.get("type") != "script_function_payload":
            raise InvalidRequest(f"unsupported payload type: {payload.get('type')}")
        if _address(module["address"]) != self.module_address:
            raise InvalidRequest(f"module not published: {module['address']}")

        account = self.accounts.get(sender)
        expected = account["sequence_number"] if account else 0
        if sequence_number < expected:
            raise InvalidRequest(SEQUENCE_NUMBER_TOO_OLD)
        if sequence_number > expected:
            raise InvalidRequest(SEQUENCE_NUMBER_TOO_NEW)

        function = f"{module['name']}::{payload['function']['name']}"
        args = self.decode_arguments(function, payload["arguments"])

        account = self.create_account(sender)
        account["sequence_number"] += 1
        account["resources"]["0x1::account::Account"]["sequence_number"] = str(
            account["sequence_number"]
        )
        try:
            self.execute(sender, function, args)
        except MoveAbort as e:
            return self.commit(request, False, f"Move abort: {e}")
        return self.commit(request, True, "Executed successfully")

    def mint(self, address: str) -> str:
        self.create_account(address)
        request = {
            "sender": "0x1",
            "sequence_number": str(self.version),
            "payload": {"type": "mint", "address": address},
        }
        return self.commit(request, True, "Executed successfully")

    #
    # HTTP
    #

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url.copy_with(query=None))
        if url.startswith(self.faucet_url) and request.url.path.endswith("/mint"):
            address = _address(request.url.params["address"])
            return httpx.Response(200, json=[self.mint(address)])
        if not url.startswith(self.base_url):
            return self.error(404, "web_framework_error", f"no route for {url}")
        path = url[len(self.base_url) :].strip("/")
        body = json.loads(request.content) if request.content else None
        try:
            return self.route(request.method, path, body)
        except InvalidRequest as e:
            return self.error(400, "invalid_input", str(e))

    def route(self, method: str, path: str, body: Any) -> httpx.Response:
        if method == "GET" and path == "":
            return httpx.Response(
                200,
                json={"chain_id": self.chain_id, "ledger_version": str(self.version)},
            )

        match = re.fullmatch(r"accounts/([^/]+)", path)
        if method == "GET" and match:
            account = self.accounts.get(_address(match.group(1)))
            if account is None:
                return self.error(404, "account_not_found", match.group(1))
            return httpx.Response(
                200,
                json={
                    "sequence_number": str(account["sequence_number"]),
                    "authentication_key": _address(match.group(1)),
                },
            )

        match = re.fullmatch(r"accounts/([^/]+)/resources", path)
        if method == "GET" and match:
            account = self.accounts.get(_address(match.group(1)))
            if account is None:
                return self.error(404, "account_not_found", match.group(1))
            return httpx.Response(
                200,
                json=[
                    {"type": resource_type, "data": data}
                    for resource_type, data in account["resources"].items()
                ],
            )

        match = re.fullmatch(r"accounts/([^/]+)/resource/(.+)", path)
        if method == "GET" and match:
            resource_type = match.group(2)
            data = self.resource(_address(match.group(1)), resource_type)
            if data is None:
                return self.error(404, "resource_not_found", resource_type)
            return httpx.Response(200, json={"type": resource_type, "data": data})

        match = re.fullmatch(r"tables/([^/]+)/item", path)
        if method == "POST" and match:
            return self.table_item(match.group(1), body)

        if method == "POST" and path == "transactions/signing_message":
            return httpx.Response(
                200, json={"message": "0x" + self.signing_message(body).hex()}
            )

        if method == "POST" and path == "transactions":
            txn_hash = self.submit(body)
            return httpx.Response(
                202, json={**body, "hash": txn_hash, "type": "pending_transaction"}
            )

        match = re.fullmatch(r"transactions/by_hash/([^/]+)", path)
        if method == "GET" and match:
            return self.transaction_status(match.group(1))

        return self.error(404, "web_framework_error", f"no route for {method} {path}")

    def table_item(self, handle: str, body: Dict[str, Any]) -> httpx.Response:
        if handle not in self.tables:
            return self.error(404, "table_item_not_found", handle)
        key_type, value_type, items = self.tables[handle]
        if body["key_type"] != key_type or body["value_type"] != value_type:
            raise InvalidRequest(
                f"table {handle} holds {key_type} -> {value_type}, "
                f"not {body['key_type']} -> {body['value_type']}"
            )
        key = body["key"]
        if key_type == "0x1::string::String":
            if not isinstance(key, str):
                raise InvalidRequest(f"failed to parse key {key!r} as {key_type}")
        else:
            if not isinstance(key, dict) or set(key) != {
                "creator",
                "collection",
                "name",
            }:
                raise InvalidRequest(f"failed to parse key {key!r} as {key_type}")
            key = {**key, "creator": _address(key["creator"])}
        item = items.get(_canonical(key))
        if item is None:
            return self.error(404, "table_item_not_found", f"{key}")
        return httpx.Response(200, json=item)

    def transaction_status(self, txn_hash: str) -> httpx.Response:
        txn = self.transactions.get(txn_hash)
        if txn is None:
            return self.error(404, "transaction_not_found", txn_hash)
        polls = self.polls.get(txn_hash, 0)
        self.polls[txn_hash] = polls + 1
        if polls < self.pending_polls:
            return httpx.Response(
                200, json={"type": "pending_transaction", "hash": txn_hash}
            )
        return httpx.Response(200, json=txn)

    def error(self, status_code: int, error_code: str, message: str) -> httpx.Response:
        return httpx.Response(
            status_code,
            json={"message": message, "error_code": error_code, "vm_error_code": None},
        )


class Test(unittest.TestCase):
    def test_routes(self):
        ledger = LedgerEmulator()
        ledger.mint("0x1")
        client = httpx.Client(transport=httpx.MockTransport(ledger.handler))

        response = client.get(f"{ledger.base_url}/accounts/0x1")
        self.assertEqual(response.json()["sequence_number"], "0")
        response = client.get(f"{ledger.base_url}/accounts/0x2/resources")
        self.assertEqual(response.status_code, 404)
        response = client.get(
            f"{ledger.base_url}/accounts/0x1/resource/0x1::token::TokenStore"
        )
        self.assertEqual(response.json()["error_code"], "resource_not_found")

    def test_table_types(self):
        ledger = LedgerEmulator()
        handle = ledger.collections("0x1")["collections"]["handle"]
        client = httpx.Client(transport=httpx.MockTransport(ledger.handler))
        body = {
            "key_type": "0x1::string::String",
            "value_type": "0x1::token::Collection",
            "key": "missing",
        }
        url = f"{ledger.base_url}/tables/{handle}/item"
        self.assertEqual(client.post(url, json=body).status_code, 404)
        body["value_type"] = "0x1::token::TokenData"
        self.assertEqual(client.post(url, json=body).status_code, 400)


if __name__ == "__main__":
    unittest.main()
