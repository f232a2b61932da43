# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Exceptions raised by the REST and token clients.

Everything derives from :class:`ApiError`, which carries the HTTP status code
of the response that triggered it (or ``None`` when no response was received).
The subclasses separate the failure kinds a caller has to treat differently:

- :class:`SubmissionError`: the transaction never reached the mempool. Safe
  to fix and resend.
- :class:`ConfirmationTimeoutError`: the transaction was broadcast but no
  outcome was observed in time. It may still commit later; check by hash before
  resending, otherwise the operation may happen twice.
- :class:`TransactionRejectedError`: the ledger executed the transaction and
  it aborted.
- :class:`ResourceNotFoundError` / :class:`AccountNotFound`: the account does
  not hold the aggregate resource a read needs.
- :class:`KeyNotFoundError`: the table exists but has no entry for the key,
  e.g. an account that never held a token.
- :class:`TypeMismatchError`: a type descriptor or record shape does not match
  what the ledger has registered. Indicates client/ledger version skew and is
  not worth retrying.

None of these are retried by the library.
"""

from typing import Optional

from .account_address import AccountAddress


class ApiError(Exception):
    """The API returned a non-success status code, e.g., >= 400"""

    status_code: Optional[int]

    def __init__(self, message: str, status_code: Optional[int] = None):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(ApiError):
    """Building, encoding or broadcasting a transaction failed."""


class ConfirmationTimeoutError(ApiError):
    """No final outcome was observed for ``txn_hash`` within the wait budget.

    The transaction is not rolled back and may still commit.
    """

    txn_hash: str
    waited_seconds: float

    def __init__(self, txn_hash: str, waited_seconds: float):
        super().__init__(
            f"transaction {txn_hash} not finalized after {waited_seconds:.2f}s; "
            "it may still commit, check by hash before resubmitting"
        )
        self.txn_hash = txn_hash
        self.waited_seconds = waited_seconds


class TransactionRejectedError(ApiError):
    """The ledger committed ``txn_hash`` with a failed execution status."""

    txn_hash: str
    vm_status: Optional[str]

    def __init__(self, txn_hash: str, vm_status: Optional[str]):
        super().__init__(f"transaction {txn_hash} failed: {vm_status}")
        self.txn_hash = txn_hash
        self.vm_status = vm_status


class ResourceNotFoundError(ApiError):
    """The underlying resource was not found"""

    resource: str

    def __init__(self, message: str, resource: str, status_code: Optional[int] = 404):
        super().__init__(message, status_code)
        self.resource = resource


class AccountNotFound(ResourceNotFoundError):
    """The account was not found"""

    account: AccountAddress

    def __init__(self, message: str, account: AccountAddress):
        super().__init__(message, str(account))
        self.account = account


class KeyNotFoundError(ApiError):
    """The table was found but holds no item for ``key``."""

    handle: str
    key: object

    def __init__(self, message: str, handle: str, key: object):
        super().__init__(message, 404)
        self.handle = handle
        self.key = key


class TypeMismatchError(ApiError):
    """A type descriptor or record did not match the ledger's registered type."""
