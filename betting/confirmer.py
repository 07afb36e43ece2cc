"""
Transaction submission and confirmation.

Executes signed bet transactions and turns the node response into either a
`ConfirmedTransaction` (digest plus, when it can be found, the created Bet
object id) or a typed chain error.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from clients.sui import SuiRpcClient, SuiRpcError, SuiTimeoutError, SuiTransportError
from clients.wallet import SignedTransaction
from config.settings import ChainConfig
from config.system_constants import MOVE_ABORT_NAMES, MOVE_ABORT_REASONS
from .exceptions import (
    ConfirmationTimeoutError,
    OnChainExecutionError,
    StaleObjectError,
    SubmissionError,
    SubmissionOutcomeUnknownError,
)

logger = logging.getLogger(__name__)

STALE_OBJECT_MARKERS = (
    "ObjectVersionUnavailableForConsumption",
    "is not available for consumption",
    "ObjectNotFound",
    "object version",
    "equivocated",
    "locked by",
)

_ABORT_CODE_RE = re.compile(r"MoveAbort\(.*?,\s*(\d+)\)")


@dataclass
class ConfirmedTransaction:
    digest: str
    bet_object_id: Optional[str] = None
    checkpoint: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def linked(self) -> bool:
        return self.bet_object_id is not None


def is_stale_object_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker.lower() in lowered for marker in STALE_OBJECT_MARKERS)


def parse_abort_code(error: str) -> Optional[int]:
    """Move abort code from an effects error string, by number or by constant name."""
    match = _ABORT_CODE_RE.search(error)
    if match:
        return int(match.group(1))
    for name, code in MOVE_ABORT_NAMES.items():
        if name in error:
            return code
    return None


def find_bet_object_id(response: Dict[str, Any], bet_object_type: str) -> Optional[str]:
    """Id of the Bet object created by this transaction, if the response lists it."""
    for change in response.get("objectChanges") or []:
        if change.get("type") != "created":
            continue
        if change.get("objectType") == bet_object_type:
            return change.get("objectId")
    return None


class TransactionConfirmer:
    """Submits signed transactions and confirms their outcome."""

    def __init__(self, chain: ChainConfig, sui: SuiRpcClient,
                 timeout: float = 15.0, poll_interval: float = 1.0):
        self.chain = chain
        self.sui = sui
        self.timeout = timeout
        self.poll_interval = poll_interval

    async def submit(self, signed: SignedTransaction) -> Dict[str, Any]:
        """Execute the signed transaction; returns the raw node response."""
        try:
            return await self.sui.execute_transaction_block(signed.tx_bytes, signed.signatures)
        except SuiRpcError as e:
            if isinstance(e, SuiTransportError):
                raise SubmissionOutcomeUnknownError(
                    f"Lost contact with the node while submitting: {e}. The bet may have been placed; "
                    "check the explorer or run reconcile before placing it again."
                ) from e
            if is_stale_object_error(str(e)):
                raise StaleObjectError(
                    f"Coin object changed since the transaction was built: {e}. Rebuild and sign again."
                ) from e
            raise SubmissionError(f"Transaction submission failed: {e}") from e

    async def confirm(self, response: Dict[str, Any]) -> ConfirmedTransaction:
        """Classify an execution response and resolve the created Bet object id."""
        digest = (response or {}).get("digest")
        if not digest:
            raise SubmissionError("Transaction submitted but no confirmation digest was returned")

        self._raise_for_effects(response, digest)

        bet_object_id = find_bet_object_id(response, self.chain.bet_object_type)
        if bet_object_id:
            logger.info(f"✅ Bet object {bet_object_id} created in {digest}")
            return ConfirmedTransaction(digest, bet_object_id, response.get("checkpoint"), response)

        # Local execution responses can omit object changes; wait for the indexed copy.
        try:
            indexed = await self.sui.wait_for_transaction(digest, timeout=self.timeout,
                                                          poll_interval=self.poll_interval)
        except SuiTimeoutError as e:
            raise ConfirmationTimeoutError(
                f"Transaction {digest} not confirmed within {self.timeout:.0f}s; check it on the explorer",
                digest=digest,
            ) from e
        except SuiRpcError as e:
            logger.warning(f"Could not re-read {digest} to link the Bet object: {e}")
            return ConfirmedTransaction(digest, None, response.get("checkpoint"), response)

        self._raise_for_effects(indexed, digest)
        bet_object_id = find_bet_object_id(indexed, self.chain.bet_object_type)
        if bet_object_id is None:
            logger.warning(f"⚠️ Bet placed in {digest} but no Bet object found in its changes")
        return ConfirmedTransaction(digest, bet_object_id, indexed.get("checkpoint"), indexed)

    def _raise_for_effects(self, response: Dict[str, Any], digest: str) -> None:
        status = ((response.get("effects") or {}).get("status")) or {}
        if status.get("status") != "failure":
            return
        error = status.get("error") or "unknown execution error"
        if is_stale_object_error(error):
            raise StaleObjectError(f"Transaction {digest} used a stale object: {error}", digest=digest)
        code = parse_abort_code(error)
        reason = MOVE_ABORT_REASONS.get(code) if code is not None else None
        logger.warning(f"Transaction {digest} failed on-chain: {error}")
        raise OnChainExecutionError(error, digest=digest, abort_code=code, reason=reason)
