"""
Wallet signing capability.

The server never holds user keys. A signer hands the unsigned transaction to
whatever holds them (browser wallet bridge, test double) and gets back the
serialized transaction bytes plus signatures ready for execution.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx

from betting.exceptions import SigningError
from betting.transaction import TransactionBlock

logger = logging.getLogger(__name__)


@dataclass
class SignedTransaction:
    tx_bytes: str  # base64 BCS TransactionData
    signatures: List[str] = field(default_factory=list)


class WalletSigner(Protocol):
    async def sign_transaction(self, transaction: TransactionBlock) -> SignedTransaction:
        ...


class HttpWalletSigner:
    """Signer backed by a wallet bridge exposing `POST /sign`.

    The bridge answers `{"bytes": ..., "signature": ...}` once the user
    approves, or `{"error": ...}` (or a 4xx) when they reject.
    """

    def __init__(self, bridge_url: str, timeout: float = 120.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.bridge_url = bridge_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def sign_transaction(self, transaction: TransactionBlock) -> SignedTransaction:
        payload = {"transaction": transaction.to_dict()}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.bridge_url}/sign", json=payload)
                response.raise_for_status()
                data: Dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise SigningError(f"Wallet rejected the transaction ({e.response.status_code})") from e
        except httpx.HTTPError as e:
            raise SigningError(f"Wallet bridge unreachable: {e}") from e

        if data.get("error"):
            raise SigningError(f"Wallet rejected the transaction: {data['error']}")

        tx_bytes = data.get("bytes") or data.get("transactionBlockBytes")
        signature = data.get("signature")
        if not tx_bytes or not signature:
            raise SigningError("Wallet returned no signed transaction")

        signatures = signature if isinstance(signature, list) else [signature]
        logger.debug(f"Transaction signed by wallet for sender {transaction.sender}")
        return SignedTransaction(tx_bytes=tx_bytes, signatures=signatures)
