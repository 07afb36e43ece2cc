"""
Sui JSON-RPC client.

Thin async wrapper over the fullnode JSON-RPC methods the bet lifecycle needs:
coin listing, transaction execution, transaction lookup (with polling) and
object reads.
"""
import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class SuiRpcError(Exception):
    """JSON-RPC error returned by the fullnode (or transport failure)."""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.method = method

    @property
    def is_not_found(self) -> bool:
        text = str(self).lower()
        return "could not find" in text or "not found" in text


class SuiTransportError(SuiRpcError):
    """The request may or may not have reached the fullnode."""


class SuiTimeoutError(SuiRpcError):
    """Transaction did not become visible before the wait bound."""

    def __init__(self, digest: str, timeout: float):
        super().__init__(f"Transaction {digest} not visible after {timeout:.1f}s")
        self.digest = digest
        self.timeout = timeout


@dataclass(frozen=True)
class CoinRef:
    """A coin object owned by the wallet."""
    object_id: str
    balance_mist: int
    coin_type: str
    version: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "CoinRef":
        return cls(
            object_id=data["coinObjectId"],
            balance_mist=int(data["balance"]),
            coin_type=data.get("coinType", ""),
            version=data.get("version"),
            digest=data.get("digest"),
        )


TX_RESPONSE_OPTIONS = {
    "showInput": False,
    "showEffects": True,
    "showEvents": False,
    "showObjectChanges": True,
    "showBalanceChanges": False,
}

OBJECT_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showPreviousTransaction": True,
    "showContent": True,
}


class SuiRpcClient:
    """Async client for a Sui fullnode."""

    def __init__(self, rpc_url: str, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        assert rpc_url, "rpc_url must not be empty"
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise SuiTransportError(f"{method} failed: {e}", method=method) from e

        if body.get("error"):
            error = body["error"]
            raise SuiRpcError(error.get("message", "unknown RPC error"), code=error.get("code"), method=method)
        return body.get("result")

    # Coins

    async def get_coins(self, owner: str, coin_type: Optional[str] = None,
                        cursor: Optional[str] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        """One page of `suix_getCoins`."""
        return await self._call("suix_getCoins", [owner, coin_type, cursor, limit])

    async def get_all_coins_of_type(self, owner: str, coin_type: str) -> List[CoinRef]:
        """Every coin object of `coin_type` owned by `owner`, following pagination."""
        coins: List[CoinRef] = []
        cursor = None
        while True:
            page = await self.get_coins(owner, coin_type, cursor)
            coins.extend(CoinRef.from_rpc(c) for c in page.get("data", []))
            if not page.get("hasNextPage"):
                break
            cursor = page.get("nextCursor")
        logger.debug(f"Found {len(coins)} {coin_type} coins for {owner}")
        return coins

    # Transactions

    async def execute_transaction_block(self, tx_bytes: str, signatures: List[str],
                                        options: Optional[Dict[str, bool]] = None,
                                        request_type: str = "WaitForLocalExecution") -> Dict[str, Any]:
        return await self._call(
            "sui_executeTransactionBlock",
            [tx_bytes, signatures, options or TX_RESPONSE_OPTIONS, request_type],
        )

    async def get_transaction_block(self, digest: str,
                                    options: Optional[Dict[str, bool]] = None) -> Dict[str, Any]:
        return await self._call("sui_getTransactionBlock", [digest, options or TX_RESPONSE_OPTIONS])

    async def wait_for_transaction(self, digest: str, timeout: float = 15.0, poll_interval: float = 1.0,
                                   options: Optional[Dict[str, bool]] = None) -> Dict[str, Any]:
        """Poll `sui_getTransactionBlock` until the digest is indexed.

        Raises:
            SuiTimeoutError: the transaction was still unknown after `timeout` seconds
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                return await self.get_transaction_block(digest, options)
            except SuiRpcError as e:
                if not e.is_not_found:
                    raise
            if loop.time() + poll_interval > deadline:
                raise SuiTimeoutError(digest, timeout)
            await asyncio.sleep(poll_interval)

    # Events

    async def query_events(self, query: Dict[str, Any], cursor: Optional[Dict[str, Any]] = None,
                           limit: Optional[int] = None, descending: bool = True) -> Dict[str, Any]:
        """One page of `suix_queryEvents` (e.g. `{"Sender": addr}` or `{"MoveEventType": t}`)."""
        return await self._call("suix_queryEvents", [query, cursor, limit, descending])

    async def get_all_events(self, query: Dict[str, Any],
                             max_pages: Optional[int] = None) -> List[Dict[str, Any]]:
        """Every page of events matching `query`, or the first `max_pages` pages when capped."""
        events: List[Dict[str, Any]] = []
        cursor = None
        pages = 0
        while True:
            page = await self.query_events(query, cursor)
            pages += 1
            events.extend(page.get("data", []))
            if not page.get("hasNextPage"):
                break
            if max_pages is not None and pages >= max_pages:
                logger.warning(f"Stopped reading events for {query} after {pages} pages; older events were skipped")
                break
            cursor = page.get("nextCursor")
        return events

    # Objects

    async def get_object(self, object_id: str, options: Optional[Dict[str, bool]] = None) -> Dict[str, Any]:
        """`sui_getObject`; returns the `data` block or raises when the object does not exist."""
        result = await self._call("sui_getObject", [object_id, options or OBJECT_OPTIONS])
        if result.get("error"):
            error = result["error"]
            raise SuiRpcError(f"Object {object_id} unavailable: {error.get('code', error)}", method="sui_getObject")
        return result["data"]

    async def get_owned_objects(self, owner: str, struct_type: Optional[str] = None,
                                cursor: Optional[str] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {"options": OBJECT_OPTIONS}
        if struct_type:
            query["filter"] = {"StructType": struct_type}
        return await self._call("suix_getOwnedObjects", [owner, query, cursor, limit])

    async def get_all_owned_objects(self, owner: str, struct_type: str) -> List[Dict[str, Any]]:
        objects: List[Dict[str, Any]] = []
        cursor = None
        while True:
            page = await self.get_owned_objects(owner, struct_type, cursor)
            objects.extend(item["data"] for item in page.get("data", []) if item.get("data"))
            if not page.get("hasNextPage"):
                break
            cursor = page.get("nextCursor")
        return objects
