"""
ERTH SDK - LCD API Client

Handles all chain interactions via the LCD (REST gateway) of a Secret
Network node.
"""

import base64
import logging
from typing import Optional

import requests

from ..cancellation import CancelToken
from ..constants import (
    DEFAULT_LCD_URL,
    REQUEST_TIMEOUT,
    BROADCAST_MODE_SYNC,
    NODE_INFO_PATH,
    ACCOUNT_PATH,
    BROADCAST_PATH,
    TX_PATH,
    CODE_HASH_PATH,
    QUERY_PATH,
)
from ..errors import (
    AccountNotFoundError,
    APIError,
    ContractQueryError,
    NetworkError,
    ParseError,
)
from ..models import Account, BroadcastResult

logger = logging.getLogger(__name__)


def _is_contract_error(body) -> bool:
    """A gRPC-gateway error body from the node, as opposed to a proxy or gateway page."""
    if not isinstance(body, dict) or not body.get("message"):
        return False
    return bool(body.get("code")) or "encrypted:" in str(body["message"])


class LCDClient:
    """
    Client for a Cosmos/Secret LCD gateway.
    
    Every call accepts an optional CancelToken; the per-request timeout is
    clipped to the token's remaining budget.
    """
    
    def __init__(
        self,
        base_url: str = DEFAULT_LCD_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize API client.
        
        Args:
            base_url: LCD base URL.
            timeout: Per-request timeout in seconds.
            session: Pre-configured requests session (proxies, retries, auth).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
    
    def _request(
        self,
        method: str,
        path: str,
        cancel: Optional[CancelToken] = None,
        **kwargs
    ) -> requests.Response:
        """Send a request; transport failures become NetworkError."""
        timeout = self.timeout
        if cancel is not None:
            cancel.check(f"{method} {path}")
            timeout = cancel.clip(timeout)
        
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"API request failed: {e}", {"endpoint": path})
    
    @staticmethod
    def _json(response: requests.Response, path: str) -> dict:
        try:
            return response.json()
        except ValueError:
            raise ParseError(f"Non-JSON response from {path}", raw=response.text)
    
    def _get(self, path: str, cancel: Optional[CancelToken] = None, **kwargs) -> dict:
        """Make GET request; any non-2xx status is an APIError."""
        response = self._request("GET", path, cancel, **kwargs)
        if not response.ok:
            raise APIError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                endpoint=path
            )
        return self._json(response, path)
    
    # =========================================================================
    # Chain / Account
    # =========================================================================
    
    def fetch_chain_id(self, cancel: Optional[CancelToken] = None) -> str:
        """Chain id from the node info (e.g. "secret-4")."""
        data = self._get(NODE_INFO_PATH, cancel)
        try:
            return data["default_node_info"]["network"]
        except (KeyError, TypeError):
            raise ParseError("node_info response has no default_node_info.network", raw=data)
    
    def fetch_account(self, address: str, cancel: Optional[CancelToken] = None) -> Account:
        """
        Fetch account number and sequence.
        
        Accepts both the flat shape and the one nested under `base_account`
        (vesting and module accounts).
        
        Raises:
            AccountNotFoundError: HTTP 404, the account has never been funded.
            ParseError: Response lacks account_number or sequence.
        """
        path = ACCOUNT_PATH.format(address=address)
        response = self._request("GET", path, cancel)
        if response.status_code == 404:
            raise AccountNotFoundError(address)
        if not response.ok:
            raise APIError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                endpoint=path
            )
        
        data = self._json(response, path)
        account = data.get("account") if isinstance(data, dict) else None
        if isinstance(account, dict) and "account_number" not in account:
            account = account.get("base_account", account)
        
        try:
            return Account(
                address=address,
                account_number=int(account["account_number"]),
                sequence=int(account.get("sequence") or 0)
            )
        except (KeyError, TypeError, ValueError):
            raise ParseError("Account response missing account_number", raw=data)
    
    # =========================================================================
    # Contracts
    # =========================================================================
    
    def fetch_code_hash(self, contract: str, cancel: Optional[CancelToken] = None) -> str:
        """Contract code hash as lowercase hex without 0x."""
        data = self._get(CODE_HASH_PATH.format(address=contract), cancel)
        code_hash = data.get("code_hash") if isinstance(data, dict) else None
        if not code_hash:
            raise ParseError(f"No code_hash for contract {contract}", raw=data)
        return code_hash.lower().removeprefix("0x")
    
    def query_contract(
        self,
        contract: str,
        envelope: bytes,
        cancel: Optional[CancelToken] = None
    ) -> str:
        """
        Run an encrypted smart query.
        
        Returns:
            The base64 `data` field (still encrypted).
        
        Raises:
            ContractQueryError: The contract rejected the query; raw_log carries the
                node's message, which may hold an encrypted contract error.
        """
        path = QUERY_PATH.format(address=contract)
        params = {"query": base64.b64encode(envelope).decode("ascii")}
        response = self._request("GET", path, cancel, params=params)
        
        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            if _is_contract_error(body):
                raise ContractQueryError(body["message"], code=body.get("code"))
            raise APIError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                endpoint=path
            )
        
        data = self._json(response, path)
        if not isinstance(data, dict) or "data" not in data:
            raise ParseError("No data field in query response", raw=data)
        return data["data"] or ""
    
    # =========================================================================
    # Transactions
    # =========================================================================
    
    def broadcast(self, tx_bytes: bytes, cancel: Optional[CancelToken] = None) -> BroadcastResult:
        """
        Broadcast signed transaction bytes in sync mode.
        
        A zero code only means the transaction entered the mempool.
        """
        payload = {
            "tx_bytes": base64.b64encode(tx_bytes).decode("ascii"),
            "mode": BROADCAST_MODE_SYNC
        }
        response = self._request("POST", BROADCAST_PATH, cancel, json=payload)
        if not response.ok:
            raise APIError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                endpoint=BROADCAST_PATH
            )
        
        data = self._json(response, BROADCAST_PATH)
        if not isinstance(data, dict) or "tx_response" not in data:
            raise ParseError("Broadcast response has no tx_response", raw=data)
        return BroadcastResult.from_response(data)
    
    def get_tx(self, tx_hash: str, cancel: Optional[CancelToken] = None) -> Optional[dict]:
        """
        Look up a transaction by hash.
        
        Returns:
            Response body, or None while the tx is not indexed (HTTP 404).
        """
        path = TX_PATH.format(tx_hash=tx_hash)
        response = self._request("GET", path, cancel)
        if response.status_code == 404:
            return None
        if not response.ok:
            raise APIError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                endpoint=path
            )
        return self._json(response, path)
