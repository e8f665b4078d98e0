"""
ERTH SDK - Transaction Confirmation Tracking

Best-effort confirmation polling after a sync-mode broadcast. Polling is
enrichment only: exhausting the budget returns None instead of raising.
"""

import logging
import time
from typing import Optional

from .cancellation import CancelToken
from .config import PollConfig
from .errors import NetworkError, ParseError, OperationCancelledError
from .events import EventEmitter, EventType
from .infra.api import LCDClient
from .models import BroadcastResult, TxStatus

logger = logging.getLogger(__name__)


class ConfirmationTracker:
    """
    Polls the LCD for an executed transaction.
    
    A lookup only counts once the chain has attached execution data
    (raw_log, logs, events or data); an indexed but empty response keeps
    the poll going.
    """
    
    def __init__(
        self,
        api: LCDClient,
        poll: Optional[PollConfig] = None,
        events: Optional[EventEmitter] = None
    ):
        """
        Initialize confirmation tracker.
        
        Args:
            api: LCD client used for lookups.
            poll: Retry budget (initial delay, retry delay, attempts, timeout).
            events: Emitter for ON_RETRY notifications.
        """
        self.api = api
        self.poll = poll or PollConfig()
        self.events = events or EventEmitter()
    
    def get_status(self, tx_hash: str, cancel: Optional[CancelToken] = None) -> TxStatus:
        """One-shot status lookup of a transaction."""
        data = self.api.get_tx(tx_hash, cancel=cancel)
        if not data:
            return TxStatus.SUBMITTED
        
        result = BroadcastResult.from_response(data)
        if not result.success:
            return TxStatus.REJECTED
        if result.has_execution_data:
            return TxStatus.CONFIRMED
        return TxStatus.SUBMITTED
    
    def poll_confirmation(
        self,
        tx_hash: str,
        cancel: Optional[CancelToken] = None
    ) -> Optional[BroadcastResult]:
        """
        Wait for a transaction's execution result.
        
        Args:
            tx_hash: Hash returned by the broadcast.
            cancel: Token that ends the wait early.
        
        Returns:
            BroadcastResult with execution data, or None once the retry
            budget or the wall-clock timeout is exhausted or the token fires.
        """
        token = cancel or CancelToken()
        deadline = time.monotonic() + self.poll.timeout
        
        def wait(seconds: float) -> bool:
            seconds = min(seconds, max(0.0, deadline - time.monotonic()))
            return token.sleep(seconds) and time.monotonic() < deadline
        
        if not wait(self.poll.initial_delay):
            return None
        
        for attempt in range(1, self.poll.max_retries + 1):
            # Bounded by the poll timeout as well as the caller's token
            lookup = token.child(max(0.0, deadline - time.monotonic()))
            try:
                data = self.api.get_tx(tx_hash, cancel=lookup)
            except OperationCancelledError:
                return None
            except (NetworkError, ParseError) as e:
                logger.debug("Confirmation lookup %d for %s failed: %s", attempt, tx_hash, e)
                data = None
            
            if data:
                result = BroadcastResult.from_response(data)
                if result.has_execution_data:
                    logger.info("Transaction %s confirmed after %d lookup(s)", tx_hash, attempt)
                    return result
            
            if attempt == self.poll.max_retries:
                break
            
            self.events.emit(EventType.ON_RETRY, {
                "tx_hash": tx_hash,
                "attempt": attempt,
                "max_retries": self.poll.max_retries
            })
            if not wait(self.poll.retry_delay):
                break
        
        logger.warning("No confirmation for %s within the poll budget", tx_hash)
        return None
