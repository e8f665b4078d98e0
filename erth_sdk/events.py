"""
ERTH SDK - Event Hooks

Lifecycle callbacks for pipeline operations.
"""

import logging
import time
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Available event types."""
    # Pipeline lifecycle
    STATE_CHANGED = "state_changed"
    BEFORE_ENCRYPT = "before_encrypt"
    BEFORE_SIGN = "before_sign"
    BEFORE_BROADCAST = "before_broadcast"
    AFTER_BROADCAST = "after_broadcast"
    
    # Confirmation
    TX_CONFIRMED = "tx_confirmed"
    TX_UNCONFIRMED = "tx_unconfirmed"
    
    # Errors
    ON_ERROR = "on_error"
    ON_RETRY = "on_retry"


@dataclass
class Event:
    """Event payload passed to handlers."""
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[Event], Optional[Any]]


class EventEmitter:
    """
    Event emitter for pipeline operations.
    
    Example:
        emitter = EventEmitter()
        
        @emitter.on(EventType.AFTER_BROADCAST)
        def on_broadcast(event):
            print(f"Broadcast: {event.data['tx_hash']}")
    
    Handler exceptions are logged and reported as ON_ERROR events; they never
    propagate into the pipeline.
    """
    
    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
    
    def on(self, event_type: EventType) -> Callable:
        """Decorator to register an event handler."""
        def decorator(handler: EventHandler) -> EventHandler:
            self.add_handler(event_type, handler)
            return handler
        return decorator
    
    def add_handler(self, event_type: EventType, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
    
    def remove_handler(self, event_type: EventType, handler: EventHandler) -> bool:
        """Remove an event handler. Returns False if it was not registered."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False
    
    def add_global_handler(self, handler: EventHandler) -> None:
        """Register a handler that receives ALL events."""
        self._global_handlers.append(handler)
    
    def emit(self, event_type: EventType, data: Dict[str, Any] = None) -> List[Any]:
        """
        Emit an event to all registered handlers.
        
        Returns:
            List of handler return values (excluding None).
        """
        event = Event(type=event_type, data=data or {})
        results = []
        
        for handler in self._global_handlers + self._handlers.get(event_type, []):
            try:
                result = handler(event)
                if result is not None:
                    results.append(result)
            except Exception as e:
                logger.error("Handler error for %s: %s", event_type.value, e)
                if event_type != EventType.ON_ERROR:
                    self._emit_error(e, event)
        
        return results
    
    def _emit_error(self, error: Exception, source_event: Event) -> None:
        error_event = Event(
            type=EventType.ON_ERROR,
            data={
                "error": error,
                "error_type": type(error).__name__,
                "message": str(error),
                "source_event": source_event.type.value
            }
        )
        
        for handler in self._handlers.get(EventType.ON_ERROR, []):
            try:
                handler(error_event)
            except Exception as e:
                logger.error("ON_ERROR handler failed: %s", e)
    
    def clear(self, event_type: EventType = None) -> None:
        if event_type:
            self._handlers[event_type] = []
        else:
            self._handlers.clear()
            self._global_handlers.clear()
    
    def handler_count(self, event_type: EventType = None) -> int:
        if event_type:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values()) + len(self._global_handlers)
