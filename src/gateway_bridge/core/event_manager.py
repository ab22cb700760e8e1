# Device event dispatch
from typing import Any, Callable, Dict, List
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Event Manager delivers device push notifications to their subscribers
class EventManager:
    def __init__(self):
        # Stores callbacks for each event type, in subscription order
        self.subscribers: Dict[str, List[Callable[..., Any]]] = {}

    def subscribe(self, event_type: str, callback: Callable[..., Any]) -> None:
        if event_type not in self.subscribers:
            self.subscribers[event_type] = []
        # {"powerChanged": [binding._handle_event]}
        self.subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable[..., Any]) -> None:
        callbacks = self.subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event_type: str, *args: Any) -> int:
        """Call every subscriber of event_type synchronously, in emission order.

        Returns the number of subscribers that were called. A failing
        subscriber is logged and does not stop delivery to the others.
        """
        callbacks = list(self.subscribers.get(event_type, []))
        for callback in callbacks:
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Subscriber for {event_type} failed: {e}")
        return len(callbacks)

    def subscriber_count(self, event_type: str) -> int:
        return len(self.subscribers.get(event_type, []))
