import json
import queue
import threading
from datetime import datetime, timezone


class EventBus:
    """In-memory pub/sub for the SSE stream.

    Each subscriber gets a Queue. A subscriber can be bound to one tournament,
    in which case it only receives events published for that tournament.
    """

    def __init__(self, maxsize=50):
        self._subscribers = {}
        self._maxsize = maxsize
        self._lock = threading.Lock()

    def subscribe(self, tournament_id=None):
        """Create a new subscriber queue, optionally scoped to a tournament."""
        q = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers[q] = tournament_id
        return q

    def unsubscribe(self, q):
        with self._lock:
            self._subscribers.pop(q, None)

    def publish(self, event_type, tournament_id, data=None):
        """Push an event to every matching subscriber. Drops full queues."""
        event = {
            "type": event_type,
            "tournament_id": tournament_id,
            "data": data or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        msg = json.dumps(event)
        with self._lock:
            dead = []
            for q, scope in self._subscribers.items():
                if scope is not None and scope != tournament_id:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    dead.append(q)
            for q in dead:
                del self._subscribers[q]

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def clear(self):
        """Remove all subscribers. Used in tests."""
        with self._lock:
            self._subscribers.clear()


event_bus = EventBus()
