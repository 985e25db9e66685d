"""Event watchers, used by the resolving functions to report what they are doing to
the caller, for example to display progress or to log skipped entries.
"""

from typing import Any, Callable, Dict, Set


class Watcher:
    """Base class for a watcher of events.
    """

    def handle(self, event: Any) -> None:
        """Called when an event is triggered.
        """


class WatcherGroup(Watcher):
    """A group of watcher that is itself a watcher, its functions dispatches events to
    all children.
    """

    def __init__(self) -> None:
        self.children: Set[Watcher] = set()
    
    def add(self, watcher: Watcher) -> None:
        """Add a watcher to this group.
        """
        self.children.add(watcher)
    
    def remove(self, watcher: Watcher) -> None:
        """Remove a watcher from the group.
        """
        self.children.remove(watcher)
    
    def handle(self, event: Any) -> None:
        for watcher in self.children:
            watcher.handle(event)


class SimpleWatcher(Watcher):
    """A watcher dispatching events to handlers depending on the event's exact type.
    """

    def __init__(self, handlers: Dict[type, Callable[[Any], None]]) -> None:
        self.handlers = handlers

    def handle(self, event: Any) -> None:
        handler = self.handlers.get(type(event))
        if handler is not None:
            handler(event)
