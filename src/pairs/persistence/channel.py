from blinker import Signal


class StorageChannel:
    """Change notifications for a shared store, keyed by storage key.

    Every subscriber is told about every published key, including the tab
    that made the change. Receivers are called as ``fn(origin, key=...)``.
    """

    def __init__(self, name: str = "storage"):
        self._signal = Signal(name)

    def subscribe(self, fn):
        self._signal.connect(fn, weak=False)

    def unsubscribe(self, fn):
        self._signal.disconnect(fn)

    def publish(self, key: str, *, origin=None):
        self._signal.send(origin, key=key)
