"""Thread-safe dict used for socket session bookkeeping.

Originally adapted from: https://github.com/HumanCompatibleAI/overcooked-demo/blob/master/server/utils.py
"""

from __future__ import annotations

from threading import Lock


class ThreadSafeDict(dict):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lock = Lock()

    def clear(self, *args, **kwargs):
        with self.lock:
            retval = super().clear(*args, **kwargs)
        return retval

    def pop(self, *args, **kwargs):
        with self.lock:
            retval = super().pop(*args, **kwargs)
        return retval

    def __setitem__(self, *args, **kwargs):
        with self.lock:
            retval = super().__setitem__(*args, **kwargs)
        return retval

    def pop_and_count_value(self, key, default=None):
        """Pop ``key`` and report how many other keys still map to its value.

        Both steps happen under one lock acquisition, so two sockets of the
        same participant closing at once cannot both see themselves as last.
        """
        with self.lock:
            value = super().pop(key, default)
            remaining = sum(1 for v in self.values() if v == value)
        return value, remaining
