"""Class decorator returning one shared instance per decorated class."""

import functools
import threading


def singleton(cls):
    """Replace ``cls`` by a factory that always hands out the same instance.

    The arguments of the first call construct the instance; later arguments are ignored.
    """
    lock = threading.Lock()
    instance = None

    @functools.wraps(cls, updated=())
    def get_instance(*args, **kwargs):
        nonlocal instance
        if instance is None:
            with lock:
                if instance is None:
                    instance = cls(*args, **kwargs)
        return instance

    return get_instance
