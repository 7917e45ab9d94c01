# Observer and mixin tests run once per interception strategy.

import pytest

from mdcobserver import observer, observer_proxy


@pytest.fixture(params=[observer, observer_proxy], ids=["accessor", "proxy"])
def strategy(request):
    """The strategy module under test: observer (accessor pairs) or observer_proxy."""
    return request.param


class State:
    """Plain mutable state object."""

    def __init__(self, **values):
        for key, value in values.items():
            setattr(self, key, value)


class Recorder:
    """Callable that records every call's positional arguments."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    def reset(self):
        self.calls.clear()
