"""Accessor-pair observation — the default strategy.

Each observed key gets a data descriptor on the target's shadow class.
The descriptor reads and writes the real backing slot (the instance
__dict__ entry, or the original __slots__ member), so the stored value
is always live and survives un-instrumenting untouched.

Usage:
    class State:
        def __init__(self):
            self.foo = "value"

    state = State()
    dispose = observe_property(state, "foo", lambda new, old: print(new, old))
    state.foo = "newValue"   # prints: newValue value
    dispose()
    type(state) is State     # True again
"""

from __future__ import annotations

import logging
import types
from typing import Any

from mdcobserver._anchor import TargetState, deliver, has_changed
from mdcobserver._interceptor import Interceptor, class_attribute
from mdcobserver.mixin import BaseObserverMixin, observer_class

logger = logging.getLogger("mdcobserver.observer")

_MISSING = object()


class ObservedAttribute:
    """Getter/setter pair standing in for one observed attribute."""

    __slots__ = ("key", "slot", "_state")

    def __init__(self, state: TargetState, key: str, slot: Any = None) -> None:
        self.key = key
        self.slot = slot
        self._state = state

    def _read(self, obj: object, default: Any = _MISSING) -> Any:
        if self.slot is not None:
            try:
                return self.slot.__get__(obj, type(obj))
            except AttributeError:
                if default is _MISSING:
                    raise
                return default
        try:
            return obj.__dict__[self.key]
        except KeyError:
            if default is _MISSING:
                raise AttributeError(
                    f"{type(obj).__name__!r} object has no attribute {self.key!r}"
                ) from None
            return default

    def __get__(self, obj: object, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return self._read(obj)

    def __set__(self, obj: object, value: Any) -> None:
        old = self._read(obj, None)
        if self.slot is not None:
            self.slot.__set__(obj, value)
        else:
            obj.__dict__[self.key] = value
        if obj is self._state.target and has_changed(value, old):
            deliver(self._state.observers.get(self.key, ()), value, old)

    def __delete__(self, obj: object) -> None:
        if self.slot is not None:
            self.slot.__delete__(obj)
            return
        try:
            del obj.__dict__[self.key]
        except KeyError:
            raise AttributeError(self.key) from None

    def __repr__(self) -> str:
        return f"ObservedAttribute({self.key!r})"


class AccessorInterceptor(Interceptor):
    name = "accessor"

    def install_key(self, state: TargetState, key: str) -> None:
        slot = class_attribute(state.original, key)
        if not isinstance(slot, types.MemberDescriptorType):
            slot = None
        setattr(state.shadow, key, ObservedAttribute(state, key, slot))
        logger.debug("Intercepting %s.%s", state.original.__name__, key)

    def release_key(self, state: TargetState, key: str) -> None:
        delattr(state.shadow, key)
        logger.debug("Released %s.%s", state.original.__name__, key)


_interceptor = AccessorInterceptor()

observe_property = _interceptor.observe_property
set_observers_enabled = _interceptor.set_observers_enabled
is_observed = _interceptor.is_observed


class ObserverMixin(BaseObserverMixin):
    """observe() / unobserve() / set_observers_enabled() via accessor pairs."""

    _interceptor = _interceptor


def mdc_observer(base: type = object) -> type:
    """Return base extended with ObserverMixin (ObserverMixin itself for object)."""
    return observer_class(ObserverMixin, base)
