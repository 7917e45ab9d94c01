"""Interception-layer observation. Opt-in — import this module to use it.

The shadow class traps __setattr__ and nothing else: the target's own
attributes are never replaced, reads go straight to the real storage, and
unobserved keys pass through to the original __setattr__ untouched.
Behaves exactly like mdcobserver.observer; a target is observed by one
strategy at a time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from mdcobserver._anchor import STATE_ATTR, TargetState, deliver, has_changed
from mdcobserver._interceptor import Interceptor
from mdcobserver.mixin import BaseObserverMixin, observer_class

logger = logging.getLogger("mdcobserver.observer_proxy")


def _trap_setattr(original: type) -> Callable[[object, str, Any], None]:
    original_setattr = original.__setattr__

    def __setattr__(self, name: str, value: Any) -> None:
        state = type(self).__dict__[STATE_ATTR]
        registrations = state.observers.get(name)
        if not registrations or self is not state.target:
            original_setattr(self, name, value)
            return
        old = getattr(self, name, None)
        original_setattr(self, name, value)
        if has_changed(value, old):
            deliver(registrations, value, old)

    return __setattr__


class SetattrInterceptor(Interceptor):
    name = "proxy"

    def shadow_namespace(self, original: type) -> Mapping[str, Any]:
        return {"__setattr__": _trap_setattr(original)}

    def install_key(self, state: TargetState, key: str) -> None:
        logger.debug("Intercepting %s.%s", state.original.__name__, key)

    def release_key(self, state: TargetState, key: str) -> None:
        logger.debug("Released %s.%s", state.original.__name__, key)


_interceptor = SetattrInterceptor()

observe_property = _interceptor.observe_property
set_observers_enabled = _interceptor.set_observers_enabled
is_observed = _interceptor.is_observed


class ObserverMixin(BaseObserverMixin):
    """observe() / unobserve() / set_observers_enabled() via a __setattr__ trap."""

    _interceptor = _interceptor


def mdc_observer(base: type = object) -> type:
    """Return base extended with ObserverMixin (ObserverMixin itself for object)."""
    return observer_class(ObserverMixin, base)
