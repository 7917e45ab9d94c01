"""Interceptor — the strategy-independent half of observe_property().

Subclasses decide how writes to an attribute are intercepted: what the
shadow class looks like, and what happens when the first registration
for a key arrives or the last one leaves.
"""

from __future__ import annotations

import types
from typing import Any, Callable, Mapping

from mdcobserver._anchor import Registration, TargetState, instrument, state_of
from mdcobserver.disposer import Disposer
from mdcobserver.errors import ObservationError

_MISSING = object()


def class_attribute(cls: type, key: str) -> Any:
    """Look key up on the class MRO without invoking descriptors."""
    for klass in cls.__mro__:
        if key in klass.__dict__:
            return klass.__dict__[key]
    return _MISSING


class Interceptor:
    """Base strategy. Subclasses override the three hooks below."""

    name = "abstract"

    def shadow_namespace(self, original: type) -> Mapping[str, Any]:
        return {}

    def install_key(self, state: TargetState, key: str) -> None:
        raise NotImplementedError

    def release_key(self, state: TargetState, key: str) -> None:
        raise NotImplementedError

    # --- Public operations ---

    def observe_property(
        self,
        target: object,
        key: str,
        callback: Callable[..., None],
        context: object = None,
    ) -> Disposer:
        """Call callback whenever target.<key> changes. Returns a Disposer.

        The callback receives (new, old), or (context, new, old) when a
        context is given. Registering the same callback twice yields two
        independent registrations.
        """
        state = state_of(target)
        if state is not None and state.interceptor is not self:
            raise ObservationError(
                f"{state.original.__name__!r} object is already observed by the "
                f"{state.interceptor.name} strategy"
            )
        if state is None or key not in state.observers:
            self.check_observable(target, key, state.original if state else type(target))
        if state is None:
            state = instrument(target, self)
        if key not in state.observers:
            state.observers[key] = []
            self.install_key(state, key)
        registration = Registration(state, target, key, callback, context)
        state.add(registration)
        return Disposer([registration])

    def set_observers_enabled(self, target: object, enabled: bool) -> None:
        """Suspend or resume delivery for registrations made without a context."""
        state = state_of(target)
        if state is None or state.interceptor is not self:
            return
        for registration in state.registrations():
            if registration.context is None:
                registration.enabled = enabled

    def is_observed(self, target: object, key: str | None = None) -> bool:
        state = state_of(target)
        if state is None or state.interceptor is not self:
            return False
        return key is None or key in state.observers

    # --- Preconditions ---

    def check_observable(self, target: object, key: str, cls: type) -> None:
        """Fail fast, before anything is instrumented."""
        if not isinstance(key, str):
            raise ObservationError(f"attribute name must be str, not {type(key).__name__!r}")
        if isinstance(target, type):
            raise ObservationError(f"cannot observe attributes of class {target.__name__!r}")
        params = getattr(cls, "__dataclass_params__", None)
        if params is not None and params.frozen:
            raise ObservationError(f"{cls.__name__!r} is a frozen dataclass; {key!r} is read-only")

        attr = class_attribute(cls, key)
        if isinstance(attr, types.MemberDescriptorType):
            try:
                attr.__get__(target, cls)
            except AttributeError:
                raise ObservationError(f"{cls.__name__!r} object has no own attribute {key!r}") from None
        elif hasattr(type(attr), "__set__") or hasattr(type(attr), "__delete__"):
            raise ObservationError(f"{cls.__name__}.{key} is an accessor and cannot be observed")
        elif key not in getattr(target, "__dict__", {}):
            raise ObservationError(f"{cls.__name__!r} object has no own attribute {key!r}")
