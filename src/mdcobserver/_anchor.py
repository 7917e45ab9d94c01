"""Data anchor — plain structures that hold all observation bookkeeping.

An observed target gets a shadow subclass swapped in as its __class__.
The shadow carries the target's TargetState, so the bookkeeping lives
exactly as long as the target is observed and nothing is kept in a
module-level table.
"""

from __future__ import annotations

import itertools
import logging
import numbers
from typing import Any, Callable, Iterable, TYPE_CHECKING

from mdcobserver.errors import ObservationError

if TYPE_CHECKING:
    from mdcobserver._interceptor import Interceptor

logger = logging.getLogger("mdcobserver.anchor")

STATE_ATTR = "__mdc_observer_state__"

_SCALARS = (str, bytes, numbers.Number)

# ID generation — only used to tell registrations apart in reprs and logs
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def has_changed(new: Any, old: Any) -> bool:
    """Identity comparison; immutable scalars compare by value.

    A new but equal list is a change. An equal str or int is not.
    """
    if new is old:
        return False
    if isinstance(new, _SCALARS) and isinstance(old, _SCALARS):
        return new != old
    return True


class Registration:
    """One callback watching one attribute of one target."""

    __slots__ = ("id", "target", "key", "callback", "context", "enabled", "disposed", "_state")

    def __init__(
        self,
        state: TargetState,
        target: object,
        key: str,
        callback: Callable[..., None],
        context: object = None,
    ) -> None:
        self.id = new_id()
        self.target = target
        self.key = key
        self.callback = callback
        self.context = context
        self.enabled = True
        self.disposed = False
        self._state = state

    def notify(self, new: Any, old: Any) -> None:
        # The receiver is passed explicitly, never bound implicitly.
        if self.context is None:
            self.callback(new, old)
        else:
            self.callback(self.context, new, old)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._state.remove(self)

    def __repr__(self) -> str:
        if self.disposed:
            state = "disposed"
        else:
            state = "enabled" if self.enabled else "disabled"
        return f"Registration(#{self.id} {type(self.target).__name__}.{self.key}, {state})"


class TargetState:
    """Per-target bookkeeping: which keys are intercepted and by whom."""

    __slots__ = ("target", "original", "shadow", "interceptor", "observers")

    def __init__(self, target: object, original: type, interceptor: Interceptor) -> None:
        # Only writes to this exact object notify; clones pass through.
        self.target = target
        self.original = original
        self.shadow: type | None = None
        self.interceptor = interceptor
        # key -> registrations in registration order
        self.observers: dict[str, list[Registration]] = {}

    def add(self, registration: Registration) -> None:
        self.observers[registration.key].append(registration)

    def remove(self, registration: Registration) -> None:
        registrations = self.observers.get(registration.key)
        if registrations is None or registration not in registrations:
            return
        registrations.remove(registration)
        if registrations:
            return
        del self.observers[registration.key]
        self.interceptor.release_key(self, registration.key)
        if not self.observers:
            restore(registration.target, self)

    def registrations(self) -> Iterable[Registration]:
        for registrations in self.observers.values():
            yield from registrations


def state_of(target: object) -> TargetState | None:
    """The target's bookkeeping, or None when it is not observed."""
    return type(target).__dict__.get(STATE_ATTR)


# object's own __class__ slot; the shadow hides it behind a read-only property.
_class_slot = object.__dict__["__class__"]


def _shadow_members(original: type) -> dict[str, Any]:
    """Members that make the shadow pass for the original class."""

    def __new__(cls, *args, **kwargs):
        # type(target)(...) builds a plain, unobserved original instance.
        return original(*args, **kwargs)

    def __reduce_ex__(self, protocol):
        rv = original.__reduce_ex__(self, protocol)
        if not isinstance(rv, tuple):
            return rv
        shadow = type(self)

        def rebase(value):
            return original if value is shadow else value

        func, args, *rest = rv
        return (rebase(func), tuple(rebase(arg) for arg in args or ()), *rest)

    return {
        "__new__": __new__,
        "__reduce_ex__": __reduce_ex__,
        "__class__": property(lambda self: original),
    }


def instrument(target: object, interceptor: Interceptor) -> TargetState:
    """Swap a per-target shadow subclass in as target's class."""
    original = type(target)
    state = TargetState(target, original, interceptor)
    namespace: dict[str, Any] = _shadow_members(original)
    namespace.update(interceptor.shadow_namespace(original))
    namespace.update(
        __slots__=(),
        __module__=original.__module__,
        __qualname__=original.__qualname__,
    )
    namespace[STATE_ATTR] = state
    try:
        shadow = type(original)(original.__name__, (original,), namespace)
        _class_slot.__set__(target, shadow)
    except TypeError as exc:
        raise ObservationError(
            f"cannot observe {original.__name__!r} objects: {exc}"
        ) from exc
    state.shadow = shadow
    logger.debug("Instrumented %s object %#x (%s)", original.__name__, id(target), interceptor.name)
    return state


def restore(target: object, state: TargetState) -> None:
    """Put the original class back once the last key is released."""
    if type(target) is state.shadow:
        _class_slot.__set__(target, state.original)
        logger.debug("Restored %s object %#x", state.original.__name__, id(target))


def deliver(registrations: Iterable[Registration], new: Any, old: Any) -> None:
    """Notify a snapshot of registrations, skipping any disposed along the way."""
    for registration in tuple(registrations):
        if registration.enabled and not registration.disposed:
            registration.notify(new, old)
