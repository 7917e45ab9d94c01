"""Observer mixin — per-instance observe/unobserve with collective cleanup.

A class gains observe(), unobserve() and set_observers_enabled() by
mixing in a strategy's ObserverMixin, either directly in its bases or via
mdc_observer(Base). Every registration made through an instance is kept
in that instance's registry so unobserve() can dispose all of them.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Mapping, Sequence, TYPE_CHECKING

from mdcobserver.disposer import Disposer
from mdcobserver.errors import ObservationError

if TYPE_CHECKING:
    from mdcobserver._interceptor import Interceptor


class BaseObserverMixin:
    """Strategy-agnostic mixin. Concrete mixins set _interceptor."""

    _interceptor: Interceptor
    # Class-level fallback for bases whose __init__ never reaches ours;
    # every write below rebinds an instance list.
    _observer_disposers: Sequence[Disposer] = ()

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        # Set before the base runs, so hooks it calls may observe().
        self._observer_disposers = []
        super().__init__(*args, **kwargs)

    def observe(self, state: object, observers: Mapping[str, Callable[..., None]]) -> Disposer:
        """Observe several attributes of state at once.

        Each observer is called as observer(self, new, old). The returned
        Disposer removes only the registrations made by this call.

        Usage:
            class Checkbox(ObserverMixin):
                def __init__(self, state):
                    super().__init__()
                    self.observe(state, {"checked": Checkbox._on_checked})

                def _on_checked(self, new, old):
                    ...
        """
        disposers: list[Disposer] = []
        try:
            for key, observer in observers.items():
                disposers.append(
                    self._interceptor.observe_property(state, key, observer, context=self)
                )
        except ObservationError:
            for disposer in disposers:
                disposer.dispose()
            raise
        self._prune()
        self._observer_disposers.extend(disposers)
        return Disposer.combine(disposers)

    def unobserve(self) -> None:
        """Dispose every registration made through this instance."""
        disposers, self._observer_disposers = self._observer_disposers, []
        for disposer in disposers:
            disposer.dispose()

    def set_observers_enabled(self, state: object, enabled: bool) -> None:
        """Suspend or resume this instance's observers of state.

        Registrations by other instances, and this instance's registrations
        on other objects, are untouched. Changes made while disabled are
        not replayed.
        """
        self._prune()
        for disposer in self._observer_disposers:
            for registration in disposer.registrations:
                if registration.target is state and not registration.disposed:
                    registration.enabled = enabled

    def _prune(self) -> None:
        self._observer_disposers = [d for d in self._observer_disposers if not d.disposed]


# Keyed by id(base): a live cached class keeps its base alive, so the id
# cannot be reused while the entry exists.
_classes: weakref.WeakValueDictionary[tuple[type, int], type] = weakref.WeakValueDictionary()


def observer_class(mixin: type, base: type = object) -> type:
    """Subclass of base with mixin in front of it. Cached per (mixin, base)."""
    if base is object:
        return mixin
    cls = _classes.get((mixin, id(base)))
    if cls is None:
        cls = type(base)(
            f"{base.__name__}Observer",
            (mixin, base),
            {"__module__": base.__module__, "__qualname__": f"{base.__qualname__}Observer"},
        )
        _classes[(mixin, id(base))] = cls
    return cls
