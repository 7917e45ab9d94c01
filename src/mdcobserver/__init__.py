"""mdcobserver: synchronous attribute observation for plain Python objects."""

from importlib.metadata import version as _version

__version__ = _version("mdcobserver")

from mdcobserver.errors import ObservationError
from mdcobserver.disposer import Disposer
from mdcobserver.observer import (
    ObserverMixin,
    is_observed,
    mdc_observer,
    observe_property,
    set_observers_enabled,
)
# observer_proxy and textual NOT auto-imported — opt-in only

__all__ = [
    "Disposer",
    "ObservationError",
    "ObserverMixin",
    "is_observed",
    "mdc_observer",
    "observe_property",
    "set_observers_enabled",
]
