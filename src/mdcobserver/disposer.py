"""Disposer — idempotent cleanup handle for one or more registrations."""

from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from mdcobserver._anchor import Registration


class Disposer:
    """Removes exactly the registrations it was returned for.

    Call it (or .dispose()) as many times as you like; only the first
    call has an effect.
    """

    __slots__ = ("_registrations", "_disposed")

    def __init__(self, registrations: Iterable[Registration] = ()) -> None:
        self._registrations = tuple(registrations)
        self._disposed = False

    @classmethod
    def combine(cls, disposers: Iterable[Disposer]) -> Disposer:
        """One disposer covering every registration of the given disposers."""
        return cls(reg for d in disposers for reg in d.registrations)

    @property
    def registrations(self) -> tuple[Registration, ...]:
        return self._registrations

    @property
    def disposed(self) -> bool:
        return self._disposed or all(reg.disposed for reg in self._registrations)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for registration in self._registrations:
            registration.dispose()

    def __call__(self) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"Disposer({len(self._registrations)} registrations, {state})"
