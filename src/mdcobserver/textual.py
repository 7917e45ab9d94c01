"""Textual integration for mdcobserver. Opt-in — requires textual.

Widgets observe shared state objects during their own lifecycle. The
bridge keeps those observers from touching the widget tree while it is
being rebuilt or torn down, and marshals background-thread writes onto
the app thread.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

logger = logging.getLogger("mdcobserver.textual")

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded observers during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def guard(app, fn):
    """Wrap an observer fn(this, new, old) so it only runs when app is safe.

    Off-thread calls are sent through app.call_from_thread; NoMatches from
    widget queries is logged and dropped.
    """
    app_thread = threading.get_ident()

    def _guarded(this, new, old):
        if not is_safe(app):
            return
        if threading.get_ident() != app_thread:
            app.call_from_thread(_safe, this, new, old)
        else:
            _safe(this, new, old)

    def _safe(this, new, old):
        try:
            fn(this, new, old)
        except NoMatches as exc:
            logger.debug("Observer %s skipped: %s", getattr(fn, "__name__", fn), exc)

    return _guarded


def observe(app, observer, state, observers):
    """observer.observe() whose callbacks safely bridge to Textual widgets.

    Usage:
        class Footer(ObserverMixin, Static):
            def on_mount(self):
                stx.observe(self.app, self, self.app.state, {"status": Footer._show})

            def on_unmount(self):
                self.unobserve()
    """
    return observer.observe(state, {key: guard(app, fn) for key, fn in observers.items()})
