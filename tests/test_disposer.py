"""Tests for Disposer."""

from mdcobserver import Disposer, observe_property
from conftest import Recorder, State


class TestDisposer:
    def test_empty_disposer(self):
        d = Disposer()
        assert d.registrations == ()
        d()
        assert d.disposed

    def test_call_and_dispose_are_equivalent(self):
        state = State(foo=0)
        d = observe_property(state, "foo", Recorder())
        assert not d.disposed
        d.dispose()
        assert d.disposed
        d()  # no-op

    def test_combine(self):
        state = State(foo=0, bar=0)
        rec = Recorder()
        first = observe_property(state, "foo", rec)
        second = observe_property(state, "bar", rec)
        combined = Disposer.combine([first, second])
        assert combined.registrations == first.registrations + second.registrations
        combined()
        assert first.disposed and second.disposed
        state.foo = 1
        state.bar = 1
        assert rec.calls == []

    def test_repr(self):
        d = observe_property(State(foo=0), "foo", Recorder())
        assert "1 registrations, active" in repr(d)
        d()
        assert "disposed" in repr(d)
        assert "disposed" in repr(d.registrations[0])
