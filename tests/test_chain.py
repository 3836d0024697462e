"""Tests for HookChain composition, attach and detach."""

import threading

import pytest

from openwebclient.chain import HookChain, HookHandle, identity
from openwebclient.errors import NullValueError, RegistrationError


def append(tag):
    def transform(value):
        return value + [tag]

    transform.__name__ = f"append_{tag}"
    return transform


@pytest.fixture
def chain():
    return HookChain("request")


class TestAggregate:
    """Test folding of attached transforms."""

    def test_empty_chain_is_identity(self, chain):
        value = object()
        assert chain.aggregate() is identity
        assert chain(value) is value

    def test_attach_order_is_invocation_order(self, chain):
        for tag in ("a", "b", "c"):
            chain.attach(append(tag))

        assert chain([]) == ["a", "b", "c"]

    def test_each_hook_sees_previous_output(self, chain):
        chain.attach(lambda x: x * 2)
        chain.attach(lambda x: x + 3)

        # (5 * 2) + 3, not (5 + 3) * 2
        assert chain(5) == 13

    def test_long_chain_does_not_recurse(self, chain):
        for _ in range(2000):
            chain.attach(lambda x: x + 1)

        assert chain(0) == 2000

    def test_aggregate_is_a_snapshot(self, chain):
        chain.attach(append("a"))
        composed = chain.aggregate()
        chain.attach(append("b"))

        assert composed([]) == ["a"]
        assert chain([]) == ["a", "b"]

    def test_null_input_is_rejected_before_first_hook(self, chain):
        calls = []
        chain.attach(lambda x: calls.append(x) or x)

        with pytest.raises(NullValueError) as exc_info:
            chain(None)

        assert exc_info.value.argument == "request"
        assert calls == []

    def test_hook_returning_none_is_caught_at_next_stage(self, chain):
        calls = []
        chain.attach(lambda x: None)
        chain.attach(lambda x: calls.append(x) or x)

        with pytest.raises(NullValueError):
            chain([])

        assert calls == []

    def test_hook_errors_propagate_unchanged(self, chain):
        error = RuntimeError("boom")

        def failing(value):
            raise error

        chain.attach(failing)

        with pytest.raises(RuntimeError) as exc_info:
            chain([])

        assert exc_info.value is error


class TestAttachDetach:
    """Test registration bookkeeping."""

    def test_attach_returns_handle(self, chain):
        transform = append("a")
        handle = chain.attach(transform)

        assert isinstance(handle, HookHandle)
        assert handle.transform is transform
        assert handle.chain == "request"
        assert handle.attached is True

    def test_same_transform_attached_twice_runs_twice(self, chain):
        transform = append("a")
        first = chain.attach(transform)
        second = chain.attach(transform)

        assert first is not second
        assert first != second
        assert len(chain) == 2
        assert chain([]) == ["a", "a"]

    def test_detach_by_handle(self, chain):
        handle = chain.attach(append("a"))
        chain.attach(append("b"))

        assert chain.detach(handle) is True
        assert handle.attached is False
        assert chain([]) == ["b"]

    def test_detach_by_transform_removes_last_registration(self, chain):
        a = append("a")
        first = chain.attach(a)
        chain.attach(append("b"))
        last = chain.attach(a)

        assert chain.detach(a) is True
        assert first.attached is True
        assert last.attached is False
        assert chain([]) == ["a", "b"]

    def test_detach_unknown_is_noop(self, chain):
        chain.attach(append("a"))

        assert chain.detach(append("z")) is False
        assert chain.detach(None) is False
        assert chain([]) == ["a"]

    def test_detach_handle_twice(self, chain):
        handle = chain.attach(append("a"))

        assert chain.detach(handle) is True
        assert chain.detach(handle) is False
        assert len(chain) == 0

    def test_detach_handle_from_other_chain_is_noop(self, chain):
        other = HookChain("response")
        handle = other.attach(append("a"))
        chain.attach(append("b"))

        assert chain.detach(handle) is False
        assert handle.attached is True
        assert chain([]) == ["b"]

    def test_attach_none_raises(self, chain):
        with pytest.raises(RegistrationError) as exc_info:
            chain.attach(None)
        assert exc_info.value.argument == "transform"

    def test_attach_non_callable_raises(self, chain):
        with pytest.raises(RegistrationError, match="callable"):
            chain.attach("not a function")

    def test_clear(self, chain):
        handles = [chain.attach(append(t)) for t in "abc"]
        chain.clear()

        assert len(chain) == 0
        assert not chain
        assert all(not h.attached for h in handles)

    def test_iter_yields_transforms_in_order(self, chain):
        transforms = [append(t) for t in "abc"]
        for transform in transforms:
            chain.attach(transform)

        assert list(chain) == transforms

    def test_hook_can_detach_itself_while_running(self, chain):
        handle = None

        def self_removing(value):
            chain.detach(handle)
            return value + ["once"]

        handle = chain.attach(self_removing)
        chain.attach(append("b"))

        assert chain([]) == ["once", "b"]
        assert chain([]) == ["b"]


class TestConcurrency:
    """Test chain mutation from several threads."""

    def test_concurrent_attach_and_detach(self, chain):
        def worker():
            for _ in range(200):
                handle = chain.attach(identity)
                chain([])
                chain.detach(handle)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(chain) == 0
