"""Tests for handler wrapping and one-time hook state."""

import pytest

from openwebclient.chain import HookChain
from openwebclient.client import WebClient
from openwebclient.errors import RegistrationError
from openwebclient.registration import HookState, OneTimeHook, add_handler, handler_of
from fakes import FakeRequest, GzipRequest


class TestHandlerOf:
    def test_return_value_ignored(self):
        transform = handler_of(lambda r: "ignored")
        request = FakeRequest(url="/")

        assert transform(request) is request

    def test_type_filter_match(self):
        seen = []
        transform = handler_of(seen.append, of=GzipRequest)
        request = GzipRequest(url="/")

        transform(request)

        assert seen == [request]

    def test_type_filter_mismatch_passes_through(self):
        seen = []
        transform = handler_of(seen.append, of=GzipRequest)
        request = FakeRequest(url="/")

        assert transform(request) is request
        assert seen == []

    def test_tuple_type_filter(self):
        seen = []
        transform = handler_of(seen.append, of=(int, str))

        transform(1)
        transform("a")
        transform(2.5)

        assert seen == [1, "a"]

    def test_keeps_handler_name(self):
        def set_header(request):
            pass

        transform = handler_of(set_header)

        assert transform.__name__ == "set_header"
        assert transform.__wrapped__ is set_header

    def test_none_handler(self):
        with pytest.raises(RegistrationError):
            handler_of(None)

    def test_non_callable_handler(self):
        with pytest.raises(RegistrationError, match="callable"):
            handler_of(42)


class TestOneTimeHook:
    def test_state_transitions_before_handler_runs(self):
        chain = HookChain("request")
        observed = []

        def handler(value):
            observed.append((hook.state, hook.handle.attached, len(chain)))

        hook = OneTimeHook(chain, handler)
        hook.attach()
        assert hook.state is HookState.ARMED

        chain(FakeRequest(url="/"))

        assert observed == [(HookState.FIRED, False, 0)]
        assert hook.state is HookState.FIRED

    def test_stale_snapshot_does_not_fire_twice(self):
        chain = HookChain("request")
        calls = []
        hook = OneTimeHook(chain, calls.append)
        hook.attach()

        first = chain.aggregate()
        second = chain.aggregate()
        first("a")
        second("b")

        assert calls == ["a"]

    def test_fired_even_if_handler_raises(self):
        chain = HookChain("response")

        def failing(value):
            raise KeyError(value)

        hook = OneTimeHook(chain, failing)
        hook.attach()

        with pytest.raises(KeyError):
            chain("x")

        assert hook.state is HookState.FIRED
        assert len(chain) == 0
        assert chain("y") == "y"


class TestAddHandler:
    def test_once_flag(self, client):
        calls = []
        add_handler(client, "response", calls.append, once=True)

        client.open("/")
        client.open("/")

        assert len(calls) == 1

    def test_invalid_kind(self, client):
        with pytest.raises(ValueError, match="kind"):
            add_handler(client, "body", print)

    def test_works_with_any_client_object(self):
        client = WebClient.__new__(WebClient)
        client.request_hooks = HookChain("request")
        client.response_hooks = HookChain("response")

        assert add_handler(client, "request", print) is client
        assert len(client.request_hooks) == 1
