#!/usr/bin/env python3
"""
Tests for the prompt_toolkit chat application's event plumbing.

The application is built against a pipe input and a dummy output and never
takes over the terminal; events are posted directly to its inbox.
"""

import asyncio
import time

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from mcgraph.core.exceptions import PersistenceError
from mcgraph.extensions import ExtensionRegistry
from mcgraph.store import ConversationStore
from mcgraph.tui.app import ChatApp
from mcgraph.tui.events import LLMResult, Quit, Submit
from mcgraph.tui.state import SUMMARY_HEADER, ChatSession, SessionState


class FakeProvider:
    def __init__(self, reply="hi", delay=0.0, error=None):
        self.reply = reply
        self.delay = delay
        self.error = error
        self.prompts = []

    def get_response(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []
        self.titles = 0

    def add_message(self, conversation_id, role, content):
        if self.fail:
            raise PersistenceError("disk full")
        self.messages.append((conversation_id, role, content))
        return object()

    def generate_title(self, conversation_id):
        self.titles += 1
        return "title"


@pytest.fixture
def pipe_input():
    with create_pipe_input() as inp:
        yield inp


def make_app(pipe_input, provider, store=None, registry=None, conversation_id="conv-1", **kwargs):
    session = ChatSession(registry=registry, conversation_id=conversation_id, welcome="Welcome")
    return ChatApp(
        session,
        provider,
        store=store,
        typing_interval_ms=1,
        thinking_interval_ms=1,
        input=pipe_input,
        output=DummyOutput(),
        **kwargs,
    )


async def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def settled(app):
    return app.session.state is SessionState.IDLE and app.session.messages[-1].is_complete


def run(coro):
    return asyncio.run(coro)


# ============================================================================
# Chat Round Trip Tests
# ============================================================================

class TestChatApp:
    """End-to-end runs of the event loop with fake collaborators."""

    def test_chat_round_trip(self, pipe_input):
        provider = FakeProvider(reply="hi")
        store = FakeStore()
        app = make_app(pipe_input, provider, store=store)

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello"))
                await wait_until(lambda: len(app.session.messages) == 3 and settled(app))
                await wait_until(lambda: len(store.messages) == 2 and store.titles == 1)
            finally:
                app.close()

        run(scenario())

        assert provider.prompts == ["hello"]
        assert [m.content for m in app.session.messages[1:]] == ["hello", "hi"]
        assert store.messages == [("conv-1", "user", "hello"), ("conv-1", "assistant", "hi")]

    def test_title_waits_for_slow_first_message(self, pipe_input, tmp_path):
        class SlowStore(ConversationStore):
            def add_message(self, conversation_id, role, content):
                time.sleep(0.2)
                return super().add_message(conversation_id, role, content)

        store = SlowStore(root=tmp_path)
        conversation = store.create_conversation(model="fake")
        app = make_app(
            pipe_input, FakeProvider(reply="hi"), store=store, conversation_id=conversation.id
        )

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello world"))
                await wait_until(lambda: len(store.get_messages(conversation.id)) == 2)
                await wait_until(
                    lambda: store.get_conversation(conversation.id).title == "hello world"
                )
            finally:
                app.close()

        run(scenario())
        roles = [m.role for m in store.get_messages(conversation.id)]
        assert roles == ["user", "assistant"]
        assert store.get_conversation(conversation.id).title == "hello world"

    def test_provider_error_is_shown(self, pipe_input):
        app = make_app(pipe_input, FakeProvider(error=RuntimeError("rate limited")))

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello"))
                await wait_until(lambda: len(app.session.messages) == 3)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content == "Error: rate limited"

    def test_request_timeout(self, pipe_input):
        app = make_app(pipe_input, FakeProvider(delay=0.5), request_timeout=0.05)

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello"))
                await wait_until(lambda: len(app.session.messages) == 3)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content == "Error: request timed out after 0.05s"

    def test_persistence_failure_does_not_interrupt(self, pipe_input):
        app = make_app(pipe_input, FakeProvider(reply="fine"), store=FakeStore(fail=True))

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello"))
                await wait_until(lambda: len(app.session.messages) == 3 and settled(app))
                await wait_until(lambda: app.session.last_error is not None)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content == "fine"
        assert isinstance(app.session.last_error, PersistenceError)

    def test_summary(self, pipe_input):
        app = make_app(pipe_input, FakeProvider(reply="short summary"))

        async def scenario():
            app.open()
            try:
                app.post(Submit("/summarize"))
                await wait_until(lambda: settled(app) and len(app.session.messages) == 2)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content == SUMMARY_HEADER + "short summary"

    def test_extension_command(self, pipe_input):
        registry = ExtensionRegistry()
        registry.register_builtins()
        provider = FakeProvider()
        app = make_app(pipe_input, provider, registry=registry)

        async def scenario():
            app.open()
            try:
                app.post(Submit("/system nope"))
                await wait_until(lambda: settled(app) and len(app.session.messages) == 2)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content == (
            "Error executing command /system nope: "
            "command 'nope' not found in extension 'system'"
        )
        assert provider.prompts == []

    def test_help_without_registry(self, pipe_input):
        app = make_app(pipe_input, FakeProvider())

        async def scenario():
            app.open()
            try:
                app.post(Submit("/help"))
                await wait_until(lambda: settled(app) and len(app.session.messages) == 2)
            finally:
                app.close()

        run(scenario())
        assert app.session.messages[-1].content.startswith("# Extensions are disabled")

    def test_late_result_after_quit_is_dropped(self, pipe_input):
        app = make_app(pipe_input, FakeProvider(delay=0.2))

        async def scenario():
            app.open()
            try:
                app.post(Submit("hello"))
                await wait_until(lambda: app.session.pending)
                app.post(Quit())
                await wait_until(lambda: app.session.closed)
                app.post(LLMResult(response="too late"))
                await asyncio.sleep(0.05)
            finally:
                app.close()

        run(scenario())
        assert all(m.content != "too late" for m in app.session.messages)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
