"""
Full-screen chat UI built on prompt_toolkit.

All session state changes happen on the asyncio loop, one event at a time:
key presses, resizes, timer ticks and async results are all posted to a single
inbox queue and applied by one consumer. Long-running calls (LLM requests and
extension commands) run in a worker thread pool and come back as a single
event each. Store calls run on a single worker of their own, in the order the
session asked for them.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol

from prompt_toolkit.application import Application
from prompt_toolkit.data_structures import Point
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import ConditionalContainer, Float, FloatContainer, HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.menus import CompletionsMenu
from prompt_toolkit.widgets import TextArea

from mcgraph.core.exceptions import ProviderError
from mcgraph.tui.animation import THINKING_INTERVAL_MS, TYPING_INTERVAL_MS
from mcgraph.tui.completion import SlashCommandCompleter
from mcgraph.tui.events import (
    Effect,
    Event,
    ExtensionResult,
    Exit,
    GenerateTitle,
    LLMResult,
    PersistMessage,
    Quit,
    Render,
    RenderHelp,
    RequestCompletion,
    Resize,
    RunExtension,
    ScheduleThinking,
    ScheduleTyping,
    ScrollToBottom,
    Submit,
    ThinkingTick,
    TypingTick,
)
from mcgraph.tui.help import build_help_text
from mcgraph.tui.render import get_style, render_messages
from mcgraph.tui.state import ChatSession, SessionState

logger = logging.getLogger(__name__)

STATUS_LINE = "[Ctrl+C: Quit | Alt+Enter: New Line | PgUp/PgDn: Scroll]"


class CompletionProvider(Protocol):
    def get_response(self, prompt: str) -> str: ...


class MessageStore(Protocol):
    def add_message(self, conversation_id: str, role: str, content: str) -> Any: ...

    def generate_title(self, conversation_id: str) -> str: ...


class ChatApp:
    """Drives a ChatSession from a prompt_toolkit Application."""

    def __init__(
        self,
        session: ChatSession,
        provider: CompletionProvider,
        store: Optional[MessageStore] = None,
        typing_interval_ms: int = TYPING_INTERVAL_MS,
        thinking_interval_ms: int = THINKING_INTERVAL_MS,
        request_timeout: Optional[float] = None,
        input: Any = None,
        output: Any = None,
    ):
        self.session = session
        self.provider = provider
        self.store = store
        self.typing_interval = typing_interval_ms / 1000
        self.thinking_interval = thinking_interval_ms / 1000
        self.request_timeout = request_timeout

        self._inbox: Optional[asyncio.Queue[Event]] = None
        self._consumer: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="mcgraph")
        self._store_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mcgraph-store")
        self._follow = True
        self._last_size: Optional[tuple[int, int]] = None

        self.input_area = TextArea(
            height=3,
            prompt="> ",
            multiline=True,
            wrap_lines=True,
            completer=SlashCommandCompleter(session.registry),
            complete_while_typing=True,
        )
        self.messages_window = Window(
            content=FormattedTextControl(
                self._messages_fragments,
                focusable=False,
                get_cursor_position=self._messages_cursor,
            ),
            wrap_lines=True,
            always_hide_cursor=True,
        )
        self.app: Application = self._build_application(input, output)

    # -- layout -------------------------------------------------------------

    def _messages_fragments(self):
        return render_messages(
            self.session.messages, self.session.width, self.session.assistant_name
        )

    def _messages_cursor(self) -> Optional[Point]:
        # Pinning the cursor to the last line keeps the view at the bottom
        if not self._follow:
            return None
        text = "".join(t for _, t in self._messages_fragments())
        return Point(x=0, y=max(text.count("\n") - 1, 0))

    def _thinking_fragments(self):
        return [("class:thinking", self.session.thinking.label())]

    def _build_application(self, input: Any = None, output: Any = None) -> Application:
        waiting = Condition(lambda: self.session.pending)

        body = FloatContainer(
            content=HSplit([
                self.messages_window,
                Window(height=1, char="-", style="class:rule"),
                ConditionalContainer(
                    Window(FormattedTextControl(self._thinking_fragments), height=3),
                    filter=waiting,
                ),
                ConditionalContainer(self.input_area, filter=~waiting),
                Window(FormattedTextControl(STATUS_LINE), height=1, style="class:status"),
            ]),
            floats=[
                Float(xcursor=True, ycursor=True, content=CompletionsMenu(max_height=8, scroll_offset=1)),
            ],
        )

        return Application(
            layout=Layout(body, focused_element=self.input_area),
            key_bindings=self._build_key_bindings(),
            style=get_style(),
            full_screen=True,
            mouse_support=True,
            before_render=self._before_render,
            input=input,
            output=output,
        )

    def _build_key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        @bindings.add("c-c")
        @bindings.add("c-d")
        def _(event):
            """Quit immediately, whatever the state."""
            self.post(Quit())

        @bindings.add("escape", "enter")
        def _(event):
            """Alt+Enter inserts a new line."""
            self.input_area.buffer.insert_text("\n")

        @bindings.add("enter")
        def _(event):
            """Submit, unless a request is in flight or a reply is typing out."""
            if self.session.state is not SessionState.IDLE:
                return
            text = self.input_area.text
            if not text.strip():
                return
            self.input_area.buffer.reset()
            self.post(Submit(text))

        @bindings.add("pageup")
        def _(event):
            self._follow = False
            self.messages_window.vertical_scroll = max(
                0, self.messages_window.vertical_scroll - self.session.height // 2
            )

        @bindings.add("pagedown")
        def _(event):
            self.messages_window.vertical_scroll += self.session.height // 2
            info = self.messages_window.render_info
            if info is not None and info.bottom_visible:
                self._follow = True

        return bindings

    def _before_render(self, app: Application) -> None:
        size = app.output.get_size()
        current = (size.columns, size.rows)
        if current != self._last_size:
            self._last_size = current
            self.post(Resize(width=size.columns, height=size.rows))

    # -- event plumbing -----------------------------------------------------

    def post(self, event: Event) -> None:
        """Queue an event for the session. Loop thread only."""
        if self._inbox is not None:
            self._inbox.put_nowait(event)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _consume(self) -> None:
        assert self._inbox is not None
        while True:
            event = await self._inbox.get()
            for effect in self.session.handle(event):
                self._apply(effect)

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, RequestCompletion):
            self._spawn(self._request_completion(effect))
        elif isinstance(effect, RunExtension):
            self._spawn(self._run_extension(effect))
        elif isinstance(effect, RenderHelp):
            help_text = build_help_text(self.session.registry)
            self.post(ExtensionResult("help", "help", response=help_text))
        elif isinstance(effect, PersistMessage):
            call = self._submit_store("add_message", effect.role, effect.content)
            if call is not None:
                self._spawn(self._persist_message(call))
        elif isinstance(effect, GenerateTitle):
            call = self._submit_store("generate_title")
            if call is not None:
                self._spawn(self._generate_title(call))
        elif isinstance(effect, ScheduleTyping):
            self._spawn(self._tick_later(TypingTick(), self.typing_interval))
        elif isinstance(effect, ScheduleThinking):
            self._spawn(self._tick_later(ThinkingTick(), self.thinking_interval))
        elif isinstance(effect, ScrollToBottom):
            self._follow = True
        elif isinstance(effect, Render):
            self.app.invalidate()
        elif isinstance(effect, Exit):
            if self.app.is_running:
                self.app.exit()

    async def _tick_later(self, event: Event, delay: float) -> None:
        await asyncio.sleep(delay)
        self.post(event)

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(self._executor, functools.partial(func, *args))
        if self.request_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise ProviderError(f"request timed out after {self.request_timeout:g}s") from None

    async def _request_completion(self, effect: RequestCompletion) -> None:
        try:
            response = await self._run_blocking(self.provider.get_response, effect.prompt)
        except Exception as e:
            logger.warning(f"LLM request failed: {e}")
            self.post(LLMResult(error=e, is_summary=effect.is_summary))
            return
        self.post(LLMResult(response=response, is_summary=effect.is_summary))

    async def _run_extension(self, effect: RunExtension) -> None:
        registry = self.session.registry
        try:
            if registry is None:
                raise ProviderError("no extension registry configured")
            response = await self._run_blocking(
                registry.execute, effect.extension, effect.command, effect.args
            )
        except Exception as e:
            logger.info(f"Extension command /{effect.extension} {effect.command} failed: {e}")
            self.post(ExtensionResult(effect.extension, effect.command, error=e))
            return
        self.post(ExtensionResult(effect.extension, effect.command, response=response))

    def _submit_store(self, method: str, *args: Any) -> Optional[asyncio.Future]:
        """Queue a store call on the store worker right away, so calls keep their order."""
        if self.store is None or self.session.conversation_id is None:
            return None
        func = functools.partial(getattr(self.store, method), self.session.conversation_id, *args)
        return asyncio.get_running_loop().run_in_executor(self._store_executor, func)

    async def _persist_message(self, call: asyncio.Future) -> None:
        try:
            await call
        except Exception as e:
            self.session.record_error(e)

    async def _generate_title(self, call: asyncio.Future) -> None:
        try:
            title = await call
        except Exception as e:
            self.session.record_error(e)
            return
        logger.info(f"Conversation titled: {title}")

    # -- running ------------------------------------------------------------

    def open(self) -> None:
        """Start consuming events on the running loop."""
        self._inbox = asyncio.Queue()
        self._consumer = asyncio.get_running_loop().create_task(self._consume())
        for effect in self.session.start():
            self._apply(effect)

    def close(self) -> None:
        """Stop consuming events and abandon in-flight calls."""
        if self._consumer is not None:
            self._consumer.cancel()
            self._consumer = None
        for task in list(self._background):
            task.cancel()
        # Calls can't be aborted; don't wait for them on the way out
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._store_executor.shutdown(wait=False)
        # Anything still in flight is dropped by the closed session
        if not self.session.closed:
            self.session.handle(Quit())

    async def run_async(self) -> None:
        """Run the UI until the user quits."""
        self.open()
        try:
            await self.app.run_async()
        finally:
            self.close()

    def run(self) -> None:
        asyncio.run(self.run_async())
