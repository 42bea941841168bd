"""Tests for the action dispatcher."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from deskremote.backends.base import Axis, BackendError, BackendSet, Button, SymbolicKey
from deskremote.dispatch import NAMED_KEYS, Ack, Dispatcher, Failure, FailureKind
from deskremote.protocol.actions import (
    CompositorAction,
    DecreaseVolume,
    Drag,
    GetCapabilities,
    IncreaseVolume,
    KeyPress,
    LeftClick,
    MiddleClick,
    MouseMove,
    OpenTarget,
    RightClick,
    Scroll,
    ToggleMuteVolume,
    UnicodeChar,
)
from deskremote.protocol.codec import decode
from deskremote.protocol.responses import Capabilities


class TestKeyInput:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,symbol",
        [
            ("Backspace", SymbolicKey.BACKSPACE),
            ("Return", SymbolicKey.RETURN),
            ("Escape", SymbolicKey.ESCAPE),
            ("enter", SymbolicKey.RETURN),
        ],
    )
    async def test_known_key_pressed_once(
        self,
        dispatcher: Dispatcher,
        backends: BackendSet,
        mock_input: AsyncMock,
        name: str,
        symbol: SymbolicKey,
    ) -> None:
        outcome = await dispatcher.dispatch(KeyPress(value=name), backends)
        assert outcome == Ack()
        mock_input.press_key.assert_awaited_once_with(symbol)

    @pytest.mark.asyncio
    async def test_unknown_key_fails(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(KeyPress(value="Hyper"), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.UNSUPPORTED_KEY
        assert "Hyper" in outcome.detail
        mock_input.press_key.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,symbol",
        [
            ("enter", SymbolicKey.RETURN),
            ("backspace", SymbolicKey.BACKSPACE),
            ("esc", SymbolicKey.ESCAPE),
            ("semicolon", SymbolicKey.SEMICOLON),
            ("colon", SymbolicKey.COLON),
            ("apostrophe", SymbolicKey.APOSTROPHE),
            ("backslash", SymbolicKey.BACKSLASH),
            ("space", SymbolicKey.SPACE),
            ("slash", SymbolicKey.SLASH),
            ("leftbrace", SymbolicKey.LEFT_BRACE),
            ("rightbrace", SymbolicKey.RIGHT_BRACE),
        ],
    )
    async def test_web_client_keymap_names(
        self,
        dispatcher: Dispatcher,
        backends: BackendSet,
        mock_input: AsyncMock,
        name: str,
        symbol: SymbolicKey,
    ) -> None:
        outcome = await dispatcher.dispatch(decode(f'{{"Key": {{"value": "{name}"}}}}'), backends)
        assert outcome == Ack()
        mock_input.press_key.assert_awaited_once_with(symbol)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("char", ["a", "Z", "7", ".", "é"])
    async def test_single_character_key_typed_literally(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock, char: str
    ) -> None:
        outcome = await dispatcher.dispatch(KeyPress(value=char), backends)
        assert outcome == Ack()
        mock_input.type_char.assert_awaited_once_with(char)
        mock_input.press_key.assert_not_called()

    def test_named_key_table_has_no_media_keys(self) -> None:
        assert SymbolicKey.VOLUME_UP not in NAMED_KEYS.values()

    @pytest.mark.asyncio
    async def test_unicode_char_typed(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(UnicodeChar(value="ß"), backends)
        assert outcome == Ack()
        mock_input.type_char.assert_awaited_once_with("ß")


class TestPointerInput:
    @pytest.mark.asyncio
    async def test_mouse_move_is_relative(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(MouseMove(x=4.5, y=-2), backends)
        assert outcome == Ack()
        mock_input.move_relative.assert_awaited_once_with(4.5, -2)

    @pytest.mark.asyncio
    async def test_scroll_horizontal_then_vertical(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(Scroll(x=5, y=-3), backends)
        assert outcome == Ack()
        assert mock_input.scroll.await_args_list == [
            call(Axis.HORIZONTAL, 5),
            call(Axis.VERTICAL, -3),
        ]

    @pytest.mark.asyncio
    async def test_drag_is_two_sequential_axis_operations(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(Drag(x=0.5, y=2), backends)
        assert outcome == Ack()
        assert mock_input.drag.await_args_list == [
            call(Axis.HORIZONTAL, 0.5),
            call(Axis.VERTICAL, 2),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action,button",
        [
            (LeftClick(), Button.LEFT),
            (MiddleClick(), Button.MIDDLE),
            (RightClick(), Button.RIGHT),
        ],
    )
    async def test_clicks(
        self,
        dispatcher: Dispatcher,
        backends: BackendSet,
        mock_input: AsyncMock,
        action: object,
        button: Button,
    ) -> None:
        outcome = await dispatcher.dispatch(action, backends)  # type: ignore[arg-type]
        assert outcome == Ack()
        mock_input.click.assert_awaited_once_with(button)


class TestSystemActions:
    @pytest.mark.asyncio
    async def test_open_known_target(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_launcher: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(OpenTarget(value="firefox"), backends)
        assert outcome == Ack()
        mock_launcher.launch.assert_awaited_once_with("firefox")

    @pytest.mark.asyncio
    async def test_open_target_uses_bound_identifier(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_launcher: AsyncMock
    ) -> None:
        await dispatcher.dispatch(OpenTarget(value="audio"), backends)
        mock_launcher.launch.assert_awaited_once_with("pavucontrol")

    @pytest.mark.asyncio
    async def test_open_unknown_target_fails_without_launching(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_launcher: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(OpenTarget(value="unknown-app"), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.UNRECOGNIZED_TARGET
        mock_launcher.launch.assert_not_called()

    @pytest.mark.asyncio
    async def test_volume_actions(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_volume: AsyncMock
    ) -> None:
        for action in (IncreaseVolume(), DecreaseVolume(), ToggleMuteVolume()):
            assert await dispatcher.dispatch(action, backends) == Ack()
        mock_volume.increase.assert_awaited_once()
        mock_volume.decrease.assert_awaited_once()
        mock_volume.toggle_mute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_compositor_string_forwarded_verbatim(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_compositor: AsyncMock
    ) -> None:
        raw = 'spawn -- "foot" --title  "a b"'
        outcome = await dispatcher.dispatch(CompositorAction(value=raw), backends)
        assert outcome == Ack()
        mock_compositor.invoke.assert_awaited_once_with(raw)


class TestCapabilities:
    @pytest.mark.asyncio
    async def test_names_in_enumeration_order(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_apps: AsyncMock
    ) -> None:
        outcome = await dispatcher.dispatch(GetCapabilities(), backends)
        assert outcome == Capabilities(apps=["Firefox", "Steam", "Firefox"])
        mock_apps.list_applications.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lister_failure(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_apps: AsyncMock
    ) -> None:
        mock_apps.list_applications.side_effect = OSError("Permission denied")
        outcome = await dispatcher.dispatch(GetCapabilities(), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.BACKEND_ERROR


class TestFailures:
    @pytest.mark.asyncio
    async def test_backend_error_becomes_failure(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_input: AsyncMock
    ) -> None:
        mock_input.click.side_effect = BackendError("device gone", backend="mock")
        outcome = await dispatcher.dispatch(LeftClick(), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.BACKEND_ERROR
        assert "device gone" in outcome.detail

    @pytest.mark.asyncio
    async def test_unexpected_backend_exception_becomes_failure(
        self, dispatcher: Dispatcher, backends: BackendSet, mock_launcher: AsyncMock
    ) -> None:
        mock_launcher.launch.side_effect = ValueError("bad identifier")
        outcome = await dispatcher.dispatch(OpenTarget(value="steam"), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.BACKEND_ERROR
        assert outcome.detail == "ValueError: bad identifier"

    @pytest.mark.asyncio
    async def test_missing_capability_is_explicit(
        self, dispatcher: Dispatcher, mock_input: AsyncMock
    ) -> None:
        bare = BackendSet(input=mock_input)
        for action in (
            CompositorAction(value="focus-column-left"),
            OpenTarget(value="firefox"),
            IncreaseVolume(),
            GetCapabilities(),
        ):
            outcome = await dispatcher.dispatch(action, bare)
            assert isinstance(outcome, Failure)
            assert outcome.kind is FailureKind.UNSUPPORTED_ACTION

    @pytest.mark.asyncio
    async def test_slow_backend_times_out(self, backends: BackendSet, mock_input: AsyncMock) -> None:
        async def hang(*args: object) -> None:
            await asyncio.sleep(10)

        mock_input.move_relative.side_effect = hang
        dispatcher = Dispatcher(timeout=0.05)
        outcome = await dispatcher.dispatch(MouseMove(x=1, y=1), backends)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_failure_to_acknowledgement(self) -> None:
        failure = Failure(kind=FailureKind.UNRECOGNIZED_TARGET, detail="Unrecognized target: x")
        assert failure.to_acknowledgement().text == "Error: unrecognized_target: Unrecognized target: x"
