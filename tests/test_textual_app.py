"""In-process Textual tests for MudpaneApp driven by a scripted backend."""

from mudpane.backend import ScriptedBackend
from mudpane.demo import demo_events, demo_responder
from mudpane.event_types import BELL, LINE_BREAK, text
from mudpane.links import ActionLink, SendTo, encode
from mudpane.tui.output_view import OutputView
from textual.widgets import Input

from tests.harness import MessageCapture, output_lines, output_text, run_app, settle, widget_text


def demo_backend(**kwargs) -> ScriptedBackend:
    return ScriptedBackend(demo_events(), hold_open=True, **kwargs)


async def test_demo_room_is_rendered():
    async with run_app(backend=demo_backend()) as (pilot, app):
        lines = output_lines(app)
        assert lines[0] == "The Drum"
        assert "Exits: north, south." in lines
        assert lines[-1] == ">"  # trailing space stripped


async def test_submit_sends_and_echoes():
    backend = demo_backend(responder=demo_responder)
    async with run_app(backend=backend) as (pilot, app):
        await pilot.press("l", "o", "o", "k", "enter")
        await settle(pilot, backend)
        assert backend.sent == [b"look\r\n"]
        assert app.query_one("#input", Input).value == ""
        lines = output_lines(app)
        assert lines[-3:] == ["look", "You try to look, but nothing happens.", ">"]


async def test_click_on_link_posts_payload():
    capture = MessageCapture()
    backend = ScriptedBackend([text("Exits: "), text("north", link=ActionLink("go &text;"))], hold_open=True)
    async with run_app(backend=backend, message_hook=capture) as (pilot, app):
        # Skip the border cell and "Exits: ", landing inside "north"
        await pilot.click("#output", offset=(1 + 7 + 1, 1))
        await settle(pilot, backend)
        assert capture.link_payloads() == ["mudpane://send?text=go%20north"]
        assert backend.sent == [b"go north\r\n"]


async def test_input_link_fills_input_without_sending():
    backend = demo_backend()
    async with run_app(backend=backend) as (pilot, app):
        view = app.query_one("#output", OutputView)
        view.post_message(OutputView.LinkClicked(encode(SendTo.INPUT, "read notice")))
        await pilot.pause()
        field = app.query_one("#input", Input)
        assert field.value == "read notice"
        assert field.cursor_position == len("read notice")
        assert backend.sent == []


async def test_world_link_sends():
    backend = demo_backend()
    async with run_app(backend=backend) as (pilot, app):
        view = app.query_one("#output", OutputView)
        view.post_message(OutputView.LinkClicked(encode(SendTo.WORLD, "look troll")))
        await pilot.pause()
        assert backend.sent == [b"look troll\r\n"]
        assert output_lines(app)[-1] == "look troll"


async def test_connect_error_is_shown():
    backend = ScriptedBackend(connect_error="could not connect to nowhere:4000")
    async with run_app(backend=backend) as (pilot, app):
        assert app.session.last_error == "could not connect to nowhere:4000"
        assert "could not connect" in widget_text(app, "#error")
        assert output_lines(app) == []


async def test_streamed_output_appears():
    backend = ScriptedBackend(hold_open=True)
    async with run_app(backend=backend) as (pilot, app):
        backend.push(text("A goblin arrives."), LINE_BREAK, text("It looks hungry."))
        await settle(pilot, backend)
        assert output_text(app) == "A goblin arrives.\nIt looks hungry."


async def test_bell_requests_attention():
    backend = ScriptedBackend(hold_open=True)
    async with run_app(backend=backend) as (pilot, app):
        rang = []
        app.bell = lambda: rang.append(True)
        backend.push(text("ding"), BELL)
        await settle(pilot, backend)
        assert rang == [True]
        assert output_lines(app) == ["ding"]


async def test_clear_output():
    async with run_app(backend=demo_backend()) as (pilot, app):
        await pilot.press("ctrl+l")
        await pilot.pause()
        assert output_lines(app) == []
        assert len(app.session.document) == 0


async def test_scrollback_limits_history():
    backend = ScriptedBackend(hold_open=True)
    async with run_app(backend=backend, scrollback=5) as (pilot, app):
        for i in range(20):
            backend.push(text(f"line {i}"), LINE_BREAK)
        await settle(pilot, backend)
        assert output_lines(app) == [f"line {i}" for i in range(14, 20)]


async def test_long_lines_wrap_and_rewrap_on_resize():
    backend = ScriptedBackend([text("x" * 150)], hold_open=True)
    async with run_app(backend=backend, size=(100, 30)) as (pilot, app):
        assert len(output_lines(app)) == 2
        await pilot.resize_terminal(50, 30)
        await pilot.pause()
        assert len(output_lines(app)) == 4


async def test_quit_disconnects():
    backend = demo_backend()
    async with run_app(backend=backend) as (pilot, app):
        await pilot.press("ctrl+q")
    assert app.session.closed
    assert not backend.is_connected


async def test_hovering_link_sets_tooltip():
    backend = ScriptedBackend([text("Exits: "), text("north", link=ActionLink("go &text;"))], hold_open=True)
    async with run_app(backend=backend) as (pilot, app):
        view = app.query_one("#output", OutputView)
        await pilot.hover("#output", offset=(1 + 7 + 1, 1))
        assert view.tooltip == "go north"
        await pilot.hover("#output", offset=(1 + 2, 1))
        assert view.tooltip is None
