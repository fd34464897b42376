"""Built-in demo world for `mudpane --demo`.

Plays a short scripted room description exercising colors, text attributes
and action links, then answers whatever is typed.
"""

from collections.abc import Iterable

from mudpane.colors import IndexedColor, LiteralColor
from mudpane.event_types import BELL, LINE_BREAK, OutputEvent, text
from mudpane.links import ActionLink, SendTo

PROMPT_COLOR = IndexedColor(11)


def _exit_link(direction: str) -> OutputEvent:
    link = ActionLink.parse("go &text;|look &text;", "Walk &text;|Peer &text;")
    return text(direction, foreground=IndexedColor(14), link=link)


def prompt() -> list[OutputEvent]:
    return [LINE_BREAK, text("> ", foreground=PROMPT_COLOR, bold=True)]


def demo_events() -> list[OutputEvent]:
    return [
        text("The Drum", foreground=IndexedColor(11), bold=True),
        LINE_BREAK,
        text("A dim, smoky tavern. A "),
        text("troll", foreground=IndexedColor(2), link=ActionLink("look &text;")),
        text(" guards the door and a "),
        text("notice", underline=True, link=ActionLink("read &text;", sendto=SendTo.INPUT)),
        text(" is pinned to the wall."),
        LINE_BREAK,
        text("Exits: "),
        _exit_link("north"),
        text(", "),
        _exit_link("south"),
        text("."),
        LINE_BREAK,
        LINE_BREAK,
        text("Styles: "),
        text("bold", bold=True),
        text(" "),
        text("italic", italic=True),
        text(" "),
        text("struck", strikethrough=True),
        text(" "),
        text("inverse", inverse=True),
        text(" "),
        text("truecolor", foreground=LiteralColor(0xFF8800)),
        text(" "),
        text("docs", link=ActionLink("https://www.zuggsoft.com/zmud/mxp.htm", sendto=SendTo.INTERNET)),
        LINE_BREAK,
        text("Palette: "),
        *[text("##", foreground=IndexedColor(i)) for i in range(16)],
        BELL,
        *prompt(),
    ]


def demo_responder(line: str) -> Iterable[OutputEvent]:
    command = line.strip()
    if not command:
        return prompt()
    return [
        text("You try to "),
        text(command, bold=True),
        text(", but nothing happens."),
        *prompt(),
    ]
