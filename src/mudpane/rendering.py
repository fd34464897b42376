"""Fragment renderer: backend TextFragment -> rich Text run.

Pure functions; no fragment is ever mutated and nothing here raises for bad
input bytes or out-of-range palette indices.

// [LAW:single-enforcer] META_LINK / META_TOOLTIP are set only here and read
//   only by the output view.
"""

import logging
from collections.abc import Sequence

from rich.color import Color
from rich.style import Style
from rich.text import Text

import mudpane.links
from mudpane.colors import BASELINE, ColorRole, resolve
from mudpane.event_types import TextFragment

logger = logging.getLogger(__name__)

META_LINK = "mudpane_link"
META_TOOLTIP = "mudpane_tooltip"

REPLACEMENT_CHARACTER = "\ufffd"
LINE_SEPARATOR = "\n"

DEFAULT_ECHO_COLOR = "grey50"


def _drawable(resolved) -> Color | None:
    # BASELINE means "leave unset", never black or white
    return None if resolved is BASELINE else resolved


def effective_colors(fragment: TextFragment):
    """(foreground, background) values after applying inverse video."""
    if fragment.inverse:
        return fragment.background, fragment.foreground
    return fragment.foreground, fragment.background


def fragment_style(fragment: TextFragment, palette: Sequence[Color]) -> Style:
    """Style for a fragment's colors and text attributes (no link)."""
    fg, bg = effective_colors(fragment)
    return Style(
        color=_drawable(resolve(ColorRole.FOREGROUND, fg, palette)),
        bgcolor=_drawable(resolve(ColorRole.BACKGROUND, bg, palette)),
        bold=(fragment.bold or fragment.highlight) or None,
        italic=fragment.italic or None,
        underline=(fragment.underline or fragment.link is not None) or None,
        strike=fragment.strikethrough or None,
        blink=fragment.blink or None,
    )


def link_style(payload: str, tooltip: str) -> Style:
    """Hyperlink + click metadata for an action link run."""
    return Style(link=payload, underline=True) + Style.from_meta(
        {META_LINK: payload, META_TOOLTIP: tooltip}
    )


def render_fragment(fragment: TextFragment, palette: Sequence[Color]) -> Text:
    """Render one fragment into a single styled run.

    Invalid UTF-8 renders as one replacement character instead of failing.
    """
    try:
        plain = fragment.text.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("invalid UTF-8 in fragment (%s); substituting", exc.reason)
        return Text(REPLACEMENT_CHARACTER)

    style = fragment_style(fragment, palette)
    if fragment.link is not None:
        link = fragment.link.with_text(plain)
        payload = mudpane.links.encode(link.sendto, link.action)
        style += link_style(payload, link.action)
    return Text(plain, style=style)


def render_echo(text: str, color: str = DEFAULT_ECHO_COLOR) -> Text:
    """Styled echo of locally submitted input."""
    return Text(text, style=Style(color=color))
