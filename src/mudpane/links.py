"""Action links: rendered text that routes clicks back into the client.

A link carries an action template and a destination. On render the
template's &text; placeholder is filled with the run's own text and the
(destination, action) pair is encoded into one payload string, stored on the
run as its hyperlink. On click the payload is decoded again:

    mudpane://send?text=look%20north   -> (SendTo.WORLD, "look north")
    mudpane://input?text=say%20hi      -> (SendTo.INPUT, "say hi")
    https://example.org/               -> None (ordinary external reference)

Internet-bound links are passed through untouched.
"""

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import parse_qs, quote, urlsplit

LINK_SCHEME = "mudpane"

EMBED_ENTITY = "&text;"


class SendTo(Enum):
    """Where the result of clicking a link goes."""

    WORLD = "send"
    INPUT = "input"
    INTERNET = "internet"


# [LAW:one-source-of-truth] Locator host per internal destination.
_HOST_TO_SENDTO: dict[str, SendTo] = {
    SendTo.WORLD.value: SendTo.WORLD,
    SendTo.INPUT.value: SendTo.INPUT,
}


def _split_list(items: str) -> tuple[str, list[str]]:
    first, *rest = items.split("|")
    return first, rest


def embed(template: str, text: str) -> str:
    """Substitute text for every placeholder in template, verbatim."""
    return template.replace(EMBED_ENTITY, text)


@dataclass(frozen=True)
class ActionLink:
    """Link descriptor attached to a text fragment."""

    action: str
    hint: str | None = None
    prompts: tuple[str, ...] = field(default_factory=tuple)
    sendto: SendTo = SendTo.WORLD
    expires: str | None = None

    @classmethod
    def parse(
        cls,
        action: str,
        hint: str | None = None,
        sendto: SendTo = SendTo.WORLD,
        expires: str | None = None,
    ) -> "ActionLink":
        """Build a link from |-separated action and hint lists.

        The first action is the click action; the rest are prompts. When the
        hint list has more than one entry, its tail replaces the prompts.
        """
        action, prompts = _split_list(action)
        if hint is None:
            return cls(action, None, tuple(prompts), sendto, expires)
        hint, hint_prompts = _split_list(hint)
        return cls(action, hint, tuple(hint_prompts or prompts), sendto, expires)

    def with_text(self, text: str) -> "ActionLink":
        """Return a copy with the placeholder filled in action and prompts."""
        return ActionLink(
            action=embed(self.action, text),
            hint=self.hint,
            prompts=tuple(embed(p, text) for p in self.prompts),
            sendto=self.sendto,
            expires=self.expires,
        )


@dataclass(frozen=True)
class DecodedLink:
    sendto: SendTo
    text: str


def encode(sendto: SendTo, text: str) -> str:
    """Serialize (destination, action text) into a link payload."""
    if sendto is SendTo.INTERNET:
        return text
    return f"{LINK_SCHEME}://{sendto.value}?text={quote(text, safe='')}"


def decode(payload: str) -> DecodedLink | None:
    """Reverse encode() for internal destinations.

    Returns None for anything that is not a well-formed internal link,
    including passthrough links. Never raises.
    """
    try:
        parts = urlsplit(payload)
    except ValueError:
        return None
    if parts.scheme != LINK_SCHEME:
        return None
    sendto = _HOST_TO_SENDTO.get(parts.netloc)
    if sendto is None or parts.path not in ("", "/"):
        return None
    values = parse_qs(parts.query, keep_blank_values=True).get("text")
    if not values:
        return None
    return DecodedLink(sendto, values[0])
