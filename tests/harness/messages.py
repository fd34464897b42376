"""Message capture for Textual in-process tests.

Callable passed as message_hook to run_test(); records every message.
"""

from textual.message import Message


class MessageCapture:
    """Captures Textual messages during run_test().

    Usage:
        capture = MessageCapture()
        async with run_app(message_hook=capture) as (pilot, app):
            ...
            assert capture.link_payloads() == ["mudpane://send?text=look"]
    """

    def __init__(self):
        self._messages: list[Message] = []

    def __call__(self, message: Message) -> None:
        self._messages.append(message)

    def of_type(self, type_name: str) -> list[Message]:
        """Filter messages by class name (string match avoids import coupling)."""
        return [m for m in self._messages if type(m).__name__ == type_name]

    def distinct(self, type_name: str) -> list[Message]:
        """Like of_type, but a message bubbling through several nodes counts once."""
        seen: set[int] = set()
        unique = []
        for message in self.of_type(type_name):
            if id(message) not in seen:
                seen.add(id(message))
                unique.append(message)
        return unique

    def link_payloads(self) -> list[str]:
        """Payloads of each OutputView.LinkClicked posted, in order."""
        return [m.payload for m in self.distinct("LinkClicked")]

    def clear(self) -> None:
        self._messages.clear()
