"""Textual in-process test harness for mudpane.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, settle, output_lines, ...
"""

from tests.harness.app_runner import run_app, settle
from tests.harness.content import output_lines, output_text, widget_text
from tests.harness.messages import MessageCapture

__all__ = [
    "run_app",
    "settle",
    "output_lines",
    "output_text",
    "widget_text",
    "MessageCapture",
]
