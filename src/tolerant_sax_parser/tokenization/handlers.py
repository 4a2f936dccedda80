"""Dispatch interface between the tokenizer and its caller.

A parser has three callback slots. Every slot defaults to a no-op, so a
consumer installs only what it needs, either as plain functions or by
subclassing ``SaxHandler``. Callbacks receive the opaque context value that
was given to the parser.
"""

from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .attributes import AttributeList


class ParseAction(Enum):
    """Value a callback may return to steer the parse."""

    CONTINUE = auto()
    STOP = auto()  # End the parse right after this callback


StartTagCallback = Callable[[Any, str, "AttributeList"], Optional[ParseAction]]
EndTagCallback = Callable[[Any, str], Optional[ParseAction]]
TextCallback = Callable[[Any, str, int], Optional[ParseAction]]


def noop_start_tag(context: Any, name: str, attributes: "AttributeList") -> None:
    return None


def noop_end_tag(context: Any, name: str) -> None:
    return None


def noop_text(context: Any, text: str, length: int) -> None:
    return None


class ParseStopped(Exception):
    """Raised inside the tokenizer when a callback returned ``ParseAction.STOP``."""


class Dispatch:
    """The callback slots and context of one parse, with an event counter."""

    __slots__ = ("context", "events", "_on_start_tag", "_on_end_tag", "_on_text")

    def __init__(
        self,
        context: Any,
        on_start_tag: StartTagCallback = noop_start_tag,
        on_end_tag: EndTagCallback = noop_end_tag,
        on_text: TextCallback = noop_text,
    ) -> None:
        self.context = context
        self.events = 0
        self._on_start_tag = on_start_tag
        self._on_end_tag = on_end_tag
        self._on_text = on_text

    def start_tag(self, name: str, attributes: "AttributeList") -> None:
        self.events += 1
        if self._on_start_tag(self.context, name, attributes) is ParseAction.STOP:
            raise ParseStopped(name)

    def end_tag(self, name: str) -> None:
        self.events += 1
        if self._on_end_tag(self.context, name) is ParseAction.STOP:
            raise ParseStopped(name)

    def text(self, text: str) -> None:
        self.events += 1
        if self._on_text(self.context, text, len(text)) is ParseAction.STOP:
            raise ParseStopped("text")


class SaxHandler:
    """Base class for object-style consumers.

    Override any subset of the three methods. The attribute list and text
    passed in belong to the running parse and must not be kept after the
    method returns; copy them if needed. Returning ``ParseAction.STOP``
    ends the parse.
    """

    def on_start_tag(
        self, context: Any, name: str, attributes: "AttributeList"
    ) -> Optional[ParseAction]:
        return None

    def on_end_tag(self, context: Any, name: str) -> Optional[ParseAction]:
        return None

    def on_text(self, context: Any, text: str, length: int) -> Optional[ParseAction]:
        return None
