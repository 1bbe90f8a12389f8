"""Declarative input bindings for the gallery and its modal.

Input events arrive from whatever surface renders the gallery. ``BINDINGS``
maps (event kind, target/key) to a modal action; ``InputDispatcher`` looks
the event up and applies the action to a ``ModalController``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel

from .modal import ModalController
from .models import offer_id_from_card


class EventKind(str, Enum):
    CLICK = "click"
    KEYDOWN = "keydown"
    TOUCH_START = "touchstart"
    TOUCH_END = "touchend"


class Target(str, Enum):
    CARD = "card"
    CLOSE = "close"
    BACKDROP = "backdrop"
    IMAGE = "image"
    PREVIOUS = "prev"
    NEXT = "next"
    DOCUMENT = "document"


class Action(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    NEXT = "next"
    PREVIOUS = "previous"
    NONE = "none"


class InputEvent(BaseModel):
    """One user input forwarded by the rendering layer."""

    kind: EventKind
    target: Target = Target.DOCUMENT
    key: Optional[str] = None
    index: Optional[int] = None
    card_id: Optional[str] = None
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Binding:
    kind: EventKind
    action: Action
    target: Optional[Target] = None
    key: Optional[str] = None
    requires_open: bool = True

    def matches(self, event: InputEvent) -> bool:
        if event.kind != self.kind:
            return False
        if self.target is not None and event.target != self.target:
            return False
        if self.key is not None and event.key != self.key:
            return False
        return True


BINDINGS: Tuple[Binding, ...] = (
    Binding(EventKind.CLICK, Action.OPEN, target=Target.CARD, requires_open=False),
    Binding(EventKind.KEYDOWN, Action.OPEN, target=Target.CARD, key="Enter", requires_open=False),
    Binding(EventKind.KEYDOWN, Action.OPEN, target=Target.CARD, key=" ", requires_open=False),
    Binding(EventKind.CLICK, Action.CLOSE, target=Target.CLOSE),
    Binding(EventKind.CLICK, Action.CLOSE, target=Target.BACKDROP),
    Binding(EventKind.CLICK, Action.PREVIOUS, target=Target.PREVIOUS),
    Binding(EventKind.CLICK, Action.NEXT, target=Target.NEXT),
    Binding(EventKind.KEYDOWN, Action.CLOSE, key="Escape"),
    Binding(EventKind.KEYDOWN, Action.PREVIOUS, key="ArrowLeft"),
    Binding(EventKind.KEYDOWN, Action.NEXT, key="ArrowRight"),
)


class SwipeTracker:
    """Pair touch start/end points into a horizontal swipe action."""

    def __init__(self, threshold: float = 50.0) -> None:
        self.threshold = threshold
        self._start: Optional[Tuple[float, float]] = None

    def start(self, x: float, y: float) -> None:
        self._start = (x, y)

    def end(self, x: float, y: float) -> Action:
        if self._start is None:
            return Action.NONE
        start_x, start_y = self._start
        self._start = None
        dx = x - start_x
        dy = y - start_y
        if abs(dx) < self.threshold or abs(dx) <= abs(dy):
            return Action.NONE
        # Finger moving left reveals the next image.
        return Action.NEXT if dx < 0 else Action.PREVIOUS


@dataclass(frozen=True)
class DispatchResult:
    action: Action
    focus_card_id: Optional[str] = None


class InputDispatcher:
    """Resolve input events through ``BINDINGS`` and drive the modal."""

    def __init__(
        self,
        controller: ModalController,
        swipe_threshold: float = 50.0,
        bindings: Tuple[Binding, ...] = BINDINGS,
    ) -> None:
        self.controller = controller
        self.bindings = bindings
        self.swipe = SwipeTracker(swipe_threshold)

    def resolve(self, event: InputEvent) -> Action:
        is_open = self.controller.is_open
        if event.kind == EventKind.TOUCH_START:
            if is_open:
                self.swipe.start(event.x, event.y)
            return Action.NONE
        if event.kind == EventKind.TOUCH_END:
            return self.swipe.end(event.x, event.y) if is_open else Action.NONE

        for binding in self.bindings:
            if binding.matches(event):
                if binding.requires_open and not is_open:
                    return Action.NONE
                return binding.action
        return Action.NONE

    def dispatch(self, event: InputEvent) -> DispatchResult:
        action = self.resolve(event)
        controller = self.controller

        if action == Action.OPEN:
            index = self._card_index(event)
            if index is None:
                return DispatchResult(Action.NONE)
            controller.open(index, origin_card_id=event.card_id)
        elif action == Action.CLOSE:
            return DispatchResult(action, focus_card_id=controller.close())
        elif action == Action.NEXT:
            if controller.next() is None:
                return DispatchResult(Action.NONE)
        elif action == Action.PREVIOUS:
            if controller.previous() is None:
                return DispatchResult(Action.NONE)
        return DispatchResult(action)

    def _card_index(self, event: InputEvent) -> Optional[int]:
        if event.card_id:
            offer_id = offer_id_from_card(event.card_id)
            if offer_id is not None:
                index = self.controller.catalog.index_of(offer_id)
                if index is not None:
                    return index
        return event.index


__all__ = [
    "Action",
    "BINDINGS",
    "Binding",
    "DispatchResult",
    "EventKind",
    "InputDispatcher",
    "InputEvent",
    "SwipeTracker",
    "Target",
]
