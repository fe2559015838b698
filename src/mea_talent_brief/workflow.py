"""Session state machine for the newsletter workflow.

IDLE -> DISCOVERING -> CURATING -> SYNTHESIZING -> FINALIZING -> PUBLISHED

A controller constructed with a shared-view location skips the interactive
flow and starts directly in PUBLISHED (read-only). Actions are only honored in
the states that allow them, so at most one boundary call is ever outstanding;
calls made in the wrong state are no-ops that return False.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import urlsplit

from . import link_codec
from .config import Settings, get_settings
from .errors import DiscoveryError, InvalidLinkError, SynthesisError, WorkflowError
from .models import CandidateItem, Document
from .selection import SelectionSet

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    CURATING = "curating"
    SYNTHESIZING = "synthesizing"
    FINALIZING = "finalizing"
    PUBLISHED = "published"


BUSY_STATES = frozenset(
    {WorkflowState.DISCOVERING, WorkflowState.SYNTHESIZING, WorkflowState.FINALIZING}
)


class ContentSource(Protocol):
    async def discover(self) -> List[CandidateItem]: ...

    async def synthesize(self, items: Sequence[CandidateItem]) -> Document: ...


Listener = Callable[["WorkflowController"], None]
Sleep = Callable[[float], Awaitable[None]]


def _as_error(exc: Exception, error_cls: type[WorkflowError]) -> WorkflowError:
    if isinstance(exc, error_cls):
        return exc
    error = error_cls()
    error.__cause__ = exc
    return error


class WorkflowController:
    """Owns one session: candidates, selection, document and the last error."""

    def __init__(
        self,
        content: ContentSource,
        *,
        location: str = "",
        settings: Optional[Settings] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._content = content
        self._settings = settings or get_settings()
        self._sleep = sleep
        self._location = location
        self._listeners: List[Listener] = []
        self._candidates: List[CandidateItem] = []
        self._selection = SelectionSet()
        self._document: Optional[Document] = None
        self._error: Optional[WorkflowError] = None
        self._read_only = False
        self._state = WorkflowState.IDLE
        self._history: List[WorkflowState] = []
        self._hydrate()

    # --- Read-only views --------------------------------------------------

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def history(self) -> Tuple[WorkflowState, ...]:
        """States entered in order, starting with the initial one."""
        return tuple(self._history)

    @property
    def candidates(self) -> Tuple[CandidateItem, ...]:
        return tuple(self._candidates)

    @property
    def selection(self) -> frozenset[str]:
        return self._selection.ids

    @property
    def document(self) -> Optional[Document]:
        return self._document

    @property
    def error(self) -> Optional[WorkflowError]:
        return self._error

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def location(self) -> str:
        return self._location

    @property
    def can_synthesize(self) -> bool:
        return self._state is WorkflowState.CURATING and self._selection.can_synthesize

    @property
    def can_reset(self) -> bool:
        return self._state not in BUSY_STATES

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._selection

    def is_selectable(self, item_id: str) -> bool:
        return self._selection.is_selectable(item_id)

    def selected_items(self) -> List[CandidateItem]:
        """Selected candidates in discovery order."""
        return [item for item in self._candidates if item.id in self._selection]

    def subscribe(self, listener: Listener) -> None:
        """Register a callable invoked after every state change or toggle.

        A listener that raises is logged and skipped; it cannot stall a transition.
        """
        self._listeners.append(listener)

    # --- Internals --------------------------------------------------------

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Workflow listener %r failed", listener)

    def _transition(self, state: WorkflowState) -> None:
        logger.debug("Workflow %s -> %s", self._state.value, state.value)
        self._state = state
        self._history.append(state)
        self._notify()

    def _hydrate(self) -> None:
        token = link_codec.extract_shared_token(self._location)
        if token is None:
            self._history.append(WorkflowState.IDLE)
            return
        document = link_codec.decode(token)
        if document is None:
            logger.warning("Ignoring shared link with an undecodable token")
            self._error = InvalidLinkError()
            self._history.append(WorkflowState.IDLE)
            return
        self._document = document
        self._read_only = True
        self._state = WorkflowState.PUBLISHED
        self._history.append(WorkflowState.PUBLISHED)

    # --- Actions ----------------------------------------------------------

    async def start_discovery(self) -> bool:
        """Run discovery from IDLE; returns False when not allowed in this state."""
        if self._state is not WorkflowState.IDLE:
            return False
        self._error = None
        self._transition(WorkflowState.DISCOVERING)
        try:
            items = await self._content.discover()
        except Exception as exc:
            self._candidates = []
            self._error = _as_error(exc, DiscoveryError)
            self._transition(WorkflowState.IDLE)
            return True
        self._candidates = list(items)
        self._selection.clear()
        logger.info("Discovered %d candidate(s)", len(self._candidates))
        self._transition(WorkflowState.CURATING)
        return True

    def toggle(self, item_id: str) -> bool:
        """Flip selection of a candidate while curating; returns True if it changed."""
        if self._state is not WorkflowState.CURATING:
            return False
        if not any(item.id == item_id for item in self._candidates):
            return False
        changed = self._selection.toggle(item_id)
        if changed:
            self._notify()
        return changed

    async def synthesize(self) -> bool:
        """Generate the newsletter from a 7-10 item selection, then publish it."""
        if not self.can_synthesize:
            return False
        self._error = None
        self._transition(WorkflowState.SYNTHESIZING)
        try:
            document = await self._content.synthesize(self.selected_items())
        except Exception as exc:
            self._error = _as_error(exc, SynthesisError)
            self._transition(WorkflowState.CURATING)
            return True
        self._document = document
        self._transition(WorkflowState.FINALIZING)
        await self._sleep(self._settings.publish_delay_seconds)
        self._transition(WorkflowState.PUBLISHED)
        return True

    def reset(self) -> bool:
        """Clear the session and return to IDLE, dropping share parameters."""
        if not self.can_reset:
            return False
        self._candidates = []
        self._selection.clear()
        self._document = None
        self._error = None
        self._read_only = False
        self._location = link_codec.strip_share_params(self._location)
        self._transition(WorkflowState.IDLE)
        return True

    def share_url(self) -> str:
        """Share link for the current document, or "" when there is none."""
        if self._document is None:
            return ""
        parts = urlsplit(self._location)
        base = (
            link_codec.strip_share_params(self._location)
            if parts.scheme and parts.netloc
            else self._settings.share_base_url
        )
        return link_codec.build_share_url(base, self._document)
