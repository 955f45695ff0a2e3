"""Per-session query state: a pure reducer plus the controller that drives it.

``reduce(state, action)`` is the whole transition table.  The controller
serializes actions with a lock, validates submissions and schedules the
simulated result computation on a scheduler, so observers can see
``is_processing`` while the delay is pending.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Optional, Tuple, Union

from insight_dashboard.components.errors import EmptyQueryError, SynthesisFault
from insight_dashboard.components.models import AnalyticsResult, QueryRecord
from insight_dashboard.components.scheduler import ScheduledTask, TimerScheduler
from insight_dashboard.components.suggestions import is_command
from insight_dashboard.components.synthesizer import MockResultSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_PROCESSING_DELAY = 0.5  # seconds


@dataclass(frozen=True)
class QuerySession:
    """Snapshot of one dashboard session"""

    current_query_text: str = ""
    is_processing: bool = False
    last_error: Optional[str] = None
    suggestion_mode: bool = False
    history: Tuple[QueryRecord, ...] = ()
    current_result: Optional[AnalyticsResult] = None


# ------------------------------------------------------------------
# Actions
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SetQuery:
    text: str


@dataclass(frozen=True)
class SubmitQuery:
    pass


@dataclass(frozen=True)
class ProcessSuccess:
    query_text: str
    result: AnalyticsResult
    submitted_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class ProcessFailure:
    error: str


@dataclass(frozen=True)
class ClearHistory:
    pass


@dataclass(frozen=True)
class Rerun:
    record: QueryRecord


Action = Union[SetQuery, SubmitQuery, ProcessSuccess, ProcessFailure, ClearHistory, Rerun]


def reduce(state: QuerySession, action: Action) -> QuerySession:
    """Return the session that follows ``state`` after ``action``."""
    if isinstance(action, SetQuery):
        return replace(
            state,
            current_query_text=action.text,
            suggestion_mode=is_command(action.text),
            last_error=None,
        )
    if isinstance(action, SubmitQuery):
        return replace(state, is_processing=True, last_error=None)
    if isinstance(action, ProcessSuccess):
        record = QueryRecord(
            query_text=action.query_text,
            result=action.result,
            submitted_at=action.submitted_at,
        )
        return replace(
            state,
            is_processing=False,
            history=state.history + (record,),
            current_result=action.result,
            current_query_text="",
            suggestion_mode=False,
            last_error=None,
        )
    if isinstance(action, ProcessFailure):
        return replace(
            state,
            is_processing=False,
            last_error=action.error,
            current_result=None,
        )
    if isinstance(action, ClearHistory):
        return replace(state, history=(), current_result=None, last_error=None)
    if isinstance(action, Rerun):
        return replace(state, current_result=action.record.result, last_error=None)
    return state


def validate_query(query_text: str) -> str:
    """Return the trimmed query, raising EmptyQueryError if nothing is left."""
    trimmed = (query_text or "").strip()
    if not trimmed:
        raise EmptyQueryError()
    return trimmed


class QuerySessionController:
    """Owns a QuerySession and applies actions to it one at a time"""

    def __init__(
        self,
        synthesizer: Optional[MockResultSynthesizer] = None,
        scheduler=None,
        processing_delay: float = DEFAULT_PROCESSING_DELAY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.synthesizer = synthesizer or MockResultSynthesizer()
        self.scheduler = scheduler or TimerScheduler()
        self.processing_delay = processing_delay
        self.clock = clock
        self._state = QuerySession()
        self._lock = threading.RLock()
        self.pending_task: Optional[ScheduledTask] = None

    @property
    def state(self) -> QuerySession:
        return self._state

    def dispatch(self, action: Action) -> QuerySession:
        with self._lock:
            self._state = reduce(self._state, action)
            return self._state

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> QuerySession:
        return self.dispatch(SetQuery(text or ""))

    def submit(self) -> Optional[ScheduledTask]:
        """Start processing the current query.

        Returns the scheduled task, or None when the submission was rejected
        (blank query) or ignored (already processing).
        """
        with self._lock:
            if self._state.is_processing:
                logger.info("Submit ignored: a query is already processing")
                return None
            query_text = self._state.current_query_text
            try:
                validate_query(query_text)
            except EmptyQueryError as e:
                logger.info("Submit rejected: category=%s", e.category)
                self.dispatch(ProcessFailure(e.user_message))
                return None

            self.dispatch(SubmitQuery())
            logger.info("Query submitted: %r", query_text)
            self.pending_task = self.scheduler.call_later(
                self.processing_delay,
                lambda: self._complete(query_text),
            )
            return self.pending_task

    def clear_history(self) -> QuerySession:
        logger.info("Clearing query history (%d entries)", len(self._state.history))
        return self.dispatch(ClearHistory())

    def rerun(self, record: QueryRecord) -> QuerySession:
        return self.dispatch(Rerun(record))

    # ------------------------------------------------------------------
    # Scheduled completion
    # ------------------------------------------------------------------

    def _complete(self, query_text: str) -> None:
        try:
            result = self.synthesizer.synthesize(query_text)
        except SynthesisFault as e:
            logger.exception("Query processing failed: category=%s", e.category)
            self.dispatch(ProcessFailure(e.user_message))
            return
        except Exception:
            logger.exception("Unexpected error while processing query %r", query_text)
            self.dispatch(ProcessFailure(SynthesisFault.user_message))
            return
        self.dispatch(ProcessSuccess(query_text, result, self.clock()))
        logger.info("Query processed: %r history=%d", query_text, len(self._state.history))
