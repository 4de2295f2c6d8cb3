from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from dataquery.dataset import Dataset
from dataquery.history_store import QueryHistoryStore, new_entry
from dataquery.llm_service import InsightRequester
from dataquery.schemas import InsightResult, QueryHistoryEntry
from dataquery.suggestions import suggest_queries


logger = logging.getLogger(__name__)


class QueryValidationError(ValueError):
    """Raised when a query cannot be submitted (blank text or no data)."""


class QueryInProgressError(RuntimeError):
    """Raised when a query is submitted while another is still running."""


@dataclass(frozen=True)
class Submission:
    token: int
    query: str


class DashboardSession:
    """One user's dashboard state: loaded data, current result and history."""

    def __init__(self, requester: InsightRequester, history_store: QueryHistoryStore):
        self.requester = requester
        self.history_store = history_store
        self.dataset = Dataset()
        self.current_query = ""
        self.result: InsightResult | None = None
        self._lock = threading.Lock()
        self._latest_token = 0
        self._in_flight: int | None = None

    @property
    def is_processing(self) -> bool:
        return self._in_flight is not None

    def load_dataset(self, dataset: Dataset) -> None:
        with self._lock:
            # a request still running was built from the old data
            self._latest_token += 1
            self.dataset = dataset
            self.current_query = ""
            self.result = None

    def suggested_queries(self) -> list[str]:
        return suggest_queries(self.dataset)

    def begin_submission(self, query: str) -> Submission:
        with self._lock:
            if self._in_flight is not None:
                raise QueryInProgressError("A query is already being processed")
            self._latest_token += 1
            self._in_flight = self._latest_token
            self.current_query = query
            return Submission(token=self._latest_token, query=query)

    def complete_submission(self, submission: Submission, result: InsightResult | None) -> bool:
        """Apply a finished result; returns False when the result is stale."""
        with self._lock:
            if self._in_flight == submission.token:
                self._in_flight = None
            if submission.token != self._latest_token:
                logger.info("Discarding stale result for query %r", submission.query)
                return False
            if result is not None:
                self.result = result
            return True

    def process_query(self, query: str) -> InsightResult:
        """Run one submission. A stale result is returned but not applied or saved."""
        text = (query or "").strip()
        if not text:
            raise QueryValidationError("Please enter a query to process")
        if self.dataset.is_empty:
            raise QueryValidationError("Please upload a CSV or Excel file first")

        submission = self.begin_submission(text)
        result: InsightResult | None = None
        try:
            result = self.requester.generate_insight(text, self.dataset)
        finally:
            applied = self.complete_submission(submission, result)

        if applied:
            self.history_store.save_query(new_entry(text))
        return result

    def history(self) -> list[QueryHistoryEntry]:
        return self.history_store.get_queries()

    def select_history_entry(self, entry: QueryHistoryEntry) -> str:
        self.current_query = entry.text
        return entry.text

    def clear_history(self) -> bool:
        return self.history_store.clear_queries()
