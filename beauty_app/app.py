"""Beauty Tracker app bootstrap."""

from datetime import date
import logging
from typing import Callable

from pydantic import ValidationError

from beauty_app.config import AppConfig
from beauty_app.logging_config import configure_logging, correlation_context, get_logger, log_event
from logic.statistics import StatsModel, build_statistics
from logic.validation import StatsInput, validation_failure
from memory.kv_store import KeyValueStore, build_kv_store
from tools.beauty_store import BeautyStore, StoreChange
from tools.beauty_tools import BeautyTools


LOGGER = get_logger(__name__)


class BeautyTrackerApp:
    """Wires together config, persistence, the store and its tools.

    Build one instance per process and hand it (or its ``store``/``tools``)
    to whichever layer needs them.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        kv_store: KeyValueStore | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging(self.config.log_level)

        self.kv_store = kv_store or build_kv_store(self.config.storage_backend, self.config.storage_path)
        self.store = BeautyStore(
            kv_store=self.kv_store,
            storage_key=self.config.storage_key,
            today=today,
            suggestion_keyword=self.config.suggestion_keyword,
        )
        self.tools = BeautyTools(self.store, suggestion_keyword=self.config.suggestion_keyword)
        self._unsubscribe = self.store.subscribe(self._log_change)

        log_event(
            LOGGER,
            logging.INFO,
            "app_started",
            storage_backend=self.config.storage_backend,
            environment=self.config.environment or "local",
            cosmetics=len(self.store.cosmetics),
        )

    def _log_change(self, change: StoreChange) -> None:
        log_event(LOGGER, logging.DEBUG, "store_changed", kind=change.kind, ids=list(change.ids))

    def statistics(self, stats_range: str = "week") -> StatsModel:
        """Build the statistics display model for ``week`` or ``month``."""

        with correlation_context():
            return build_statistics(
                self.store.snapshot(),
                stats_range,
                today=self.store.today(),
                suggestion_keyword=self.config.suggestion_keyword,
            )

    def statistics_payload(self, stats_range: str = "week") -> dict:
        """Validated, serialised statistics; a review payload for bad input."""

        try:
            request = StatsInput.model_validate({"range": stats_range})
        except ValidationError as exc:
            log_event(LOGGER, logging.WARNING, "app_request_invalid", method="statistics", details=str(exc))
            return validation_failure("Invalid statistics request", exc)
        return self.tools.statistics(request)

    def close(self) -> None:
        """Detach app-level listeners; the store keeps its persisted state."""

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


__all__ = ["BeautyTrackerApp"]
