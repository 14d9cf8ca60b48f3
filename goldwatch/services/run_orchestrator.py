# goldwatch/services/run_orchestrator.py

"""Wires fetch, decide, notify and persist for a single polling run."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from goldwatch.config.settings import Settings
from goldwatch.errors import DeliveryFailure, InsufficientData, InvalidPriceData
from goldwatch.models.price_record import (
    PriceQuote,
    PriceRecord,
    RunState,
    format_timestamp,
)
from goldwatch.services.notification_policy import (
    NotificationDecision,
    NotificationPolicy,
)
from goldwatch.storage.chart_exporter import render_price_chart
from goldwatch.storage.history_store import HistoryStore
from goldwatch.storage.state_store import StateStore

logger = logging.getLogger("goldwatch.orchestrator")


class PriceSource(Protocol):
    def fetch_price(self) -> PriceQuote: ...


class Notifier(Protocol):
    def send_text(self, message: str) -> None: ...

    def send_image(self, image: bytes, caption: str) -> None: ...


@dataclass
class RunResult:
    """What a single run observed and did."""

    quote: PriceQuote
    decision: NotificationDecision
    chart_sent: bool = False


def local_now() -> datetime:
    """Current time in the configured timezone."""
    return datetime.now(ZoneInfo(Settings.TIMEZONE))


class RunOrchestrator:
    """One invocation: fetch, record, decide, deliver, persist.

    History is committed as soon as the price is known and is never
    rolled back. The state file is written last, after delivery, so a
    failed delivery does not mark the hour as notified. With
    ``persist=False`` (dry runs) neither file is written.
    """

    def __init__(
        self,
        scraper: PriceSource,
        notifier: Notifier,
        state_store: StateStore,
        history_store: HistoryStore,
        policy: NotificationPolicy | None = None,
        chart_window: int | None = None,
        persist: bool = True,
    ) -> None:
        self.scraper = scraper
        self.notifier = notifier
        self.state_store = state_store
        self.history_store = history_store
        self.policy = policy or NotificationPolicy()
        self.chart_window = chart_window or Settings.CHART_WINDOW
        self.persist = persist

    def _save_state(self, state: RunState) -> None:
        if self.persist:
            self.state_store.save(state)
        else:
            logger.info("Dry run, state not saved: %s", state)

    def _render_chart(self) -> bytes | None:
        """Chart of the recent window, or None when it cannot be drawn."""
        try:
            records = self.history_store.recent_window(self.chart_window)
            return render_price_chart(records)
        except (InsufficientData, InvalidPriceData) as exc:
            logger.warning("Skipping chart: %s", exc)
            return None

    def _deliver(self, message: str) -> bool:
        """Send the text, then the chart if one can be drawn."""
        self.notifier.send_text(message)
        image = self._render_chart()
        if image is None:
            return False
        self.notifier.send_image(image, Settings.CHART_CAPTION)
        return True

    def run(self, now: datetime | None = None) -> RunResult:
        """Execute one poll. Fatal errors propagate to the caller."""
        # Nothing is touched until the fetch succeeds
        quote = self.scraper.fetch_price()
        now = now or local_now()

        prior = self.state_store.load()
        self.history_store.load()
        self.history_store.append(
            PriceRecord(
                timestamp=format_timestamp(now),
                buy=quote.buy,
                sell=quote.sell,
            ),
            persist=self.persist,
        )

        decision = self.policy.decide(quote, prior, now)
        result = RunResult(quote=quote, decision=decision)

        if decision.notify and decision.message:
            try:
                result.chart_sent = self._deliver(decision.message)
            except DeliveryFailure:
                logger.error(
                    "Delivery failed, saving price without the "
                    "notification marker"
                )
                self._save_state(
                    RunState(
                        last_buy=quote.buy,
                        last_sell=quote.sell,
                        last_notified_hour=prior.last_notified_hour,
                    )
                )
                raise

        self._save_state(decision.new_state)
        logger.info(
            "Run complete: kind=%s chart_sent=%s",
            decision.kind.value, result.chart_sent,
        )
        return result
