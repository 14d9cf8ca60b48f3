# goldwatch/services/notification_policy.py

"""Decides whether a poll sends a heartbeat, a change notice, or nothing."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from goldwatch.config.settings import Settings
from goldwatch.models.price_record import (
    PriceQuote,
    RunState,
    format_display_time,
)

logger = logging.getLogger("goldwatch.policy")

_MISSING = "—"


class NotificationKind(Enum):
    """What kind of message a poll produced."""

    HEARTBEAT = "heartbeat"
    PRICE_CHANGE = "price_change"
    NONE = "none"


@dataclass(frozen=True)
class NotificationDecision:
    """Outcome of one policy evaluation."""

    notify: bool
    kind: NotificationKind
    message: str | None
    new_state: RunState


def format_heartbeat(quote: PriceQuote, now: datetime) -> str:
    """Hourly status message with the current price."""
    return (
        "📢 GIÁ VÀNG 98 HIỆN TẠI\n"
        "\n"
        f"Mua: {quote.buy}\n"
        f"Bán: {quote.sell}\n"
        "\n"
        f"⏰ {format_display_time(now)}"
    )


def format_price_change(
    quote: PriceQuote, prior: RunState, now: datetime,
) -> str:
    """Old-vs-new price message."""
    return (
        "📢 GIÁ VÀNG 98 CÓ SỰ THAY ĐỔI\n"
        "\n"
        "🔻 Giá cũ:\n"
        f"Mua: {prior.last_buy or _MISSING}\n"
        f"Bán: {prior.last_sell or _MISSING}\n"
        "\n"
        "🔺 Giá mới:\n"
        f"Mua: {quote.buy}\n"
        f"Bán: {quote.sell}\n"
        "\n"
        f"⏰ {format_display_time(now)}"
    )


class NotificationPolicy:
    """Heartbeat-first notification rules.

    1. Within the first ``heartbeat_window_minutes`` of an hour, send one
       heartbeat per hour value, whether or not the price moved.
    2. Otherwise notify when the buy or sell display string changed.
    3. Otherwise stay quiet.

    The new state always carries the latest price. Prices are compared
    as raw strings, never as parsed numbers.
    """

    def __init__(self, heartbeat_window_minutes: int | None = None) -> None:
        if heartbeat_window_minutes is None:
            heartbeat_window_minutes = Settings.HEARTBEAT_WINDOW_MINUTES
        if not 1 <= heartbeat_window_minutes <= 60:
            raise ValueError(
                "heartbeat_window_minutes must be within 1..60, "
                f"got {heartbeat_window_minutes}"
            )
        self.heartbeat_window_minutes = heartbeat_window_minutes

    def is_heartbeat_due(self, prior: RunState, now: datetime) -> bool:
        return (
            now.minute < self.heartbeat_window_minutes
            and prior.last_notified_hour != now.hour
        )

    @staticmethod
    def price_changed(quote: PriceQuote, prior: RunState) -> bool:
        return quote.buy != prior.last_buy or quote.sell != prior.last_sell

    def decide(
        self, quote: PriceQuote, prior: RunState, now: datetime,
    ) -> NotificationDecision:
        """Evaluate the rules for one poll."""
        if self.is_heartbeat_due(prior, now):
            logger.info("Heartbeat due for hour %d", now.hour)
            return NotificationDecision(
                notify=True,
                kind=NotificationKind.HEARTBEAT,
                message=format_heartbeat(quote, now),
                new_state=RunState(
                    last_buy=quote.buy,
                    last_sell=quote.sell,
                    last_notified_hour=now.hour,
                ),
            )

        new_state = RunState(
            last_buy=quote.buy,
            last_sell=quote.sell,
            last_notified_hour=prior.last_notified_hour,
        )
        if self.price_changed(quote, prior):
            logger.info(
                "Price changed: buy %s -> %s, sell %s -> %s",
                prior.last_buy, quote.buy, prior.last_sell, quote.sell,
            )
            return NotificationDecision(
                notify=True,
                kind=NotificationKind.PRICE_CHANGE,
                message=format_price_change(quote, prior, now),
                new_state=new_state,
            )

        logger.info("Price unchanged, nothing to send")
        return NotificationDecision(
            notify=False,
            kind=NotificationKind.NONE,
            message=None,
            new_state=new_state,
        )
