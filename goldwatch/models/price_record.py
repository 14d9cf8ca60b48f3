# goldwatch/models/price_record.py

"""Price observation and run-state models."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from goldwatch.errors import InvalidPriceData

_NON_DIGITS = re.compile(r"\D")

RECORD_TIME_FORMAT = "%Y-%m-%d %H:%M"
DISPLAY_TIME_FORMAT = "%H:%M:%S %d/%m/%Y"


def parse_price(text: str) -> int:
    """Canonical parse: drop every non-digit and read the rest as VND.

    ``"85.200.000đ"`` and ``"85,200,000"`` both give ``85200000``.
    Raises :class:`InvalidPriceData` when no digit is left.
    """
    digits = _NON_DIGITS.sub("", text or "")
    if not digits:
        raise InvalidPriceData(f"No numeric price in {text!r}")
    return int(digits)


def format_vnd(value: int) -> str:
    """Format an integer with Vietnamese thousand separators (``85.500.000``)."""
    return f"{value:,}".replace(",", ".")


def format_timestamp(moment: datetime) -> str:
    """Minute-resolution local timestamp stored with each record."""
    return moment.strftime(RECORD_TIME_FORMAT)


def format_display_time(moment: datetime) -> str:
    """Timestamp shown in the footer of Telegram messages."""
    return moment.strftime(DISPLAY_TIME_FORMAT)


@dataclass(frozen=True)
class PriceQuote:
    """Buy/sell pair as displayed on the source page."""

    buy: str
    sell: str


@dataclass(frozen=True)
class PriceRecord:
    """A single price observation appended to the history log."""

    timestamp: str
    buy: str
    sell: str

    @property
    def buy_value(self) -> int:
        return parse_price(self.buy)

    @property
    def sell_value(self) -> int:
        return parse_price(self.sell)

    def differs_from(self, other: "PriceRecord") -> bool:
        """True when either display string changed."""
        return self.buy != other.buy or self.sell != other.sell

    def to_dict(self) -> dict[str, str]:
        return {"time": self.timestamp, "buy": self.buy, "sell": self.sell}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceRecord":
        return cls(
            timestamp=str(data["time"]),
            buy=str(data["buy"]),
            sell=str(data["sell"]),
        )


@dataclass(frozen=True)
class RunState:
    """Last observed price and the hour of the last heartbeat."""

    last_buy: str | None = None
    last_sell: str | None = None
    last_notified_hour: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "buy": self.last_buy,
            "sell": self.last_sell,
            "lastHourlyNotifyHour": self.last_notified_hour,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunState":
        """Build a state from its JSON form, dropping malformed fields."""
        hour = data.get("lastHourlyNotifyHour")
        if (
            isinstance(hour, bool)
            or not isinstance(hour, int)
            or not 0 <= hour <= 23
        ):
            hour = None
        buy = data.get("buy")
        sell = data.get("sell")
        return cls(
            last_buy=buy if isinstance(buy, str) else None,
            last_sell=sell if isinstance(sell, str) else None,
            last_notified_hour=hour,
        )
