# goldwatch/storage/history_store.py

"""Append-only JSON log of price observations."""

import logging
from pathlib import Path

from goldwatch.config.settings import Settings
from goldwatch.errors import InsufficientData
from goldwatch.models.price_record import PriceRecord
from goldwatch.storage.file_manager import read_json, write_json_atomic

logger = logging.getLogger("goldwatch.history")


class HistoryStore:
    """Append-only, optionally capped, history of :class:`PriceRecord`.

    Insertion order is chronological order. Nothing is ever reordered
    or deduplicated: two identical consecutive prices are two points
    of the time series. When ``max_records`` is set, the oldest
    records are dropped on append.
    """

    def __init__(
        self,
        path: Path | None = None,
        max_records: int | None = None,
    ) -> None:
        self.path = path or Settings.HISTORY_PATH
        if max_records is None:
            max_records = Settings.HISTORY_MAX_RECORDS or None
        self.max_records = max_records
        self._records: list[PriceRecord] = []

    @property
    def records(self) -> tuple[PriceRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def load(self) -> "HistoryStore":
        """Read the history file; missing or corrupt means empty."""
        raw = read_json(self.path)
        records: list[PriceRecord] = []
        if isinstance(raw, list):
            for item in raw:
                try:
                    records.append(PriceRecord.from_dict(item))
                except (KeyError, TypeError):
                    logger.warning(
                        "Skipping malformed history entry: %r", item,
                    )
        elif raw is not None:
            logger.warning(
                "History file %s is not a JSON array, starting empty",
                self.path,
            )
        self._records = records
        logger.debug(
            "Loaded %d history records from %s", len(records), self.path,
        )
        return self

    def append(self, record: PriceRecord, persist: bool = True) -> None:
        """Add *record* to the end and, unless *persist* is off, save.

        Timestamps are ``YYYY-MM-DD HH:MM`` in one zone, so string order
        is time order; a record older than the last one is refused.
        """
        if not record.buy or not record.sell:
            raise ValueError(
                f"Refusing to append record with empty price: {record}"
            )
        if self._records and record.timestamp < self._records[-1].timestamp:
            raise ValueError(
                f"Refusing to append {record.timestamp}, history already "
                f"ends at {self._records[-1].timestamp}"
            )
        self._records.append(record)
        if self.max_records and len(self._records) > self.max_records:
            dropped = len(self._records) - self.max_records
            del self._records[:dropped]
            logger.debug("Trimmed %d old history records", dropped)
        if persist:
            write_json_atomic(
                self.path, [r.to_dict() for r in self._records],
            )
        else:
            logger.info("Dry run, history not saved")
        logger.info(
            "Appended %s buy=%s sell=%s (%d records)",
            record.timestamp,
            record.buy,
            record.sell,
            len(self._records),
        )

    def recent_window(self, n: int) -> list[PriceRecord]:
        """Return the trailing *n* records in their original order.

        Raises :class:`InsufficientData` when fewer than two records
        would be returned, since a line chart needs two points.
        """
        window = self._records[-n:] if n > 0 else []
        if len(window) < 2:
            raise InsufficientData(
                f"Need at least 2 records for a chart, have {len(window)}"
            )
        return list(window)
