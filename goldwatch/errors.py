# goldwatch/errors.py

"""Error taxonomy for a single polling run.

Fatal errors (``ScrapeFailure``, ``DeliveryFailure``, ``StorageFailure``,
``ConfigurationError``) propagate to ``main()`` and produce exit code 1.
``InvalidPriceData`` and ``InsufficientData`` only ever cost the chart.
"""


class GoldWatchError(Exception):
    """Base class for every error raised by goldwatch."""


class ScrapeFailure(GoldWatchError):
    """The price row could not be fetched or located."""


class InvalidPriceData(GoldWatchError):
    """A price string has no numeric value under the canonical parse."""


class InsufficientData(GoldWatchError):
    """Fewer than two records are available for a line chart."""


class DeliveryFailure(GoldWatchError):
    """Telegram rejected a message or could not be reached."""


class StorageFailure(GoldWatchError):
    """State or history could not be written to disk."""


class ConfigurationError(GoldWatchError):
    """Required configuration (e.g. Telegram credentials) is missing."""
