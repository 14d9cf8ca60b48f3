# goldwatch/storage/chart_exporter.py

"""Render the recent price history as a PNG line chart.

Drawing happens in pixel space: the axes cover the whole figure with
``x`` running ``0..width`` and ``y`` running ``height..0``, so every
coordinate computed by :func:`x_coordinate` / :func:`y_coordinate`
lands on the same pixel it would on a raw canvas (``y`` grows
downwards). Output is deterministic for identical inputs.
"""

import importlib
import io
import logging
from pathlib import Path
from typing import Any

from goldwatch.config.settings import Settings
from goldwatch.errors import InsufficientData, InvalidPriceData
from goldwatch.models.price_record import PriceRecord, format_vnd
from goldwatch.storage.history_store import HistoryStore

logger = logging.getLogger("goldwatch.chart")

FLAT_RANGE_DELTA = 1_000_000
BUY_COLOR = "#2ecc71"
SELL_COLOR = "#e74c3c"
FRAME_COLOR = "#cccccc"
GRID_COLOR = "#eeeeee"
GUIDE_COLOR = "#95a5a6"
TEXT_COLOR = "#34495e"
GRID_LINES = 4
DPI = 100
DEFAULT_TITLE = "Giá vàng 98 (gần nhất)"


def _get_figure_cls() -> Any:
    """Import matplotlib's Figure lazily (no pyplot, no GUI backend)."""
    return importlib.import_module("matplotlib.figure").Figure


def price_range(values: list[int]) -> tuple[int, int]:
    """Return ``(lo, hi)``, widened when the series is flat."""
    lo = min(values)
    hi = max(values)
    if lo == hi:
        lo -= FLAT_RANGE_DELTA
        hi += FLAT_RANGE_DELTA
    return lo, hi


def x_coordinate(index: int, count: int, width: int, margin: int) -> float:
    """Spread ``count`` points evenly between the left and right margins."""
    return margin + (index / (count - 1)) * (width - 2 * margin)


def y_coordinate(
    value: float, lo: float, hi: float, height: int, margin: int,
) -> float:
    """Map a price into the plot area, higher price meaning smaller y."""
    return height - margin - ((value - lo) / (hi - lo)) * (height - 2 * margin)


def change_points(records: list[PriceRecord]) -> list[int]:
    """Indexes whose buy or sell string differs from the previous record."""
    return [
        i for i in range(1, len(records))
        if records[i].differs_from(records[i - 1])
    ]


def _parse_series(
    records: list[PriceRecord],
) -> tuple[list[int], list[int]]:
    """Canonical-parse both series; any bad record aborts the chart."""
    try:
        buys = [r.buy_value for r in records]
        sells = [r.sell_value for r in records]
    except InvalidPriceData:
        logger.warning("Invalid price in history, skipping chart")
        raise
    return buys, sells


def render_price_chart(
    records: list[PriceRecord],
    width: int = Settings.CHART_WIDTH,
    height: int = Settings.CHART_HEIGHT,
    margin: int = Settings.CHART_MARGIN,
    title: str = DEFAULT_TITLE,
) -> bytes:
    """Draw buy/sell lines with change-point guides and return PNG bytes.

    Raises:
        InsufficientData: fewer than two records.
        InvalidPriceData: a record has no numeric buy or sell price.
    """
    if len(records) < 2:
        raise InsufficientData(
            f"Need at least 2 records for a chart, have {len(records)}"
        )
    buys, sells = _parse_series(records)
    lo, hi = price_range(buys + sells)
    n = len(records)

    xs = [x_coordinate(i, n, width, margin) for i in range(n)]
    buy_ys = [y_coordinate(v, lo, hi, height, margin) for v in buys]
    sell_ys = [y_coordinate(v, lo, hi, height, margin) for v in sells]
    top = margin
    bottom = height - margin
    left = margin
    right = width - margin

    figure_cls = _get_figure_cls()
    fig: Any = figure_cls(
        figsize=(width / DPI, height / DPI), dpi=DPI, facecolor="white",
    )
    ax: Any = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()

    # Grid and frame
    step = (bottom - top) / (GRID_LINES + 1)
    for k in range(1, GRID_LINES + 1):
        ax.plot(
            [left, right], [top + k * step] * 2,
            color=GRID_COLOR, linewidth=1, zorder=1,
        )
    ax.plot(
        [left, right, right, left, left],
        [top, top, bottom, bottom, top],
        color=FRAME_COLOR, linewidth=1, zorder=1,
    )

    # Series
    ax.plot(xs, buy_ys, color=BUY_COLOR, linewidth=3, zorder=3)
    ax.plot(xs, sell_ys, color=SELL_COLOR, linewidth=3, zorder=3)

    # Change points
    for order, i in enumerate(change_points(records)):
        x = xs[i]
        ax.plot(
            [x, x], [top, bottom],
            color=GUIDE_COLOR, linewidth=1, linestyle="--", zorder=2,
        )
        ax.plot(
            [x, x], [buy_ys[i], sell_ys[i]],
            linestyle="none", marker="o", markersize=6,
            markerfacecolor="white", markeredgewidth=2,
            markeredgecolor=TEXT_COLOR, zorder=4,
        )
        label = (
            f"{records[i].timestamp}\n"
            f"Mua {format_vnd(buys[i])}\n"
            f"Bán {format_vnd(sells[i])}"
        )
        # Alternate rows so neighbouring labels overlap less
        label_y = top + 6 + (order % 2) * 42
        ha = "right" if x > width / 2 else "left"
        offset = -4 if ha == "right" else 4
        ax.text(
            x + offset, label_y, label,
            fontsize=7, color=TEXT_COLOR, ha=ha, va="top", zorder=5,
        )

    # Caption and legend
    ax.text(
        width / 2, top / 2, title,
        fontsize=13, fontweight="bold", color=TEXT_COLOR,
        ha="center", va="center",
    )
    ax.text(
        left, bottom + margin / 2, "━ Mua",
        fontsize=9, color=BUY_COLOR, ha="left", va="center",
    )
    ax.text(
        left + 70, bottom + margin / 2, "━ Bán",
        fontsize=9, color=SELL_COLOR, ha="left", va="center",
    )
    ax.text(
        right, bottom + margin / 2,
        f"{format_vnd(min(buys + sells))} – {format_vnd(max(buys + sells))}",
        fontsize=8, color=TEXT_COLOR, ha="right", va="center",
    )

    buf = io.BytesIO()
    fig.savefig(
        buf, format="png", dpi=DPI, facecolor="white",
        metadata={"Software": None},
    )
    logger.debug(
        "Rendered chart: %d points, %d change points, range %d..%d",
        n, len(change_points(records)), lo, hi,
    )
    return buf.getvalue()


def export_price_chart(
    history: HistoryStore,
    filepath: Path,
    window: int = Settings.CHART_WINDOW,
) -> Path | None:
    """Write the recent history window to *filepath* as a PNG."""
    try:
        records = history.recent_window(window)
        image = render_price_chart(records)
    except (InsufficientData, InvalidPriceData) as exc:
        logger.warning("Chart not drawn: %s", exc)
        return None

    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_bytes(image)
    logger.info("Chart saved to %s", filepath)
    return filepath
