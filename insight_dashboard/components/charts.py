"""Matplotlib rendering of analytics rows as line, bar or pie charts"""
import logging
from typing import Optional, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.figure

from insight_dashboard.components.models import DataPoint

logger = logging.getLogger(__name__)

CHART_MODES = ("line", "bar", "pie")

COLOR_PALETTE = [
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042",
    "#8884D8", "#82CA9D", "#FF6384",
    "#36A2EB", "#FFCE56", "#4BC0C0",
]

REVENUE_COLOR = "#8884d8"
CUSTOMERS_COLOR = "#82ca9d"


def _style_axes(ax) -> None:
    ax.set_facecolor('#fafafa')
    ax.spines['top'].set_visible(False)
    ax.spines['left'].set_color('#e5e7eb')
    ax.spines['bottom'].set_color('#e5e7eb')
    ax.spines['right'].set_color('#e5e7eb')
    ax.tick_params(colors='#6b7280', labelsize=9)
    ax.grid(axis="y", alpha=0.15, color="#d1d5db")


class ChartRenderer:
    """Draws one chart per (rows, mode) pair"""

    def render(self, rows: Sequence[DataPoint], mode: str = "line") -> Optional[matplotlib.figure.Figure]:
        """Return a Figure for ``rows`` in ``mode``, or None when there is nothing to plot."""
        if mode not in CHART_MODES:
            raise ValueError(f"Unknown chart mode: {mode!r}")
        if not rows:
            return None
        logger.debug("Rendering %s chart for %d rows", mode, len(rows))

        if mode == "pie":
            fig, ax = plt.subplots(figsize=(6, 4))
        else:
            fig, ax = plt.subplots(figsize=(8, 4))
        fig.patch.set_facecolor('#ffffff')
        try:
            if mode == "line":
                self._draw_line(ax, rows)
            elif mode == "bar":
                self._draw_bar(ax, rows)
            else:
                self._draw_pie(ax, rows)
            fig.tight_layout()
        except Exception:
            plt.close(fig)
            raise
        return fig

    @staticmethod
    def _draw_line(ax, rows: Sequence[DataPoint]) -> None:
        labels = [row.label for row in rows]
        x = range(len(labels))
        _style_axes(ax)
        revenue_line, = ax.plot(
            x, [row.revenue for row in rows],
            marker="o", linewidth=2.5, color=REVENUE_COLOR, label="Revenue",
        )
        ax2 = ax.twinx()
        customers_line, = ax2.plot(
            x, [row.customer_count for row in rows],
            marker="o", linewidth=2.5, color=CUSTOMERS_COLOR, label="Customers",
        )
        ax2.tick_params(colors='#6b7280', labelsize=9)
        ax.set_xticks(list(x))
        ax.set_xticklabels(labels)
        ax.set_ylabel("Revenue", fontsize=10, color="#6b7280")
        ax2.set_ylabel("Customers", fontsize=10, color="#6b7280")
        ax.set_title("Revenue and Customers", fontsize=13, fontweight="bold", color="#1f2937", pad=12)
        ax.legend(handles=[revenue_line, customers_line], loc="upper left", fontsize=9)

    @staticmethod
    def _draw_bar(ax, rows: Sequence[DataPoint]) -> None:
        labels = [row.label for row in rows]
        width = 0.38
        positions = range(len(labels))
        _style_axes(ax)
        revenue_bars = ax.bar(
            [p - width / 2 for p in positions], [row.revenue for row in rows],
            width=width, color=REVENUE_COLOR, label="Revenue",
        )
        ax2 = ax.twinx()
        customer_bars = ax2.bar(
            [p + width / 2 for p in positions], [row.customer_count for row in rows],
            width=width, color=CUSTOMERS_COLOR, label="Customers",
        )
        ax2.tick_params(colors='#6b7280', labelsize=9)
        ax.set_xticks(list(positions))
        ax.set_xticklabels(labels)
        ax.set_ylabel("Revenue", fontsize=10, color="#6b7280")
        ax2.set_ylabel("Customers", fontsize=10, color="#6b7280")
        ax.set_title("Revenue and Customers", fontsize=13, fontweight="bold", color="#1f2937", pad=12)
        ax.legend(handles=[revenue_bars, customer_bars], loc="upper left", fontsize=9)

    @staticmethod
    def _draw_pie(ax, rows: Sequence[DataPoint]) -> None:
        colors = [COLOR_PALETTE[i % len(COLOR_PALETTE)] for i in range(len(rows))]
        ax.pie(
            [row.revenue for row in rows],
            labels=[row.label for row in rows],
            colors=colors,
            startangle=90,
            wedgeprops={"edgecolor": "#ffffff"},
            textprops={"fontsize": 9, "color": "#374151"},
        )
        ax.set_title("Revenue by Period", fontsize=13, fontweight="bold", color="#1f2937", pad=12)
        ax.axis("equal")
