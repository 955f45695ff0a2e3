"""Unit tests for core components"""
import logging
from datetime import datetime

import pytest
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from insight_dashboard.components.charts import ChartRenderer, COLOR_PALETTE
from insight_dashboard.components.errors import SynthesisFault
from insight_dashboard.components.insights import (
    InsightGenerator,
    calculate_growth_rate,
    FALLBACK_INSIGHT,
)
from insight_dashboard.components.models import DataPoint, QueryRecord, SummaryStats
from insight_dashboard.components.scheduler import ManualScheduler, TimerScheduler
from insight_dashboard.components.suggestions import (
    AI_SUGGESTIONS,
    COMMAND_SHORTCUTS,
    SuggestionPanel,
    SuggestionScorer,
)
from insight_dashboard.components.synthesizer import BASE_DATA, MockResultSynthesizer
from insight_dashboard.main import configure_logging


def _summary(growth="51.11", customers=5700):
    return SummaryStats(total_revenue=2260000, total_customers=customers, growth_rate_percent=growth)


class TestGrowthRate:
    """Test growth-rate calculation"""

    def test_base_dataset(self):
        assert calculate_growth_rate(BASE_DATA) == "51.11"

    def test_decrease_keeps_sign(self):
        rows = [DataPoint("A", 200, 1, 1), DataPoint("B", 150, 1, 1)]
        assert calculate_growth_rate(rows) == "-25.00"

    def test_uses_first_and_last_rows_only(self):
        rows = [DataPoint("A", 100, 1, 1), DataPoint("B", 999999, 1, 1), DataPoint("C", 110, 1, 1)]
        assert calculate_growth_rate(rows) == "10.00"

    @pytest.mark.parametrize("rows", [None, [], [DataPoint("Q1", 450000, 1200, 50)]])
    def test_not_enough_rows(self, rows):
        assert calculate_growth_rate(rows) == "N/A"

    def test_zero_first_revenue(self):
        rows = [DataPoint("A", 0, 1, 1), DataPoint("B", 100, 1, 1)]
        assert calculate_growth_rate(rows) == "Unavailable"

    def test_malformed_rows(self):
        assert calculate_growth_rate([object(), object()]) == "Unavailable"

    def test_non_numeric_revenue(self):
        rows = [DataPoint("A", "lots", 1, 1), DataPoint("B", 100, 1, 1)]
        assert calculate_growth_rate(rows) == "Unavailable"


class TestInsightGenerator:
    """Test ordered insight rules"""

    def test_revenue_increase(self):
        insight = InsightGenerator().generate_insight("Top revenue drivers", _summary())
        assert insight == "Revenue increased by 51.11%"

    def test_revenue_decrease_uses_absolute_value(self):
        insight = InsightGenerator().generate_insight("revenue", _summary(growth="-25.00"))
        assert insight == "Revenue decreased by 25%"

    def test_zero_growth_is_not_an_increase(self):
        insight = InsightGenerator().generate_insight("revenue", _summary(growth="0.00"))
        assert insight == "Revenue decreased by 0%"

    def test_trailing_zero_is_dropped(self):
        insight = InsightGenerator().generate_insight("revenue", _summary(growth="50.10"))
        assert insight == "Revenue increased by 50.1%"

    def test_revenue_with_unavailable_growth(self):
        insight = InsightGenerator().generate_insight("revenue", _summary(growth="N/A"))
        assert insight == "Revenue change is unavailable"

    def test_matching_is_case_insensitive(self):
        insight = InsightGenerator().generate_insight("REVENUE by region", _summary())
        assert insight.startswith("Revenue increased")

    def test_customer_strong(self):
        insight = InsightGenerator().generate_insight("customer churn", _summary())
        assert insight == "Customer base shows strong growth"

    def test_customer_moderate_at_threshold(self):
        insight = InsightGenerator().generate_insight("customer churn", _summary(customers=1500))
        assert insight == "Customer base shows moderate growth"

    def test_first_rule_wins(self):
        insight = InsightGenerator().generate_insight("customer revenue by product", _summary())
        assert insight == "Revenue increased by 51.11%"

    def test_product(self):
        insight = InsightGenerator().generate_insight("/top-products", _summary())
        assert insight == "Product portfolio demonstrates consistent performance"

    def test_fallback(self):
        assert InsightGenerator().generate_insight("Operational efficiency", _summary()) == FALLBACK_INSIGHT


class TestMockResultSynthesizer:
    """Test mock result synthesis"""

    def test_summary_totals(self):
        result = MockResultSynthesizer().synthesize("anything")
        assert result.summary.total_revenue == 2260000
        assert result.summary.total_customers == 5700
        assert result.summary.growth_rate_percent == "51.11"

    def test_rows_are_fixed(self):
        synthesizer = MockResultSynthesizer()
        first = synthesizer.synthesize("revenue")
        second = synthesizer.synthesize("something else entirely")
        assert first.rows == second.rows == BASE_DATA
        assert [row.label for row in first.rows] == ["Q1 2023", "Q2 2023", "Q3 2023", "Q4 2023"]

    def test_exactly_one_insight(self):
        result = MockResultSynthesizer().synthesize("customer churn")
        assert result.insights == ("Customer base shows strong growth",)

    def test_growth_fault_does_not_fail_synthesis(self):
        rows = [DataPoint("A", 0, 10, 1), DataPoint("B", 100, 10, 1)]
        result = MockResultSynthesizer(base_rows=rows).synthesize("revenue")
        assert result.summary.growth_rate_percent == "Unavailable"
        assert result.insights == ("Revenue change is unavailable",)

    def test_malformed_rows_raise_synthesis_fault(self):
        rows = [DataPoint("A", None, 10, 1), DataPoint("B", 100, 10, 1)]
        with pytest.raises(SynthesisFault) as exc_info:
            MockResultSynthesizer(base_rows=rows).synthesize("revenue")
        assert exc_info.value.user_message == "Unable to process query. Please try again."


class TestSuggestionScorer:
    """Test free-text scoring and command filtering"""

    def test_command_prefix_match(self):
        assert SuggestionScorer().suggest("/reven") == [("/revenue", "Detailed revenue breakdown")]

    def test_bare_prefix_lists_all_commands_in_order(self):
        assert SuggestionScorer().suggest("/") == list(COMMAND_SHORTCUTS.items())

    def test_command_match_is_case_insensitive(self):
        assert [cmd for cmd, _ in SuggestionScorer().suggest("/CUST")] == ["/customers"]

    def test_command_must_contain_whole_text(self):
        assert SuggestionScorer().suggest("/products") == []

    def test_keyword_ranking_capped(self):
        suggestions = SuggestionScorer().suggest("revenue")
        assert len(suggestions) == 7
        assert suggestions == [s for s in AI_SUGGESTIONS if "revenue" in s.lower()][:7]

    def test_exact_phrase_ranks_first(self):
        suggestions = SuggestionScorer().suggest("customer revenue")
        assert suggestions[0] == "New vs returning customer revenue"
        assert len(suggestions) == 7
        # Ties keep the original list order
        assert suggestions[1:] == [
            "Monthly revenue breakdown by product category",
            "Year-over-year revenue growth analysis",
            "Revenue forecast for next quarter",
            "Impact of pricing changes on revenue",
            "Revenue attribution by marketing channel",
            "Customer lifetime value analysis",
        ]

    def test_short_words_are_not_keywords(self):
        scorer = SuggestionScorer()
        assert scorer.score("Sales performance by region", "by") == 10
        assert scorer.score("Quarterly financial overview", "by") == 0

    def test_keywords_score_independently(self):
        assert SuggestionScorer().score("Product revenue trends", "rev revenue") == 10

    def test_no_match(self):
        assert SuggestionScorer().suggest("zzzz") == []

    @pytest.mark.parametrize("text", ["", "   ", "\t"])
    def test_blank_query(self, text):
        assert SuggestionScorer().suggest(text) == []

    def test_idempotent(self):
        scorer = SuggestionScorer()
        assert scorer.suggest("customer analysis") == scorer.suggest("customer analysis")

    def test_custom_limit(self):
        assert len(SuggestionScorer(max_suggestions=3).suggest("revenue")) == 3


class TestSuggestionPanel:
    """Test the suggestion list host"""

    def test_update_shows_labels(self):
        panel = SuggestionPanel()
        panel.update("/rev")
        assert panel.showing
        assert panel.command_mode
        assert panel.labels() == ["/revenue: Detailed revenue breakdown"]

    def test_select_command_returns_token(self):
        panel = SuggestionPanel()
        panel.update("/fore")
        assert panel.select(0) == "/forecast"
        assert not panel.visible
        assert panel.suggestions == []

    def test_select_phrase(self):
        panel = SuggestionPanel()
        panel.update("retention")
        assert panel.select(0) == "Customer retention rates"

    def test_dismiss(self):
        panel = SuggestionPanel()
        panel.update("revenue")
        panel.dismiss()
        assert not panel.showing
        assert panel.suggestions == []

    def test_visible_but_empty_is_not_showing(self):
        panel = SuggestionPanel()
        panel.update("zzzz")
        assert panel.visible
        assert not panel.showing


class TestScheduler:
    """Test delayed callbacks"""

    def test_manual_scheduler_runs_when_due(self):
        scheduler = ManualScheduler()
        calls = []
        task = scheduler.call_later(0.5, lambda: calls.append("ran"))
        assert scheduler.advance(0.4) == 0
        assert not task.done
        assert scheduler.advance(0.2) == 1
        assert calls == ["ran"]
        assert task.done
        assert scheduler.pending == []

    def test_manual_scheduler_runs_in_due_order(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(0.3, lambda: calls.append("late"))
        scheduler.call_later(0.1, lambda: calls.append("early"))
        scheduler.advance(1.0)
        assert calls == ["early", "late"]

    def test_cancelled_task_never_runs(self):
        scheduler = ManualScheduler()
        calls = []
        task = scheduler.call_later(0.1, lambda: calls.append("ran"))
        task.cancel()
        assert scheduler.advance(1.0) == 0
        assert calls == []
        assert task.cancelled

    def test_timer_scheduler(self):
        calls = []
        task = TimerScheduler().call_later(0.01, lambda: calls.append("ran"))
        assert task.wait(timeout=2)
        assert calls == ["ran"]


class TestChartRenderer:
    """Test chart rendering"""

    def teardown_method(self):
        plt.close("all")

    @pytest.mark.parametrize("mode", ["line", "bar"])
    def test_two_series_on_twin_axes(self, mode):
        fig = ChartRenderer().render(BASE_DATA, mode)
        assert fig is not None
        assert len(fig.axes) == 2

    def test_pie_has_one_wedge_per_row(self):
        fig = ChartRenderer().render(BASE_DATA, "pie")
        ax = fig.axes[0]
        assert len(ax.patches) == len(BASE_DATA)
        assert [t.get_text() for t in ax.texts][:4] == [row.label for row in BASE_DATA]

    def test_palette_wraps(self):
        rows = [DataPoint(f"R{i}", 100 + i, 1, 1) for i in range(len(COLOR_PALETTE) + 2)]
        fig = ChartRenderer().render(rows, "pie")
        assert len(fig.axes[0].patches) == len(rows)

    def test_empty_rows(self):
        assert ChartRenderer().render([], "line") is None

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            ChartRenderer().render(BASE_DATA, "scatter")


class TestQueryRecord:
    """Test history record formatting"""

    def test_afternoon_timestamp(self):
        record = QueryRecord("q", result=None, submitted_at=datetime(2026, 10, 19, 14, 5, 9))
        assert record.format_timestamp() == "10/19/2026, 2:05:09 PM"

    def test_midnight_timestamp(self):
        record = QueryRecord("q", result=None, submitted_at=datetime(2026, 1, 2, 0, 7, 0))
        assert record.format_timestamp() == "1/2/2026, 12:07:00 AM"


class TestConfigureLogging:
    """Test root logger setup from settings"""

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_named_level(self):
        assert configure_logging("warning") == logging.WARNING
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging("chatty") == logging.INFO
        assert logging.getLogger().level == logging.INFO
