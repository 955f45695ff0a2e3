"""Gradio web interface for the Insight Dashboard"""
import gradio as gr
import html
import logging
import re
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.figure
from insight_dashboard.config import settings
from insight_dashboard.components.charts import ChartRenderer
from insight_dashboard.components.scheduler import TimerScheduler
from insight_dashboard.components.session import QuerySessionController
from insight_dashboard.components.suggestions import SuggestionPanel, SuggestionScorer
from insight_dashboard.components.synthesizer import MockResultSynthesizer

logger = logging.getLogger(__name__)

CHART_MODE_LABELS = {"Line Chart": "line", "Bar Chart": "bar", "Pie Chart": "pie"}

SUBMIT_LABEL = "Get Insights"
PROCESSING_LABEL = "Processing..."

# Empty state HTML cards
EMPTY_RESULTS_HTML = """
<div style='text-align: center; padding: 48px 24px; color: #9ca3af;'>
    <div style='font-size: 40px; margin-bottom: 8px; opacity: 0.5;'>📊</div>
    <div style='font-size: 15px; font-weight: 600; color: #6b7280; margin-bottom: 6px;'>No results yet</div>
    <div style='font-size: 13px; line-height: 1.6; max-width: 320px; margin: 0 auto;'>
        Ask a business question or type <code>/</code> for commands.<br>
        Revenue, customer and product metrics appear here.
    </div>
</div>"""

EMPTY_HISTORY_MD = "*No queries yet.*"


def format_currency(value) -> str:
    return f"${value:,.0f}"


def format_number(value) -> str:
    return f"{value:,.0f}"


# Characters with meaning in Markdown that user text must not trigger
_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!|<>~])")


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


class DashboardApp:
    """Main application class for the Insight Dashboard"""

    def __init__(self, processing_delay: Optional[float] = None, scheduler_factory=None):
        if processing_delay is None:
            processing_delay = settings.processing_delay_ms / 1000
        self.processing_delay = processing_delay
        self.scheduler_factory = scheduler_factory or TimerScheduler

        # Stateless collaborators shared by every session
        self.synthesizer = MockResultSynthesizer()
        self.scorer = SuggestionScorer(max_suggestions=settings.max_suggestions)
        self.chart_renderer = ChartRenderer()

        logger.info(
            "Startup config: processing_delay=%.3fs max_suggestions=%d chart_mode=%s debug=%s",
            self.processing_delay,
            settings.max_suggestions,
            settings.default_chart_mode,
            settings.debug,
        )

    # ------------------------------------------------------------------
    # Session State Management (per-user isolation)
    # ------------------------------------------------------------------

    @staticmethod
    def create_session_state() -> dict:
        """Create a new session state dictionary for a user session."""
        return {
            "controller": None,  # Will be initialized on first use
            "suggestions": None,
            "chart_mode": settings.default_chart_mode,
        }

    def _ensure_session_initialized(self, session_state: dict) -> dict:
        """Ensure session state is properly initialized."""
        if session_state is None:
            session_state = self.create_session_state()

        if session_state.get("controller") is None:
            session_state["controller"] = QuerySessionController(
                synthesizer=self.synthesizer,
                scheduler=self.scheduler_factory(),
                processing_delay=self.processing_delay,
            )
        if session_state.get("suggestions") is None:
            session_state["suggestions"] = SuggestionPanel(self.scorer)
        session_state.setdefault("chart_mode", settings.default_chart_mode)

        return session_state

    # ------------------------------------------------------------------
    # Formatting Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _format_error(error: Optional[str]) -> str:
        if not error:
            return ""
        return (
            "<div role='alert' style='background:#fee2e2; border:1px solid #f87171; color:#b91c1c; "
            "padding:12px 16px; border-radius:8px; margin-bottom:8px;'>"
            f"<strong>Error: </strong><span>{html.escape(error)}</span></div>"
        )

    @staticmethod
    def _format_summary(result) -> str:
        """Render the three summary cards."""
        if result is None:
            return EMPTY_RESULTS_HTML
        summary = result.summary
        cards = [
            ("Total Revenue", format_currency(summary.total_revenue)),
            ("Total Customers", format_number(summary.total_customers)),
            ("Growth Rate", f"{summary.growth_rate_percent}%"),
        ]
        cells = "".join(
            "<div style='background:#ffffff; padding:12px; border-radius:8px; "
            "box-shadow:0 1px 3px rgba(0,0,0,0.1);'>"
            f"<div style='font-weight:700; color:#2563eb;'>{title}</div>"
            f"<div style='font-size:18px; color:#1f2937;'>{value}</div></div>"
            for title, value in cards
        )
        return (
            "<div style='background:#eff6ff; padding:16px; border-radius:8px;'>"
            "<div style='font-size:18px; font-weight:600; margin-bottom:12px;'>Insights Summary</div>"
            "<div style='display:grid; grid-template-columns:repeat(3, 1fr); gap:12px;'>"
            f"{cells}</div></div>"
        )

    @staticmethod
    def _format_insights(result) -> str:
        if result is None:
            return ""
        lines = ["**Key Insights**", ""]
        lines.extend(f"- {insight}" for insight in result.insights)
        return "\n".join(lines)

    @staticmethod
    def _format_history(history) -> str:
        """Format query history as markdown, oldest first."""
        if not history:
            return EMPTY_HISTORY_MD
        lines = []
        for i, record in enumerate(history, 1):
            lines.append(f"**{i}.** {escape_markdown(record.query_text)}\n   {record.format_timestamp()}")
        return "\n\n".join(lines)

    @staticmethod
    def _history_choices(history) -> list:
        return [
            (f"{i + 1}. {record.query_text} · {record.format_timestamp()}", i)
            for i, record in enumerate(history)
        ]

    def _generate_chart(self, session_state: dict) -> Optional[matplotlib.figure.Figure]:
        result = session_state["controller"].state.current_result
        if result is None:
            return None
        return self.chart_renderer.render(result.rows, session_state["chart_mode"])

    @staticmethod
    def _suggestions_update(panel: SuggestionPanel):
        if not panel.showing:
            return gr.update(choices=[], value=None, visible=False)
        return gr.update(choices=panel.labels(), value=None, visible=True)

    def _render_view(self, session_state: dict) -> tuple:
        """Full dashboard refresh: query box through history, then session state."""
        state = session_state["controller"].state
        result = state.current_result
        chart_label = next(
            label for label, mode in CHART_MODE_LABELS.items()
            if mode == session_state["chart_mode"]
        )
        return (
            gr.update(value=state.current_query_text),
            self._format_error(state.last_error),
            gr.update(
                value=PROCESSING_LABEL if state.is_processing else SUBMIT_LABEL,
                interactive=bool(state.current_query_text),
            ),
            self._suggestions_update(session_state["suggestions"]),
            gr.update(value=chart_label, visible=result is not None),
            self._generate_chart(session_state),
            self._format_summary(result),
            self._format_insights(result),
            self._format_history(state.history),
            gr.update(choices=self._history_choices(state.history), value=None),
            session_state,
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def handle_query_input(self, text: str, session_state: dict) -> tuple:
        """Keystroke in the query box: update the session and refresh suggestions."""
        session_state = self._ensure_session_initialized(session_state)
        state = session_state["controller"].set_query(text or "")
        panel = session_state["suggestions"]
        panel.update(state.current_query_text)
        return (
            self._format_error(state.last_error),
            self._suggestions_update(panel),
            gr.update(interactive=bool(state.current_query_text)),
            session_state,
        )

    def select_suggestion(self, index: int, session_state: dict) -> tuple:
        """Apply the clicked suggestion to the query box."""
        session_state = self._ensure_session_initialized(session_state)
        panel = session_state["suggestions"]
        if not 0 <= index < len(panel.suggestions):
            logger.warning("Ignoring stale suggestion index %s", index)
            panel.dismiss()
            query_text = session_state["controller"].state.current_query_text
        else:
            query_text = panel.select(index)
        state = session_state["controller"].set_query(query_text)
        return (
            gr.update(value=state.current_query_text),
            self._suggestions_update(panel),
            gr.update(interactive=bool(state.current_query_text)),
            self._format_error(state.last_error),
            session_state,
        )

    def handle_submit(self, session_state: dict):
        """Submit the current query; yields the processing view, then the settled view."""
        session_state = self._ensure_session_initialized(session_state)
        session_state["suggestions"].dismiss()
        task = session_state["controller"].submit()
        yield self._render_view(session_state)
        if task is not None:
            task.wait()
            yield self._render_view(session_state)

    def handle_clear(self, session_state: dict) -> tuple:
        session_state = self._ensure_session_initialized(session_state)
        session_state["suggestions"].dismiss()
        session_state["controller"].clear_history()
        return self._render_view(session_state)

    def handle_chart_mode(self, label: str, session_state: dict) -> tuple:
        """Switch visualization type; only the chart is redrawn."""
        session_state = self._ensure_session_initialized(session_state)
        session_state["suggestions"].dismiss()
        session_state["chart_mode"] = CHART_MODE_LABELS.get(label, settings.default_chart_mode)
        return (
            self._generate_chart(session_state),
            self._suggestions_update(session_state["suggestions"]),
            session_state,
        )

    def handle_rerun(self, index, session_state: dict) -> tuple:
        """Show a stored result from history again without recomputing it."""
        session_state = self._ensure_session_initialized(session_state)
        session_state["suggestions"].dismiss()
        controller = session_state["controller"]
        history = controller.state.history
        if index is None or not 0 <= int(index) < len(history):
            gr.Info("Select a query from the history to rerun.")
        else:
            controller.rerun(history[int(index)])
        return self._render_view(session_state)

    # ------------------------------------------------------------------
    # Interface
    # ------------------------------------------------------------------

    def create_interface(self) -> gr.Blocks:
        """Create Gradio interface"""
        with gr.Blocks(title="Gen AI Analytics Dashboard") as demo:
            gr.Markdown("# Gen AI Analytics Dashboard")

            error_output = gr.HTML(value="")

            with gr.Row():
                with gr.Column(scale=5):
                    msg = gr.Textbox(
                        label="Ask a business question",
                        placeholder="Ask a business question or use /commands",
                        lines=1,
                    )
                    suggestions_output = gr.Radio(
                        choices=[],
                        label="Suggestions",
                        visible=False,
                    )
                    with gr.Row():
                        submit_btn = gr.Button(SUBMIT_LABEL, variant="primary", scale=4, interactive=False)
                        clear_btn = gr.Button("Clear History", variant="stop", scale=1)

                    chart_mode = gr.Radio(
                        choices=list(CHART_MODE_LABELS),
                        value=next(
                            label for label, mode in CHART_MODE_LABELS.items()
                            if mode == settings.default_chart_mode
                        ),
                        label="Visualization",
                        visible=False,
                    )
                    chart_output = gr.Plot(label="Visualization", show_label=False)
                    summary_output = gr.HTML(value=EMPTY_RESULTS_HTML)
                    insights_output = gr.Markdown(value="")

                with gr.Column(scale=3):
                    with gr.Accordion("🗂️ Query History", open=True):
                        history_output = gr.Markdown(value=EMPTY_HISTORY_MD)
                        history_select = gr.Dropdown(
                            choices=[],
                            label="Rerun a previous query",
                            interactive=True,
                        )
                        rerun_btn = gr.Button("Rerun", variant="secondary", size="sm")

            # Session state for per-user isolation
            session_state = gr.State(value=self.create_session_state())

            view_outputs = [
                msg, error_output, submit_btn, suggestions_output, chart_mode,
                chart_output, summary_output, insights_output, history_output,
                history_select, session_state,
            ]

            msg.input(
                self.handle_query_input,
                inputs=[msg, session_state],
                outputs=[error_output, suggestions_output, submit_btn, session_state],
                queue=False,
            )

            def on_suggestion_select(session_state, evt: gr.SelectData):
                return self.select_suggestion(evt.index, session_state)

            suggestions_output.select(
                on_suggestion_select,
                inputs=[session_state],
                outputs=[msg, suggestions_output, submit_btn, error_output, session_state],
                queue=False,
            )

            msg.submit(self.handle_submit, inputs=[session_state], outputs=view_outputs)
            submit_btn.click(self.handle_submit, inputs=[session_state], outputs=view_outputs)
            clear_btn.click(self.handle_clear, inputs=[session_state], outputs=view_outputs)
            rerun_btn.click(
                self.handle_rerun, inputs=[history_select, session_state], outputs=view_outputs
            )
            chart_mode.input(
                self.handle_chart_mode,
                inputs=[chart_mode, session_state],
                outputs=[chart_output, suggestions_output, session_state],
            )

        return demo

