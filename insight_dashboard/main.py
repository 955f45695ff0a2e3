"""Command-line entry point: logging setup and Gradio launch"""
import logging

import gradio as gr

from insight_dashboard.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name=None) -> int:
    """Configure the root logger; unknown level names fall back to INFO.

    DEBUG=true forces debug output regardless of LOG_LEVEL.
    """
    level_name = level_name or ("DEBUG" if settings.debug else settings.log_level)
    level = getattr(logging, str(level_name).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(level)
    return level


def main():
    """Configure logging, build the dashboard and serve it"""
    configure_logging()
    from insight_dashboard.app import DashboardApp

    demo = DashboardApp().create_interface()
    demo.queue(default_concurrency_limit=None)
    launch_kwargs = {
        "server_name": settings.server_host,
        "server_port": settings.gradio_server_port,
        "share": settings.gradio_share,
    }
    logging.getLogger(__name__).info(
        "Starting Insight Dashboard on %s:%s", settings.server_host, settings.gradio_server_port
    )
    # Gradio 6 takes the theme in launch(); older releases reject the argument
    try:
        demo.launch(theme=gr.themes.Soft(), **launch_kwargs)
    except TypeError:
        demo.launch(**launch_kwargs)


if __name__ == "__main__":
    main()
