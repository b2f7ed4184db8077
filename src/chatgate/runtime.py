"""
Runtime entry point for the chat gateway and its workers.

This module is invoked via `python -m chatgate.runtime` (or the `chatgate`
console script). NODE_NUMBER selects the role: 0 gateway, 1 translation
worker, 2 audio worker.
"""

import logging
import signal
import sys
from types import FrameType

import uvicorn

from .config import ChatGateSettings, get_settings
from .enums import NodeRole
from .runtime_factory import create_app
from .telemetry import setup_tracing, shutdown_tracing


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def setup_signal_handlers(server: uvicorn.Server) -> None:
    """
    Setup graceful shutdown handlers for SIGINT and SIGTERM.

    Args:
        server: The uvicorn server instance to shutdown
    """

    def signal_handler(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received signal %d, initiating graceful shutdown...", signum)
        server.should_exit = True

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def log_startup_banner(settings: ChatGateSettings) -> None:
    """Log where this node listens and, for the gateway, where its workers are."""
    logger.info("=" * 60)
    logger.info("chatgate node %d (%s)", settings.node_number, settings.role.value)
    logger.info("=" * 60)
    logger.info("Listen Address: %s:%d", settings.listen_host, settings.listen_port)
    if settings.role is NodeRole.GATEWAY:
        logger.info("Translation Worker: %s", settings.translation_url)
        logger.info("Audio Worker: %s", settings.audio_url)
        logger.info(
            "Worker Timeout: %s",
            "none" if settings.worker_timeout_seconds is None else settings.worker_timeout_seconds,
        )
        logger.info("Max Audio Bytes: %d", settings.max_audio_bytes)
    logger.info("Tracing: %s", "on" if settings.enable_tracing else "off")
    logger.info("=" * 60)


def main() -> None:
    """
    Main entry point for a chatgate node.
    """
    try:
        settings = get_settings()

        logging.getLogger().setLevel(settings.log_level)
        logger.setLevel(settings.log_level)

        # Tracing must be configured before the app is instrumented
        setup_tracing(settings, service_name=f"chatgate-{settings.role.value}")
        log_startup_banner(settings)

        app = create_app(settings)

        config = uvicorn.Config(
            app,
            host=settings.listen_host,
            port=settings.listen_port,
            log_level=settings.log_level.lower(),
            access_log=True,
            server_header=False,
            date_header=False,
        )

        server = uvicorn.Server(config)
        setup_signal_handlers(server)

        logger.info(
            "Starting %s service on http://%s:%d",
            settings.role.value,
            settings.listen_host,
            settings.listen_port,
        )
        server.run()

        logger.info("%s service shutdown complete", settings.role.value)

    except Exception:
        logger.exception("Fatal error during startup")
        sys.exit(1)
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    main()
