"""
Canonical entry point for telemetry_server package.

Usage:
    python -m telemetry_server api --environment development
    python -m telemetry_server watch --device 6C:C8:40:35:32:F4
    python -m telemetry_server api --test-mode
"""

import argparse
import logging
import os
import sys
from functools import partial

import uvicorn

from telemetry_core.config.environments import get_settings
from telemetry_core.domain.models import Snapshot


def setup_logging(config) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    return None


def run_api_server(args: argparse.Namespace) -> None:
    """Run the FastAPI server with a started live view."""
    from telemetry_server.adapters.api.main import create_app
    from telemetry_server.runtime import build_runtime

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    host = args.host or config.API_HOST
    port = args.port or config.API_PORT

    log.info("Starting API server...")
    log.info("Environment: %s", args.environment)
    log.info("Host: %s", host)
    log.info("Port: %s", port)
    log.info("Test mode: %s", args.test_mode)

    app = create_app(partial(build_runtime, config, args.device, args.test_mode))
    uvicorn.run(app, host=host, port=port, log_level=config.LOG_LEVEL.lower())
    return None


def describe(snapshot: Snapshot) -> str:
    latest = ", ".join(f"{p.value}={v}" for p, v in snapshot.latest.items())
    return (
        f"[{snapshot.status.value}] {snapshot.device_id or '-'} "
        f"air={snapshot.metrics.air_quality_level} hazard={snapshot.metrics.hazard_level} "
        f"{latest}"
    )


def run_watch(args: argparse.Namespace) -> None:
    """Log every snapshot the realtime subscription emits until interrupted."""
    import threading

    from telemetry_server.runtime import build_runtime

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    runtime = build_runtime(config, args.device, args.test_mode)
    runtime.start()
    subscription = runtime.view.subscription
    if subscription is not None:
        subscription.on_snapshot(lambda s: log.info("%s", describe(s)))
        subscription.on_dependent_refresh(
            lambda: log.info("Predictions refreshed: %s", runtime.view.predictions())
        )

    log.info("Watching %s (Ctrl+C to stop)", args.device or config.DEFAULT_DEVICE_ID)
    log.info("%s", describe(runtime.view.snapshot()))
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        runtime.stop()
    return None


def main() -> None:
    """Main entry point for telemetry_server commands."""
    parser = argparse.ArgumentParser(description="Air Telemetry Server - API and live watch")
    parser.add_argument(
        "--environment",
        choices=["production", "development", "testing"],
        default="development",
        help="Environment to run in",
    )
    parser.add_argument(
        "command",
        choices=["api", "watch"],
        help="Command to run",
    )
    parser.add_argument("--device", help="Device id to follow (overrides the default device)")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Use a seeded in-memory store and generated readings",
    )
    parser.add_argument("--host", help="Host to bind to (overrides config)")
    parser.add_argument("--port", type=int, help="Port to bind to (overrides config)")

    args = parser.parse_args()

    # Set environment variable for config
    os.environ["TELEMETRY_ENV"] = args.environment

    if args.command == "api":
        run_api_server(args)
    elif args.command == "watch":
        run_watch(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
