"""
Show how the telemetry pipeline is configured for the current environment.

``python -m telemetry_core`` prints the settings selected by
``TELEMETRY_ENV`` and the pipeline options derived from them. Serving
snapshots is done by ``telemetry_server``.
"""

import sys

from telemetry_core.application.fetch_snapshot import PipelineOptions
from telemetry_core.config.environments import get_settings


def describe_pipeline(options: PipelineOptions) -> str:
    so2 = options.so2_filter
    so2_text = f"{so2.minimum}..{so2.maximum}" if so2.enabled else "off"
    return (
        f"device={options.default_device_id or '<first available>'} "
        f"window={options.max_points} full-read-below={options.min_points} "
        f"so2-filter={so2_text}"
    )


def main() -> None:
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Could not load telemetry settings: {e}")
        sys.exit(1)

    print(f"Environment: {settings.ENVIRONMENT.value}")
    print(f"Realtime store: {settings.FIREBASE_DB_URL or '<unset>'}")
    print(f"Prediction service: {settings.PREDICTION_API_URL or '<unset>'}")
    print(f"Pipeline: {describe_pipeline(PipelineOptions.from_settings(settings))}")
    sys.exit(0)


if __name__ == "__main__":
    main()
