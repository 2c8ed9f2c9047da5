from datetime import datetime, timedelta

import factory

BASE_TIME = datetime(2025, 3, 14, 9, 0, 0)


def compound_stamp(minutes: int) -> str:
    """``YYYY-MM-DD_HH-mm-ss`` stamp ``minutes`` after BASE_TIME."""
    return (BASE_TIME + timedelta(minutes=minutes)).strftime("%Y-%m-%d_%H-%M-%S")


class RawReadingFactory(factory.DictFactory):
    timestamp = factory.Sequence(compound_stamp)
    aqi = 42
    so2 = 0.4
    pm25 = 12.5
    pm10 = 20.0
    co = 0.8
    no2 = 0.05
    humidity = 55.0
    temperature = 21.0


def device_window(count: int, **overrides) -> dict:
    """A ``key -> record`` window, one reading per minute in key order."""
    return {
        f"r{i:04d}": RawReadingFactory(timestamp=compound_stamp(i), **overrides)
        for i in range(count)
    }
