from __future__ import annotations


class SensorPlatformError(RuntimeError):
    """The platform sensor service cannot support the feature on this device."""


class SensorUnavailableError(SensorPlatformError):
    def __init__(self, sensor_type):
        super().__init__(f"No default sensor of type {sensor_type.name} on this device")
        self.sensor_type = sensor_type


class ChannelError(SensorPlatformError):
    pass


class PlatformStatusError(SensorPlatformError):
    def __init__(self, operation: str, status: int):
        super().__init__(f"Platform call '{operation}' failed with status {status}")
        self.operation = operation
        self.status = status


class SeriesIndexError(IndexError):
    pass


class ConfigError(ValueError):
    pass
