from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class SensorType(Enum):
    """Android NDK sensor type codes for the sensors this package understands."""
    UNAVAILABLE = 0
    ACCELEROMETER = 1
    GYROSCOPE = 4
    GRAVITY = 9
    ROTATION = 11  # rotation vector
    COMPASS = 20  # geomagnetic rotation vector
    ADDITIONAL_INFO = 33

    @classmethod
    def from_code(cls, code: int) -> Optional["SensorType"]:
        try:
            return cls(code)
        except ValueError:
            return None


TRACKED_SENSOR_TYPES: Tuple[SensorType, ...] = (
    SensorType.ACCELEROMETER,
    SensorType.GYROSCOPE,
    SensorType.ROTATION,
    SensorType.COMPASS,
    SensorType.GRAVITY,
)


class SensorAccuracy(Enum):
    NO_CONTACT = -1
    UNRELIABLE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def from_code(cls, code: int) -> "SensorAccuracy":
        try:
            return cls(code)
        except ValueError:
            return cls.UNRELIABLE


class ValueKind(Enum):
    VECTOR3 = 3
    QUATERNION = 4


VALUE_KIND_BY_SENSOR = {
    SensorType.ACCELEROMETER: ValueKind.VECTOR3,
    SensorType.GYROSCOPE: ValueKind.VECTOR3,
    SensorType.GRAVITY: ValueKind.VECTOR3,
    SensorType.ROTATION: ValueKind.QUATERNION,
    SensorType.COMPASS: ValueKind.QUATERNION,
}


@dataclass(frozen=True)
class SensorValues:
    """
    Either a 3-component vector or a 4-component (x, y, z, w) orientation.

    The kind comes from the sensor type; the component count is checked here.
    """
    kind: ValueKind
    components: Tuple[float, ...]

    def __post_init__(self):
        components = tuple(float(c) for c in self.components)
        if len(components) != self.kind.value:
            raise ValueError(
                f"{self.kind.name} needs {self.kind.value} components, got {len(components)}"
            )
        object.__setattr__(self, "components", components)

    @classmethod
    def vector3(cls, x: float, y: float, z: float) -> "SensorValues":
        return cls(ValueKind.VECTOR3, (x, y, z))

    @classmethod
    def quaternion(cls, x: float, y: float, z: float, w: float) -> "SensorValues":
        return cls(ValueKind.QUATERNION, (x, y, z, w))

    @property
    def is_vector3(self) -> bool:
        return self.kind is ValueKind.VECTOR3

    def as_array(self) -> np.ndarray:
        return np.array(self.components, dtype=float)

    def vec3(self) -> np.ndarray:
        if not self.is_vector3:
            raise TypeError(f"Expected VECTOR3 values, got {self.kind.name}")
        return self.as_array()

    def blend(self, new: "SensorValues", alpha: float) -> "SensorValues":
        """Linear blend self*(1-alpha) + new*alpha, per component (no renormalization)."""
        if new.kind is not self.kind:
            return new
        blended = self.as_array() * (1.0 - alpha) + new.as_array() * alpha
        return SensorValues(self.kind, tuple(blended))


@dataclass(frozen=True)
class SensorEvent:
    accuracy: SensorAccuracy
    sensor_type: SensorType
    timestamp: int  # ns, monotonic hardware clock
    values: SensorValues

    @classmethod
    def default(cls) -> "SensorEvent":
        return cls(
            accuracy=SensorAccuracy.NO_CONTACT,
            sensor_type=SensorType.UNAVAILABLE,
            timestamp=0,
            values=SensorValues.vector3(0.0, 0.0, 0.0),
        )

    def with_values(self, values: SensorValues) -> "SensorEvent":
        return replace(self, values=values)


def identity_quaternion() -> np.ndarray:
    return np.array([0.0, 0.0, 0.0, 1.0])


@dataclass
class KinematicState:
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # (x, y, z, w); reserved for a complementary filter, never touched by the integrator
    orientation: np.ndarray = field(default_factory=identity_quaternion)
    rotation: np.ndarray = field(default_factory=identity_quaternion)

    def copy(self) -> "KinematicState":
        return KinematicState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            orientation=self.orientation.copy(),
            rotation=self.rotation.copy(),
        )
