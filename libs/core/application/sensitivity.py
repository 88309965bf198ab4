"""Mapping from sensitivity levels to detection confidence thresholds."""

from collections.abc import Iterable

from libs.core.domain.entities import Detection, SensitivityLevel

SENSITIVITY_THRESHOLDS: dict[SensitivityLevel, float] = {
    SensitivityLevel.LOW: 0.70,
    SensitivityLevel.MEDIUM: 0.50,
    SensitivityLevel.HIGH: 0.30,
}


def threshold_for(level: SensitivityLevel | str) -> float:
    try:
        return SENSITIVITY_THRESHOLDS[SensitivityLevel(level)]
    except ValueError as error:
        raise ValueError(f"Unknown sensitivity level: {level!r}") from error


def aggregate(detections: Iterable[Detection]) -> float:
    """Return the strongest score in the detection set, or 0 when empty."""
    return max((item.score for item in detections), default=0.0)


def qualifies(detections: Iterable[Detection], level: SensitivityLevel | str) -> bool:
    return aggregate(detections) > threshold_for(level)
