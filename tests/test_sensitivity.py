"""Sensitivity policy tests."""

import pytest

from libs.core.application.sensitivity import aggregate, qualifies, threshold_for
from libs.core.domain.entities import Detection, SensitivityLevel


def _detection(score: float) -> Detection:
    return Detection(bbox=(0.0, 0.0, 10.0, 10.0), label="fire", score=score)


def test_threshold_table() -> None:
    assert threshold_for(SensitivityLevel.LOW) == 0.70
    assert threshold_for(SensitivityLevel.MEDIUM) == 0.50
    assert threshold_for(SensitivityLevel.HIGH) == 0.30


def test_threshold_decreases_as_sensitivity_increases() -> None:
    ordered = [SensitivityLevel.LOW, SensitivityLevel.MEDIUM, SensitivityLevel.HIGH]
    thresholds = [threshold_for(level) for level in ordered]
    assert thresholds == sorted(thresholds, reverse=True)


def test_threshold_accepts_string_values() -> None:
    assert threshold_for("high") == 0.30


def test_unknown_level_raises() -> None:
    with pytest.raises(ValueError, match="Unknown sensitivity level"):
        threshold_for("extreme")


def test_aggregate_is_max_score() -> None:
    detections = [_detection(0.2), _detection(0.91), _detection(0.4)]
    assert aggregate(detections) == 0.91


def test_aggregate_of_empty_set_is_zero() -> None:
    assert aggregate([]) == 0.0


def test_single_strong_candidate_is_not_averaged_away() -> None:
    noise = [_detection(0.31) for _ in range(20)]
    assert qualifies([*noise, _detection(0.75)], SensitivityLevel.LOW)


def test_score_equal_to_threshold_does_not_qualify() -> None:
    assert not qualifies([_detection(0.5)], SensitivityLevel.MEDIUM)
