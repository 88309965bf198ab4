"""Frame replay provider tests."""

from pathlib import Path

import pytest

from libs.core.domain.entities import CapabilityResult, Coordinates, Frame, ReadyState
from libs.infra.replay.frame_replay import (
    LabelFileModel,
    ReplayCapabilityProvider,
    build_replay_config,
    resolve_label_path,
)


def _frames(tmp_path: Path, count: int = 2) -> Path:
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    for index in range(count):
        (frames_dir / f"frame_{index:03d}.jpg").write_bytes(b"jpeg-%d" % index)
    (frames_dir / "notes.md").write_text("not a frame", encoding="utf-8")
    return frames_dir


def test_build_replay_config_validates_input(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="frames dir not found"):
        build_replay_config(str(tmp_path / "missing"))

    frames_dir = _frames(tmp_path)
    with pytest.raises(ValueError, match="fps must be positive"):
        build_replay_config(str(frames_dir), fps=0)

    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(ValueError, match="no frames found"):
        build_replay_config(str(empty))

    config = build_replay_config(str(frames_dir))
    assert [path.name for path in config.frame_files] == ["frame_000.jpg", "frame_001.jpg"]


def test_resolve_label_path(tmp_path: Path) -> None:
    frame = tmp_path / "frame_000.jpg"

    assert resolve_label_path(frame, None) == tmp_path / "frame_000.txt"
    assert resolve_label_path(frame, tmp_path / "labels") == tmp_path / "labels" / "frame_000.txt"


@pytest.mark.asyncio
async def test_replay_source_serves_frames_then_ends(tmp_path: Path) -> None:
    config = build_replay_config(str(_frames(tmp_path)), fps=1000)
    provider = ReplayCapabilityProvider(config)
    devices = await provider.list_devices()
    source = await provider.open_frame_source(devices[0].device_id)

    assert source.capture_still() is None
    first = await source.read_frame()
    assert Path(first.data).name == "frame_000.jpg"
    assert source.capture_still() == b"jpeg-0"
    await source.read_frame()

    assert source.ready_state is ReadyState.ENDED
    with pytest.raises(RuntimeError):
        await source.read_frame()


@pytest.mark.asyncio
async def test_replay_capabilities(tmp_path: Path) -> None:
    config = build_replay_config(str(_frames(tmp_path)))
    provider = ReplayCapabilityProvider(config)
    source = await provider.open_frame_source(None)

    assert await provider.set_torch(source, True) is CapabilityResult.UNSUPPORTED
    assert await provider.request_wake_lock() is CapabilityResult.UNSUPPORTED
    assert await provider.get_coordinates() is None

    config.coordinates = Coordinates(latitude=1.0, longitude=2.0, accuracy=10.0, timestamp=0.0)
    fix = await provider.get_coordinates()
    assert fix is not None
    assert fix.latitude == 1.0
    assert fix.timestamp > 0

    source.stop()
    assert source.ready_state is ReadyState.ENDED


def test_label_file_model_parses_yolo_lines(tmp_path: Path) -> None:
    frames_dir = _frames(tmp_path, count=1)
    labels_dir = tmp_path / "labels"
    labels_dir.mkdir()
    (labels_dir / "frame_000.txt").write_text(
        "0 0.5 0.5 0.2 0.4 0.81\n1 0.25 0.25 0.1 0.1\nbad line\n",
        encoding="utf-8",
    )
    config = build_replay_config(str(frames_dir), labels_dir=str(labels_dir))
    model = LabelFileModel(labels_dir, class_names=["fire", "smoke"], default_score=0.6)

    predictions = model.predict(Frame(data=config.frame_files[0], width=10, height=10))

    assert [item.label for item in predictions] == ["fire", "smoke"]
    assert predictions[0].score == 0.81
    assert predictions[1].score == 0.6
    assert predictions[0].box == pytest.approx((0.3, 0.4, 0.7, 0.6))


def test_label_file_model_without_labels_predicts_nothing(tmp_path: Path) -> None:
    frames_dir = _frames(tmp_path, count=1)
    model = LabelFileModel()

    assert model.predict(Frame(data=frames_dir / "frame_000.jpg", width=1, height=1)) == []
