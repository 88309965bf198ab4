"""Capability provider that replays a directory of frames as a live feed.

Predictions come from YOLO-style label files next to (or alongside in a
separate directory) each frame: one `class cx cy w h [score]` line per region,
coordinates normalised to the frame size.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from libs.core.domain.entities import (
    CapabilityResult,
    Coordinates,
    Frame,
    RawPrediction,
    ReadyState,
    VideoDevice,
)

logger = logging.getLogger(__name__)

FRAME_SUFFIXES = {".png", ".jpg", ".jpeg"}
DEFAULT_FRAME_SIZE = (1280, 720)


@dataclass
class ReplayConfig:
    """Configuration for frame replay."""

    frame_files: list[Path]
    labels_path: Path | None
    fps: float
    frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE
    default_score: float = 0.95
    coordinates: Coordinates | None = None
    battery_level: float | None = None


def build_replay_config(
    frames_dir: str,
    labels_dir: str | None = None,
    fps: float = 2.0,
    frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE,
    default_score: float = 0.95,
) -> ReplayConfig:
    """Validate input and create replay config."""
    frames_path = Path(frames_dir)
    if not frames_path.exists():
        raise ValueError(f"frames dir not found: {frames_path}")

    labels_path = Path(labels_dir) if labels_dir else None
    if labels_path is not None and not labels_path.exists():
        raise ValueError(f"labels dir not found: {labels_path}")

    if fps <= 0:
        raise ValueError("fps must be positive")

    frame_files = sorted(
        path for path in frames_path.iterdir() if path.suffix.lower() in FRAME_SUFFIXES
    )
    if not frame_files:
        raise ValueError("no frames found")

    return ReplayConfig(
        frame_files=frame_files,
        labels_path=labels_path,
        fps=fps,
        frame_size=frame_size,
        default_score=default_score,
    )


def resolve_label_path(frame_path: Path, labels_dir: Path | None) -> Path:
    if labels_dir is None:
        return frame_path.with_suffix(".txt")
    return labels_dir / f"{frame_path.stem}.txt"


class ReplayFrameSource:
    """Serves the configured frames in order, paced at the configured fps."""

    def __init__(self, config: ReplayConfig) -> None:
        self._config = config
        self._index = 0
        self._current: Path | None = None
        self._next_at = time.monotonic()
        self._stopped = False
        self.stop_count = 0

    @property
    def ready_state(self) -> ReadyState:
        if self._stopped or self._index >= len(self._config.frame_files):
            return ReadyState.ENDED
        return ReadyState.READY_FOR_CAPTURE

    async def read_frame(self) -> Frame:
        if self.ready_state is not ReadyState.READY_FOR_CAPTURE:
            raise RuntimeError("replay source has no more frames")
        delay = self._next_at - time.monotonic()
        if delay > 0:
            await asyncio.sleep(delay)
        self._next_at = time.monotonic() + 1.0 / self._config.fps

        frame_path = self._config.frame_files[self._index]
        self._index += 1
        self._current = frame_path
        width, height = self._config.frame_size
        return Frame(data=frame_path, width=width, height=height, captured_at=time.time())

    def capture_still(self) -> bytes | None:
        if self._current is None:
            return None
        return self._current.read_bytes()

    def stop(self) -> None:
        self._stopped = True
        self.stop_count += 1


class LabelFileModel:
    """Detection model that reads its predictions from label files."""

    def __init__(
        self,
        labels_dir: Path | None = None,
        class_names: list[str] | None = None,
        default_score: float = 0.95,
    ) -> None:
        self._labels_dir = labels_dir
        self._class_names = class_names or []
        self._default_score = default_score

    def predict(self, frame: Frame) -> list[RawPrediction]:
        label_path = resolve_label_path(Path(frame.data), self._labels_dir)
        if not label_path.exists():
            return []
        predictions: list[RawPrediction] = []
        for line in label_path.read_text(encoding="utf-8").splitlines():
            parts = line.split()
            if len(parts) < 5:
                continue
            class_id = int(float(parts[0]))
            cx, cy, w, h = (float(value) for value in parts[1:5])
            score = float(parts[5]) if len(parts) > 5 else self._default_score
            predictions.append(
                RawPrediction(
                    box=(cy - h / 2, cx - w / 2, cy + h / 2, cx + w / 2),
                    score=score,
                    label=self._label_for(class_id),
                )
            )
        return predictions

    def _label_for(self, class_id: int) -> str:
        if 0 <= class_id < len(self._class_names):
            return self._class_names[class_id]
        return "fire"


class ReplayCapabilityProvider:
    """Device capabilities for an offline replay session."""

    def __init__(self, config: ReplayConfig) -> None:
        self._config = config
        self.sources: list[ReplayFrameSource] = []

    async def list_devices(self) -> list[VideoDevice]:
        folder = self._config.frame_files[0].parent
        return [VideoDevice(device_id=f"replay:{folder}", label=folder.name)]

    async def open_frame_source(self, device_id: str | None) -> ReplayFrameSource:
        source = ReplayFrameSource(self._config)
        self.sources.append(source)
        logger.info(
            "Replaying %d frames from %s at %.1f fps",
            len(self._config.frame_files),
            device_id,
            self._config.fps,
        )
        return source

    async def set_torch(self, source: ReplayFrameSource, enabled: bool) -> CapabilityResult:
        return CapabilityResult.UNSUPPORTED

    async def get_coordinates(self) -> Coordinates | None:
        fix = self._config.coordinates
        if fix is None:
            return None
        return Coordinates(
            latitude=fix.latitude,
            longitude=fix.longitude,
            accuracy=fix.accuracy,
            timestamp=time.time(),
        )

    async def get_battery_level(self) -> float | None:
        return self._config.battery_level

    async def request_wake_lock(self) -> CapabilityResult:
        return CapabilityResult.UNSUPPORTED
