"""Model loading and per-frame scoring."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Awaitable, Union

from libs.core.application.contracts import DetectionModel
from libs.core.domain.entities import Detection, Frame, RawPrediction
from libs.core.domain.errors import ModelLoadError, ModelUnavailable

logger = logging.getLogger(__name__)

ModelLoader = Callable[[], Union[DetectionModel, Awaitable[DetectionModel]]]


class ModelHandle:
    """Detection model that is loaded once per session and then shared."""

    def __init__(self, loader: ModelLoader, name: str = "detector") -> None:
        self._loader = loader
        self.name = name
        self._model: DetectionModel | None = None
        self._error: Exception | None = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    @property
    def failed(self) -> bool:
        return self._error is not None

    @property
    def model(self) -> DetectionModel:
        if self._model is None:
            raise ModelUnavailable(f"Model '{self.name}' is not loaded")
        return self._model

    async def load(self) -> DetectionModel:
        if self._model is not None:
            return self._model
        logger.info("Loading model %s", self.name)
        try:
            result = self._loader()
            if inspect.isawaitable(result):
                result = await result
        except Exception as error:
            self._error = error
            logger.error("Failed to load model %s: %s", self.name, error)
            raise ModelLoadError(f"Model '{self.name}' failed to load") from error
        self._model = result
        self._error = None
        logger.info("Model %s loaded", self.name)
        return result


async def score(
    model_handle: ModelHandle,
    frame: Frame,
    threshold: float,
) -> list[Detection]:
    """Run the model on one frame and keep candidates scoring at least threshold.

    Boxes come back from the model normalised as (ymin, xmin, ymax, xmax) and
    are converted to (x, y, width, height) in the frame's pixel space. The
    model output is consumed before returning so nothing from the frame
    outlives the call.
    """
    model = model_handle.model
    raw = model.predict(frame)
    if inspect.isawaitable(raw):
        raw = await raw
    return list(_to_detections(raw, frame=frame, threshold=threshold))


def _to_detections(
    predictions: Iterable[RawPrediction],
    frame: Frame,
    threshold: float,
) -> Iterator[Detection]:
    for prediction in predictions:
        if prediction.score < threshold:
            continue
        ymin, xmin, ymax, xmax = prediction.box
        yield Detection(
            bbox=(
                xmin * frame.width,
                ymin * frame.height,
                (xmax - xmin) * frame.width,
                (ymax - ymin) * frame.height,
            ),
            label=prediction.label,
            score=prediction.score,
        )
