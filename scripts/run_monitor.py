from __future__ import annotations

import argparse
import asyncio
import logging
import time

from libs.core.application.frame_scorer import ModelHandle
from libs.core.application.monitoring_session import MonitoringSession
from libs.core.config import get_config
from libs.core.domain.entities import AlertState, Coordinates, ReadyState, SensitivityLevel
from libs.core.domain.errors import CoordinatesUnavailable, RecordStoreError
from libs.infra.http.record_store import HttpRecordStore
from libs.infra.local.kv_store import JsonFileKeyValueStore
from libs.infra.notifiers import ConsoleNotifier
from libs.infra.replay.frame_replay import (
    LabelFileModel,
    ReplayCapabilityProvider,
    build_replay_config,
)
from services.alert_api.infrastructure.memory_store import (
    InMemoryAlertRepository,
    InMemoryDatabase,
    InMemoryEmergencyContactRepository,
    InProcessRecordStore,
    seed_demo_data,
)

logger = logging.getLogger("run_monitor")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    config = get_config()
    parser = argparse.ArgumentParser(description="Replay frames through the fire monitor")
    parser.add_argument(
        "--frames-dir",
        required=True,
        help="Path to folder with PNG/JPG frames",
    )
    parser.add_argument(
        "--labels-dir",
        default="",
        help="Optional path to folder with YOLO txt labels",
    )
    parser.add_argument("--fps", type=float, default=2.0)
    parser.add_argument("--score", type=float, default=0.95, help="Score for labels without one")
    parser.add_argument(
        "--sensitivity",
        choices=[level.value for level in SensitivityLevel],
        default=None,
    )
    parser.add_argument("--api-base", default=config.api_base)
    parser.add_argument("--offline", action="store_true", help="Keep alerts in memory")
    parser.add_argument("--auto-confirm", action="store_true")
    parser.add_argument("--run-seconds", type=float, default=None)
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--log-level", default=config.log_level)
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    config = get_config()
    try:
        replay = build_replay_config(
            frames_dir=args.frames_dir,
            labels_dir=args.labels_dir or None,
            fps=args.fps,
            default_score=args.score,
        )
    except ValueError as error:
        raise SystemExit(str(error)) from error

    if args.latitude is not None and args.longitude is not None:
        replay.coordinates = Coordinates(
            latitude=args.latitude,
            longitude=args.longitude,
            accuracy=0.0,
            timestamp=time.time(),
        )

    http_store: HttpRecordStore | None = None
    if args.offline:
        db = InMemoryDatabase()
        seed_demo_data(db)
        record_store = InProcessRecordStore(
            alerts=InMemoryAlertRepository(db),
            contacts=InMemoryEmergencyContactRepository(db),
            user_id=config.user_id,
        )
    else:
        http_store = HttpRecordStore(args.api_base, timeout=config.http_timeout)
        record_store = http_store

    model = LabelFileModel(labels_dir=replay.labels_path, default_score=replay.default_score)
    session = MonitoringSession(
        config=config,
        provider=ReplayCapabilityProvider(replay),
        model_handle=ModelHandle(lambda: model, name="label-replay"),
        record_store=record_store,
        notifier=ConsoleNotifier(),
        storage=JsonFileKeyValueStore(config.settings_path),
    )

    alerts_sent = 0
    started_at = time.monotonic()
    try:
        await session.start()
        if args.sensitivity:
            session.set_sensitivity(args.sensitivity)
        logger.info("Replaying %d frames", len(replay.frame_files))
        while _has_frames(session):
            if args.run_seconds is not None and time.monotonic() - started_at >= args.run_seconds:
                break
            if session.alerts.state is AlertState.PENDING_CONFIRMATION:
                alerts_sent += await _resolve_pending(session, auto_confirm=args.auto_confirm)
            elif session.alerts.state is AlertState.SENT:
                session.continue_monitoring()
            await asyncio.sleep(0.05)
        if session.alerts.state is AlertState.PENDING_CONFIRMATION:
            alerts_sent += await _resolve_pending(session, auto_confirm=args.auto_confirm)
    finally:
        await session.stop()
        if http_store is not None:
            await http_store.aclose()

    status = session.status()
    logger.info(
        "done alerts_sent=%d battery=%s location=%s",
        alerts_sent,
        status.battery_level,
        status.location_text,
    )
    return 0


def _has_frames(session: MonitoringSession) -> bool:
    source = session.camera.source
    return source is not None and source.ready_state is not ReadyState.ENDED


async def _resolve_pending(session: MonitoringSession, auto_confirm: bool) -> int:
    if not auto_confirm:
        session.cancel_alert()
        return 0
    try:
        record = await session.send_alert()
    except CoordinatesUnavailable as error:
        logger.warning("%s; cancelling alert", error)
        session.cancel_alert()
        return 0
    except RecordStoreError as error:
        logger.error("Alert not sent: %s", error)
        session.cancel_alert()
        return 0
    return 1 if record is not None else 0


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
