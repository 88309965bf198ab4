import os
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv


class MonitorConfig:
    """
    Monitoring client settings loaded from environment variables.

    Every value has a default so a session can start with an empty
    environment; a `.env` file in the working directory is read first.
    """

    def __init__(self) -> None:
        # Backing service
        self.api_base: Final[str] = os.getenv("FIREWATCH_API_BASE", "http://127.0.0.1:8000")
        self.user_id: Final[int] = int(os.getenv("FIREWATCH_USER_ID", "1"))
        self.http_timeout: Final[float] = float(os.getenv("FIREWATCH_HTTP_TIMEOUT", "15"))

        # Local settings cache
        self.settings_path: Final[Path] = Path(
            os.getenv(
                "FIREWATCH_SETTINGS_PATH",
                str(Path.home() / ".firewatch" / "settings.json"),
            )
        )

        # Detection loop
        self.tick_interval: Final[float] = float(os.getenv("FIREWATCH_TICK_INTERVAL", "0.033"))
        self.device_policy: Final[str] = os.getenv("FIREWATCH_DEVICE_POLICY", "last")

        # Device capabilities
        self.location_timeout: Final[float] = float(os.getenv("FIREWATCH_LOCATION_TIMEOUT", "15"))
        self.location_poll_interval: Final[float] = float(
            os.getenv("FIREWATCH_LOCATION_POLL_INTERVAL", "5")
        )
        self.location_max_age: Final[float] = float(os.getenv("FIREWATCH_LOCATION_MAX_AGE", "60"))
        self.battery_timeout: Final[float] = float(os.getenv("FIREWATCH_BATTERY_TIMEOUT", "2"))

        self.log_level: Final[str] = os.getenv("FIREWATCH_LOG_LEVEL", "INFO").upper()


_config: Optional[MonitorConfig] = None


def get_config() -> MonitorConfig:
    global _config
    if _config is None:
        load_dotenv()
        _config = MonitorConfig()
    return _config


def reset_config() -> None:
    global _config
    _config = None
