# utils/app_config.py
import logging
import os
from dataclasses import dataclass, field

from models.page_models import PageGeometry
from utils.constants import AUTOSAVE_DELAY_MS

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """
    Runtime settings of the application.

    Defaults can be overridden with environment variables; see ``from_env``.
    """
    data_dir: str = field(default_factory=lambda: os.path.join(os.path.expanduser("~"), ".student_submission"))
    autosave_delay_ms: int = AUTOSAVE_DELAY_MS
    log_level: str = "INFO"
    page_geometry: PageGeometry = field(default_factory=PageGeometry)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build the configuration, applying ``STUDENT_SUBMISSION_*`` overrides."""
        config = cls()
        data_dir = os.environ.get("STUDENT_SUBMISSION_DATA_DIR")
        if data_dir:
            config.data_dir = data_dir
        delay = os.environ.get("STUDENT_SUBMISSION_AUTOSAVE_MS")
        if delay:
            try:
                config.autosave_delay_ms = max(0, int(delay))
            except ValueError:
                logger.warning("Ignoring STUDENT_SUBMISSION_AUTOSAVE_MS=%r, expected milliseconds; using %d",
                               delay, config.autosave_delay_ms)
        level = os.environ.get("STUDENT_SUBMISSION_LOG_LEVEL")
        if level:
            config.log_level = level.upper()
        return config
