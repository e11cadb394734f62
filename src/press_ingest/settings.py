"""Import and pagination settings."""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PRESS_INGEST_CONFIG"
CONFIG_FILE = ".press_ingest.json"


class ImportSettings(BaseModel):
    """Limits and tuning constants applied at the import boundary."""

    max_file_size_mb: float = Field(default=50, gt=0)
    max_pages: int = Field(default=300, gt=0)
    words_per_page: int = Field(default=200, gt=0)
    pdf_words_per_page: int = Field(default=250, gt=0)
    default_device: str = "laptop"
    correction_factor: float = Field(default=0.72, gt=0, le=1)

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


def _config_path(project_dir: Path | None = None) -> Path | None:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    candidate = (project_dir or Path.cwd()) / CONFIG_FILE
    return candidate if candidate.exists() else None


def load_settings(project_dir: Path | None = None) -> ImportSettings:
    """Load settings from ``$PRESS_INGEST_CONFIG`` or ``.press_ingest.json``.

    Missing or invalid files fall back to the defaults.
    """
    path = _config_path(project_dir)
    if path is None:
        return ImportSettings()

    try:
        data = json.loads(path.read_text())
        settings = ImportSettings.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        log.warning(f"Ignoring settings file {path}: {e}")
        return ImportSettings()

    log.info(f"Loaded settings from {path}")
    return settings
