from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    data_dir: Path
    db_path: Path
    archive_dir: Path


DEFAULT_DATA_DIRNAME = ".siarni"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_PUBLIC_BASE_URL = "http://127.0.0.1:8765/"
DEFAULT_QR_SIZE = 200


@dataclass(frozen=True)
class Settings:
    """External-service settings, resolved once at start-up and passed down."""

    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    qr_size: int = DEFAULT_QR_SIZE

    @property
    def ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    home_raw = os.getenv("SIARNI_HOME")
    if home_raw:
        data_dir = Path(home_raw).expanduser().resolve()
    else:
        data_dir = root / DEFAULT_DATA_DIRNAME

    return AppPaths(
        project_root=root,
        data_dir=data_dir,
        db_path=data_dir / "siarni.db",
        archive_dir=data_dir / "archive",
    )


def _first_env(*names: str) -> str | None:
    for name in names:
        raw = os.getenv(name)
        if raw and raw.strip():
            return raw.strip()
    return None


def load_settings() -> Settings:
    qr_size_raw = os.getenv("SIARNI_QR_SIZE")
    try:
        qr_size = int(qr_size_raw) if qr_size_raw else DEFAULT_QR_SIZE
    except ValueError:
        qr_size = DEFAULT_QR_SIZE

    return Settings(
        gemini_api_key=_first_env("GEMINI_API_KEY", "API_KEY"),
        gemini_model=_first_env("SIARNI_GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        public_base_url=_first_env("SIARNI_PUBLIC_BASE_URL") or DEFAULT_PUBLIC_BASE_URL,
        qr_size=qr_size if qr_size > 0 else DEFAULT_QR_SIZE,
    )
