"""Centralized initialization for recon_audit entry points.

Provides a single point of initialization for:
- Environment variables (.env loading)
- Data directory resolution
- Cloud storage credential detection

The API should call ensure_initialized() once before building the store.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Anon key value shipped in example .env files; treated as "not configured".
PLACEHOLDER_SUPABASE_KEY = "your_supabase_anon_key_here"


@dataclass(frozen=True)
class AppSettings:
    """Process-wide settings resolved once at startup."""

    project_root: Path
    data_dir: Path
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    local_quota_bytes: Optional[int] = None

    @property
    def has_remote_credentials(self) -> bool:
        return bool(
            self.supabase_url
            and self.supabase_key
            and self.supabase_key != PLACEHOLDER_SUPABASE_KEY
        )

    @property
    def local_store_dir(self) -> Path:
        return self.data_dir / "local_store"


# Module-level state
_settings: Optional[AppSettings] = None


def _find_project_root(start_path: Optional[Path] = None) -> Path:
    """Find project root by looking for pyproject.toml."""
    if start_path is None:
        start_path = Path(__file__).resolve().parent.parent.parent

    for parent in [start_path] + list(start_path.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return start_path


def _load_env(project_root: Path) -> bool:
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        print(f"[startup] Loaded .env from {env_path}")
        return True
    print(f"[startup] WARNING: .env not found at {env_path}")
    return False


def _parse_quota(raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        print(f"[startup] WARNING: ignoring invalid RECON_LOCAL_QUOTA_BYTES={raw!r}")
        return None
    return value if value > 0 else None


def load_settings(project_root: Optional[Path] = None) -> AppSettings:
    """Build AppSettings from the current environment (no .env loading)."""
    project_root = project_root or _find_project_root()
    data_dir = Path(os.getenv("RECON_DATA_DIR") or project_root / "output")
    return AppSettings(
        project_root=project_root,
        data_dir=data_dir,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or None,
        local_quota_bytes=_parse_quota(os.getenv("RECON_LOCAL_QUOTA_BYTES")),
    )


def ensure_initialized() -> AppSettings:
    """Load .env and resolve settings, once per process."""
    global _settings
    if _settings is not None:
        return _settings

    project_root = _find_project_root()
    _load_env(project_root)
    _settings = load_settings(project_root)

    backend = "supabase" if _settings.has_remote_credentials else "local"
    print(f"[startup] Data dir: {_settings.data_dir} (storage backend: {backend})")
    return _settings


def reset_settings() -> None:
    """Forget cached settings (used by tests)."""
    global _settings
    _settings = None
