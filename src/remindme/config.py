"""User-configurable values loaded from environment variables."""

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _detect_local_tz() -> str:
    """Detect the system's IANA timezone name. Falls back to UTC."""
    # Debian/Ubuntu: plain text file with IANA name
    etc_tz = Path("/etc/timezone")
    if etc_tz.exists():
        name = etc_tz.read_text().strip()
        if name:
            return name

    # Most Linux/WSL/macOS: /etc/localtime is a symlink into zoneinfo
    localtime = Path("/etc/localtime")
    if localtime.is_symlink():
        target = str(localtime.resolve())
        marker = "/zoneinfo/"
        idx = target.find(marker)
        if idx != -1:
            return target[idx + len(marker) :]

    return "UTC"


def _positive_float(var: str, default: float) -> float:
    raw = os.environ.get(var)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        print(f"{var} must be a positive number, got {raw!r}", file=sys.stderr)
        raise SystemExit(1)
    return value


TZ: ZoneInfo = ZoneInfo(os.environ.get("REMINDME_TIMEZONE") or _detect_local_tz())
DATA_DIR: Path = Path(os.environ.get("REMINDME_HOME") or Path.home() / ".remindme")

# Trigger check cadence and document poll cadence, in seconds
TICK_SECONDS: float = _positive_float("REMINDME_TICK_SECONDS", 1.0)
POLL_SECONDS: float = _positive_float("REMINDME_POLL_SECONDS", 1.0)
