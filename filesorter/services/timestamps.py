"""Reading file dates used for ordering and bucketing."""
from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from ..core.models import FileTimestamps


def creation_time(stat_result: os.stat_result) -> float:
    """Best available creation time from a stat result.

    ``st_birthtime`` exists on macOS, BSD and (since 3.12) Windows. Elsewhere
    ``st_ctime`` is the closest thing available.
    """
    birth = getattr(stat_result, "st_birthtime", None)
    if birth is not None:
        return birth
    return stat_result.st_ctime


def read_timestamps(path: Path) -> FileTimestamps:
    """Read creation and modification time as naive local datetimes.

    Raises:
        OSError: If the file cannot be stat'ed.
    """
    st = path.stat()
    return FileTimestamps(
        created=datetime.fromtimestamp(creation_time(st)),
        modified=datetime.fromtimestamp(st.st_mtime),
    )
