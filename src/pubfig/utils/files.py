from pathlib import Path
import subprocess
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


def get_git_short_hash(cwd: Optional[Union[str, Path]] = None) -> Optional[str]:
    try:
        out = subprocess.check_output(['git', 'rev-parse', '--short', 'HEAD'], stderr=subprocess.STDOUT,
                                      cwd=None if cwd is None else str(cwd))
        return out.decode('utf-8').strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def human_readable_bytes(nbytes: Optional[int]) -> str:
    if nbytes is None:
        return '0 B'
    val = float(nbytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if val < 1024.0:
            return f"{val:3.1f} {unit}"
        val /= 1024.0
    return f"{val:.1f} PB"


def ensure_parent(path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
