"""
File-system helpers for reading descriptors and writing build output.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from .errors import DescriptorError


logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    """Read a JSON descriptor; any failure is fatal to the run."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise DescriptorError(f"Can not read {path}: {e}") from e


def write_json(path: Path, data: Any, log: Optional[logging.Logger] = None) -> Path:
    """Write `data` as JSON, creating parent directories."""
    (log or logger).info(f"[WRITE] {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write('\n')
    return path


def copy_file(src: Path, target: Path, soft: bool = False, log: Optional[logging.Logger] = None) -> bool:
    """
    Copy `src` to `target`, creating parent directories.

    With `soft`, an existing target is kept as is.

    Returns:
        True if the target already existed and was kept
    """
    log = log or logger
    if soft and target.exists():
        log.debug(f"[COPY] {src} → {target} [cached]")
        return True
    log.debug(f"[COPY] {src} → {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, target)
    return False


def relative_posix(path: Path, root: Path) -> str:
    """`path` relative to `root` with forward slashes, as written to manifests."""
    return path.relative_to(root).as_posix()
