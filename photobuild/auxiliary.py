"""
Auxiliary output: statistics files and verbatim folder copies.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Optional

from .output import copy_file, relative_posix, write_json


def copy_statistics(
    cwd: Path,
    target_folder: Path,
    stats: Dict[str, str],
    logger: Optional[logging.Logger] = None
) -> Dict[str, str]:
    """
    Copy each statistics file to stats/<name>.json in the output.

    Returns:
        name -> path relative to the target folder
    """
    logger = logger or logging.getLogger(__name__)
    result = {}
    for name, file in sorted(stats.items()):
        target = target_folder / 'stats' / f"{name}.json"
        copy_file(cwd / file, target, log=logger)
        result[name] = relative_posix(target, target_folder)
    return result


def copy_folder_with_index(
    cwd: Path,
    target_folder: Path,
    folder: str,
    concurrency: int = 10,
    logger: Optional[logging.Logger] = None
) -> Path:
    """
    Copy a folder verbatim and write an index.json listing its files.

    Returns:
        Path of the written index.json
    """
    logger = logger or logging.getLogger(__name__)
    source = cwd / folder
    target = target_folder / folder
    files = sorted(relative_posix(p, source) for p in source.rglob('*') if p.is_file())

    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        list(pool.map(lambda f: copy_file(source / f, target / f, log=logger), files))

    logger.info(f"[COPY] {folder}: {len(files)} files")
    return write_json(target / 'index.json', files, logger)
