from __future__ import annotations

"""
Project Root Locator.

Anchors every virtual path of a crawl to the nearest directory declaring a
package manifest, so a component pushed from 'frontend/src/Button.jsx'
is stored as '/src/Button.jsx' rather than '/frontend/src/Button.jsx'.
"""

import logging
import os

from composter.domain.constants import MANIFEST_FILENAME

logger = logging.getLogger(__name__)


def locate_root(start_dir: str, marker: str = MANIFEST_FILENAME) -> str:
    """
    Walk upward from 'start_dir' until a directory containing 'marker' is found.

    Args:
        start_dir: Absolute directory to start from (usually the entry
                   file's directory).
        marker: Filename identifying a project root.

    Returns:
        str: The first directory containing the marker, or 'start_dir'
             unchanged when the filesystem root is reached without a match.
    """
    current = start_dir
    while True:
        if os.path.isfile(os.path.join(current, marker)):
            logger.debug(f"Project root located at {current}")
            return current

        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    logger.debug(f"No {marker} above {start_dir}; using it as the project root.")
    return start_dir
