from __future__ import annotations

"""
OS Launch Hand-off.

Passes a steam:// URI to the host operating system, which forwards it to
the running Steam client. No process is supervised here.
"""

import logging
import os
import platform
import subprocess

logger = logging.getLogger(__name__)


def open_uri(uri: str) -> bool:
    """
    Ask the OS to open a URI with its registered handler.
    Supports Windows, macOS, and Linux (xdg-open).

    Args:
        uri: URI such as 'steam://rungameid/440'.

    Returns:
        bool: True if the hand-off was issued without error.
    """
    try:
        sys_name = platform.system()
        if sys_name == "Windows":
            os.startfile(uri)  # type: ignore[attr-defined]
        elif sys_name == "Darwin":
            subprocess.Popen(["open", uri])
        else:
            subprocess.Popen(["xdg-open", uri])
    except OSError as e:
        logger.error(f"Failed to open {uri}: {e}")
        return False

    logger.info(f"Launch requested: {uri}")
    return True
