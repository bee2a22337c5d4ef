"""Local file helpers for consumed uploads."""

from __future__ import annotations

import os

from policyhub.core.logging import get_logger

logger = get_logger(__name__)


def remove_file(path: str) -> bool:
    """
    Delete a consumed input file.

    Returns True when the file was removed, False when it was already gone
    or could not be deleted.  Never raises.
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.error("Error cleaning up file", filepath=path, error=str(exc))
        return False
    logger.debug("File removed", filepath=path)
    return True
