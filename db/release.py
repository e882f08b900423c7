"""
db/release.py
-------------
Best-effort release of driver resources on cleanup paths.
A failure while closing never masks the primary error and never raises.
"""

from utils.logger import get_logger

logger = get_logger(__name__)


def release_quietly(*resources) -> None:
    """
    Call ``close()`` on every resource, independently of the others.

    Args:
        resources: Driver objects exposing ``close()``; None entries are skipped.
    """
    for resource in resources:
        if resource is None:
            continue
        try:
            resource.close()
        except Exception as e:
            logger.warning(f"Ignoring failure while releasing {type(resource).__name__}: {e}")
