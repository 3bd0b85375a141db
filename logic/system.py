import ctypes
import logging
import sys

logger = logging.getLogger(__name__)

def is_admin() -> bool:
    """Check if the script is running with administrative privileges on Windows."""
    if sys.platform != 'win32':
        return False
    try:
        # Returns non-zero if admin, 0 if not.
        return ctypes.windll.shell32.IsUserAnAdmin() != 0
    except (AttributeError, OSError):
        logger.warning("Could not determine administrator status.", exc_info=True)
        return False
