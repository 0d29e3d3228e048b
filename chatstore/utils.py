import logging
import os
import platform
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# -------------------------------------------------------------- #
# Constants
# -------------------------------------------------------------- #


DEFAULT_APP_IDENTIFIER = "com.chat.app"

DEFAULT_LOG_DIR = "logs"

# yyyy-mm-dd_hh-mm-ss, so lexicographic order is chronological order
CONVERSATION_FILENAME_FORMAT = "%Y-%m-%d_%H-%M-%S"


# -------------------------------------------------------------- #
# Util Functions
# -------------------------------------------------------------- #


def get_current_timestamp() -> datetime:
    """Get the current local timestamp."""
    return datetime.now()


def build_conversation_filename(when: datetime | None = None) -> str:
    """
    Build a conversation filename from a timestamp.

    Args:
        when: Timestamp of the conversation's last response (defaults to now)

    Returns:
        Filename in format: yyyy-mm-dd_hh-mm-ss.json
    """
    if when is None:
        when = get_current_timestamp()
    return f"{when.strftime(CONVERSATION_FILENAME_FORMAT)}.json"


def resolve_app_data_dir(identifier: str | None = None) -> Path:
    """
    Resolve the per-user application data directory for this platform.

    macOS:   ~/Library/Application Support/<identifier>
    Windows: %APPDATA%/<identifier>
    Other:   $XDG_DATA_HOME/<identifier> or ~/.local/share/<identifier>
    """
    identifier = identifier or os.getenv("CHAT_APP_IDENTIFIER") or DEFAULT_APP_IDENTIFIER
    system = platform.system().lower()
    home = Path.home()

    if system == "darwin":
        base = home / "Library" / "Application Support"
    elif system.startswith("win") or os.name == "nt":
        appdata = os.getenv("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
    else:
        xdg = os.getenv("XDG_DATA_HOME")
        base = Path(xdg) if xdg else home / ".local" / "share"

    app_dir = base / identifier
    logger.debug("Resolved app data directory: %s", app_dir)
    return app_dir


def resolve_log_dir(log_dir: str | None = None) -> str:
    """Explicit directory, else CHAT_LOG_DIR, else ./logs."""
    return log_dir or os.getenv("CHAT_LOG_DIR") or DEFAULT_LOG_DIR
