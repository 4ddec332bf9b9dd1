from datetime import datetime
import platform

from spectro_slice import __version__


def start_audit() -> list[str]:
    return [f"Session start: {datetime.now().isoformat()}",
            f"Platform: {platform.platform()}",
            f"spectro_slice {__version__}"]

def log_step(audit: list[str], msg: str):
    audit.append(f"{datetime.now().isoformat(timespec='seconds')} {msg}")
