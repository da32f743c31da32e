"""Client-local session persistence"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from enigma.models import SessionDescriptor


logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = "~/.enigma/session.json"


class SessionCache:
    """
    Load/save/clear lifecycle for the session descriptor

    A missing file, unreadable JSON or any missing field all mean
    "not logged in".
    """

    def __init__(self, path: str = DEFAULT_SESSION_PATH):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[SessionDescriptor]:
        if not self.path.exists():
            return None
        try:
            descriptor = SessionDescriptor.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.info(f"Ignoring unusable session file {self.path}: {e}")
            return None
        if not all(descriptor.model_dump().values()):
            return None
        return descriptor

    def save(self, descriptor: SessionDescriptor) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(descriptor.model_dump_json(indent=2))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def logout(cache: SessionCache) -> None:
    """Forget the local session"""
    cache.clear()
    logger.info("👋 Session cleared")
