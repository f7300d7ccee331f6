"""Plain-text trigger configuration files.

Each task type can keep its trigger in ``<config_dir>/<TypeName>.sche`` so
operators can change "when" without touching code::

    $ cat config/NightlyReport.sche
    daily 02:30 weekdays=mon,tue,wed,thu,fri

Reading never raises: a missing, unreadable, or unparseable file means
"no persisted config" and yields ``None``. Writing raises
:class:`PersistenceError`, since a lost write is something the caller must
know about.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from cadence.core.errors import PersistenceError, TriggerError
from cadence.core.logging import get_logger

from .triggers import Trigger

logger = get_logger(__name__)

SUFFIX = ".sche"


def _key_name(key: str | type | Any) -> str:
    if isinstance(key, str):
        name = key
    elif isinstance(key, type):
        name = key.__name__
    else:
        name = type(key).__name__
    if not name or any(sep in name for sep in ("/", "\\")) or name in {".", ".."}:
        raise PersistenceError(f"invalid config key: {name!r}")
    return name


class TriggerConfigStore:
    """Reads and writes ``.sche`` blobs under one directory.

    Keys are type names; a type or an instance may be passed instead and its
    type's ``__name__`` is used.
    """

    def __init__(self, directory: str | Path = ".") -> None:
        self.directory = Path(directory)

    def path_for(self, key: str | type | Any) -> Path:
        return self.directory / f"{_key_name(key)}{SUFFIX}"

    def load(self, key: str | type | Any) -> str | None:
        """Return the stored blob, or None if there is none or it cannot be read."""
        try:
            path = self.path_for(key)
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError, PersistenceError) as e:
            logger.debug("trigger_config_unavailable", key=str(key), error=repr(e))
            return None

    def save(self, key: str | type | Any, text: str) -> Path:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PersistenceError("cannot write trigger config", cause=e).with_context(path=str(path)) from e
        logger.info("trigger_config_saved", path=str(path))
        return path

    def delete(self, key: str | type | Any) -> bool:
        """Remove the blob. Returns False if there was nothing to remove."""
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError("cannot delete trigger config", cause=e).with_context(path=str(path)) from e
        return True

    def load_trigger(self, key: str | type | Any) -> Trigger | None:
        """Parse the stored blob into a :class:`Trigger`; None on any failure."""
        text = self.load(key)
        if text is None:
            return None
        try:
            return Trigger.parse(text)
        except TriggerError as e:
            logger.warning("trigger_config_invalid", key=str(key), text=text.strip(), error=e.message)
            return None

    def save_trigger(self, key: str | type | Any, trigger: Trigger) -> Path:
        """Store *trigger* in text form. Custom triggers raise :class:`TriggerError`."""
        return self.save(key, trigger.to_text() + "\n")

    def keys(self) -> list[str]:
        """Type names that have a stored blob."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{SUFFIX}") if p.is_file())

    def __repr__(self) -> str:
        return f"TriggerConfigStore({str(self.directory)!r})"


__all__ = ["TriggerConfigStore", "SUFFIX"]
