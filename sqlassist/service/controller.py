from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

from sqlassist.errors import SourceUnavailableError
from sqlassist.store.tabular import Table, is_supported_file, load_table

logger = logging.getLogger(__name__)

MODE_NONE = "none"
MODE_LOCAL = "local"
MODE_REMOTE = "remote"


@dataclass(frozen=True)
class Session:
    mode: str = MODE_NONE
    table: Optional[Table] = None
    source: Optional[str] = None


class ModeController:
    """
    Owns the current session (mode plus loaded table).

    The session is swapped as a whole, never edited in place. Reloading the
    local file and swapping it in happen under one lock so a concurrent
    request never observes a half-replaced session.
    """

    def __init__(self, uploads_dir: str):
        self.uploads_dir = uploads_dir
        self._session = Session()
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def mode(self) -> str:
        return self._session.mode

    def find_data_file(self) -> Optional[str]:
        if not os.path.isdir(self.uploads_dir):
            return None
        # lexical order so the pick does not depend on the filesystem
        for name in sorted(os.listdir(self.uploads_dir)):
            path = os.path.join(self.uploads_dir, name)
            if is_supported_file(name) and os.path.isfile(path):
                return path
        return None

    async def acquire_local(self) -> Session:
        async with self._lock:
            path = self.find_data_file()
            if path is None:
                raise SourceUnavailableError(
                    "No Excel or CSV file found in uploads folder",
                    details=f"place a data file in {self.uploads_dir}",
                )
            # every request reloads from disk
            table = load_table(path)
            self._session = Session(mode=MODE_LOCAL, table=table, source=path)
            return self._session

    def mark_remote(self) -> Session:
        self._session = Session(mode=MODE_REMOTE)
        return self._session

    def mark_none(self) -> Session:
        self._session = Session(mode=MODE_NONE)
        return self._session
