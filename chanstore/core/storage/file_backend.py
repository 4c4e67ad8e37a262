"""
File-backed durable backend.

Each external key maps to one file under the data directory. Writes go to
a temporary file which is then renamed over the target, so a crash leaves
either the old or the new blob.
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

import aiofiles

from chanstore.core.storage.base import DurableBackend
from chanstore.utils.logger import get_logger

logger = get_logger("storage.file")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileBackend(DurableBackend):
    """Stores each blob as ./<data_dir>/<safe key>.json"""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        safe_key = _UNSAFE_CHARS.sub("_", key)
        return self.data_dir / f"{safe_key}.json"

    async def read_blob(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            data = await f.read()
        logger.debug(f"Read {path} ({len(data)} chars)")
        return data

    async def write_blob(self, key: str, data: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
            await f.write(data)
            await f.flush()
        os.replace(tmp, path)

    async def delete_blob(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
