"""
Local-disk implementation of the corpus directory.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from .protocol import Entry

logger = logging.getLogger(__name__)

_MODES = {
    "read": os.R_OK,
    "readwrite": os.R_OK | os.W_OK,
}


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class LocalDirectory:
    """A corpus directory on local disk.

    Writes go through a temp file in the same directory and ``os.replace``,
    so a shard is either fully old or fully new.
    """

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def list_entries(self) -> list[Entry]:
        entries = []
        for child in sorted(self._path.iterdir()):
            if child.is_symlink():
                continue
            kind = "directory" if child.is_dir() else "file"
            entries.append(Entry(child.name, kind))
        return entries

    def _resolve(self, name: str) -> Path:
        # Shard names are bare filenames
        if not name or Path(name).name != name or name in (".", ".."):
            raise ValueError(f"Invalid file name: {name!r}")
        return self._path / name

    def read_text(self, name: str) -> str:
        return self._resolve(name).read_text(encoding="utf-8")

    def write_text(self, name: str, text: str, *, create: bool = True) -> None:
        path = self._resolve(name)
        if not create and not path.exists():
            raise FileNotFoundError(path)
        tf = tempfile.NamedTemporaryFile(
            "w", delete=False, dir=self._path, encoding="utf-8",
            prefix=".cobb-", suffix=".tmp",
        )
        tmp = Path(tf.name)
        try:
            with tf:
                tf.write(text)
            # Temp files are created 0600; keep the shard's own mode
            if path.exists():
                shutil.copymode(path, tmp)
            else:
                os.chmod(tmp, 0o666 & ~_current_umask())
            try:
                os.replace(tmp, path)  # atomic where supported
            except OSError:
                shutil.move(str(tmp), str(path))
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d chars to %s", len(text), path)

    def query_permission(self, mode: str = "readwrite") -> bool:
        return self._path.is_dir() and os.access(self._path, _MODES[mode])

    def request_permission(self, mode: str = "readwrite") -> bool:
        # Local disk has no grant prompt; the answer is whatever the OS allows
        return self.query_permission(mode)

    def __repr__(self) -> str:
        return f"LocalDirectory({str(self._path)!r})"
