from __future__ import annotations

import logging
import re
from pathlib import Path

from notevault.capture.errors import VaultWriteError

log = logging.getLogger("notevault.vault")

MAX_STEM_LENGTH = 100
NOTE_SUFFIX = ".md"

# ASCII word characters only: accented letters and symbols such as "™" are dropped.
_UNSAFE = re.compile(r"[^\w\s-]", re.ASCII)


def sanitize_filename(title: str) -> str:
    """Reduce a note title to a filename stem (may come back empty)."""

    return _UNSAFE.sub("", title or "")[:MAX_STEM_LENGTH]


class VaultWriter:
    """Writes generated notes into one user's vault directory.

    A write never replaces an existing file: a taken name gets a numbered
    sibling (``Note.md``, ``Note-1.md``, ``Note-2.md``, ...).
    """

    def __init__(self, vault_root: str | Path):
        self.root = Path(vault_root)

    def write(self, *, content: str, title: str, folder: str | None = None) -> str:
        stem = sanitize_filename(title)
        directory = self.folder_path(folder)

        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = self._create_unique(directory, stem, content)
        except OSError as e:
            raise VaultWriteError(f"Vault write failed for {title!r}: {e}") from e

        rel = path.relative_to(self.root).as_posix()
        log.info("Vault: wrote %s (%s chars)", rel, len(content))
        return rel

    def folder_path(self, folder: str | None) -> Path:
        """Resolve a vault-relative folder, refusing anything that escapes the vault."""

        if not folder:
            return self.root
        # Absolute folders are taken relative to the vault root.
        directory = self.root / folder.lstrip("/\\")
        root = self.root.resolve()
        resolved = directory.resolve()
        if resolved != root and root not in resolved.parents:
            raise VaultWriteError(f"Folder {folder!r} is outside the vault")
        return self.root / resolved.relative_to(root)

    def unique_path(self, directory: Path, stem: str) -> Path:
        """First free name among ``stem.md``, ``stem-1.md``, ``stem-2.md``, ..."""

        path = directory / f"{stem}{NOTE_SUFFIX}"
        counter = 0
        while path.exists():
            counter += 1
            path = directory / f"{stem}-{counter}{NOTE_SUFFIX}"
        return path

    def _create_unique(self, directory: Path, stem: str, content: str) -> Path:
        while True:
            path = self.unique_path(directory, stem)
            try:
                # "x": a concurrent writer that took the name first makes us probe again.
                fh = path.open("x", encoding="utf-8", newline="")
            except FileExistsError:
                log.debug("Vault: %s appeared concurrently; probing next name", path.name)
                continue
            try:
                with fh:
                    fh.write(content)
            except OSError:
                # No partial notes: the name is released for the next attempt.
                path.unlink(missing_ok=True)
                raise
            return path
