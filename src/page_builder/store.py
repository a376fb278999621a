"""Local directory of page records."""

import json
from pathlib import Path
from typing import Any

from loguru import logger


class PageStore:
    """Read and write page records as JSON files in a data directory.

    - Files are named ``page-<id>.json``.
    - A record is only written when its serialized contents changed, so
      unchanged pages keep their mtime.
    """

    def __init__(self, datadir: str | Path, *, dry_run: bool = False) -> None:
        self.datadir = str(Path(datadir).resolve())
        self.dry_run = dry_run

        if not dry_run and not Path(self.datadir).is_dir():
            msg = f"Data directory {self.datadir!r} not found"
            raise ValueError(msg)

        logger.debug("Store ready, datadir {!r}, dry_run {!r}", datadir, dry_run)

        self._num_same = 0
        self._num_changed = 0

    def _path(self, fname_rel: str) -> Path:
        if Path(fname_rel).is_absolute():
            msg = f"must be relative: {fname_rel!r}"
            raise ValueError(msg)
        fname = str((Path(self.datadir) / fname_rel).resolve())
        if not fname.startswith(self.datadir + "/"):
            msg = f"Path escapes datadir: {fname!r}"
            raise ValueError(msg)
        if not fname.endswith(".json"):
            msg = f"Wanted to use {fname!r} but page records must be .json files"
            raise ValueError(msg)
        return Path(fname)

    @staticmethod
    def filename(page_id: int | str) -> str:
        return f"page-{page_id}.json"

    def read(self, page_id: int | str) -> dict[str, Any] | None:
        """Return the stored record, or None if there is none."""
        try:
            with open(self._path(self.filename(page_id)), encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        if not isinstance(data, dict):
            msg = f"Page record {page_id!r} is not a JSON object"
            raise ValueError(msg)
        return data

    def write(self, record: dict[str, Any]) -> bool:
        """Write a page record keyed by its ``id``.

        Returns:
            True if the file was created or changed.
        """
        page_id = record.get("id")
        if page_id is None:
            msg = "Page record has no id"
            raise ValueError(msg)
        path = self._path(self.filename(page_id))
        contents = json.dumps(record, sort_keys=True, indent=4, ensure_ascii=False) + "\n"

        action = "create"
        try:
            if path.read_text(encoding="utf-8") == contents:
                self._num_same += 1
                return False
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass
        self._num_changed += 1

        if self.dry_run:
            logger.info("[dry-run] Would {} {}", action, path.name)
            return True

        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(contents, encoding="utf-8")
        tmp.replace(path)
        logger.info("{}d {}", action.capitalize(), path.name)
        return True

    def list_pages(self) -> list[str]:
        """Return the ids of all stored pages, sorted."""
        root = Path(self.datadir)
        if not root.is_dir():
            return []
        return sorted(p.name[len("page-") : -len(".json")] for p in root.glob("page-*.json"))
