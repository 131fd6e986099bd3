"""Scoped $WORK directory: created on enter, removed on every exit unless kept."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from matcha_tooling.errors import PackagingError

log = logging.getLogger(__name__)


class WorkDir:
    """Temporary working tree for one bind run.

    with WorkDir(keep=args.work) as work:
        work.mkdir("matcha-ios")
    """

    def __init__(self, *, keep: bool = False, prefix: str = "matcha-work-", parent: Path | None = None) -> None:
        self.keep = keep
        self.prefix = prefix
        self.parent = parent
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            msg = "WorkDir used outside its with-block"
            raise RuntimeError(msg)
        return self._path

    def joinpath(self, *parts: str) -> Path:
        return self.path.joinpath(*parts)

    def mkdir(self, *parts: str) -> Path:
        p = self.joinpath(*parts)
        try:
            p.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"could not create {p}: {e}"
            raise PackagingError(msg) from e
        return p

    def __enter__(self) -> WorkDir:
        try:
            self._path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        except OSError as e:
            msg = f"could not create working directory: {e}"
            raise PackagingError(msg) from e
        log.debug("WORK=%s", self._path)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        path, self._path = self._path, None
        if path is None:
            return
        if self.keep:
            print(f"WORK={path}")
            return
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            log.warning("could not fully remove working directory %s", path)
