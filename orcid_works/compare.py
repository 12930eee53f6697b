"""Change detection for the on-disk work-detail file."""

from __future__ import annotations

import os
from typing import Union

from orcid_works.model import OrcidWorkDetailFile

PathLike = Union[str, "os.PathLike[str]"]


def _load_optional(path: PathLike) -> OrcidWorkDetailFile | None:
    try:
        with open(path, "rb") as handle:
            return OrcidWorkDetailFile.from_reader(handle)
    except FileNotFoundError:
        return None


def detail_changed(path: PathLike, newest: OrcidWorkDetailFile) -> bool:
    """Return True if the file at ``path`` is missing or differs from ``newest``.

    Records are compared by put-code, so their order does not matter.
    """
    older = _load_optional(path)
    if older is None:
        return True
    return older.into_map() != newest.into_map()