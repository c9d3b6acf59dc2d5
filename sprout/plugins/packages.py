"""Attach ``package.json`` metadata to records.

For every ``package.json`` passing through, the parsed manifest with the
given fields merged on top is stored in ``record.data["package"]``.  Contents
are left untouched unless ``write=True``.  Other records pass through.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from sprout.stream import FileRecord, Stage

MANIFEST_NAME = "package.json"


def packages(fields: Mapping[str, Any] | None = None, *, write: bool = False) -> Stage:
    """Build a metadata stage for package manifests.

    Args:
        fields: Top-level manifest fields to merge, e.g. ``{"name": "my-app"}``.
        write: Serialise the merged manifest back into the record's contents.
    """
    fields = dict(fields or {})

    def _packages(record: FileRecord) -> FileRecord:
        if record.basename != MANIFEST_NAME:
            return record
        try:
            manifest = json.loads(record.contents.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            # Template placeholders can make a manifest invalid JSON until
            # it has been rendered.
            return record
        if not isinstance(manifest, dict):
            return record

        merged = {**manifest, **fields}
        record.data["package"] = merged
        if write:
            record.contents = (json.dumps(merged, indent=2) + "\n").encode("utf-8")
        return record

    return _packages
