"""Jinja2 rendering of record contents.

Text records are rendered as Jinja2 templates with the given data; records
that are not valid UTF-8 (images, archives) pass through untouched.  A
trailing ``.j2`` suffix is stripped from the file name when ``strip_suffix``
is set.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined, Undefined

from sprout.stream import FileRecord, Stage

TEMPLATE_SUFFIX = ".j2"


def create_environment(strict: bool = False) -> Environment:
    """Build the Jinja2 environment shared by template stages."""
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined if strict else Undefined,
    )
    env.filters["slugify"] = _slugify_filter
    env.filters["pascal_case"] = _pascal_case_filter
    env.filters["snake_case"] = _snake_case_filter
    env.filters["camel_case"] = _camel_case_filter
    return env


def template(
    data: Mapping[str, Any] | None = None,
    *,
    strip_suffix: bool = True,
    strict: bool = False,
    env: Environment | None = None,
) -> Stage:
    """Build a stage rendering each text record with *data*.

    Args:
        data: Template variables.  ``record`` is also available inside
            templates.
        strip_suffix: Remove a trailing ``.j2`` from output file names.
        strict: Fail on undefined variables instead of rendering them empty.
        env: Custom Jinja2 environment (filters, delimiters).
    """
    env = env or create_environment(strict)
    variables = dict(data or {})

    def _template(record: FileRecord) -> FileRecord:
        try:
            source = record.contents.decode("utf-8")
        except UnicodeDecodeError:
            return record

        rendered = env.from_string(source).render(**variables, record=record)
        record.contents = rendered.encode("utf-8")
        if strip_suffix and record.path.suffix == TEMPLATE_SUFFIX:
            record.path = record.path.with_suffix("")
        return record

    return _template


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""
