"""Standard pipeline stages available to generators.

Quick usage::

    from sprout.plugins import modify, packages, template

    await api.pipeline(
        api.src("template/**"),
        template({"name": context.name}),
        modify.json(lambda data, record: {**data, "private": True}, pattern="package.json"),
        api.dest(),
    )
"""

from sprout.plugins.gitignore import gitignore
from sprout.plugins.modify import modify
from sprout.plugins.packages import packages
from sprout.plugins.template import template

__all__ = [
    "gitignore",
    "modify",
    "packages",
    "template",
]
