"""Placeholder expansion for commit messages and marker-file records.

Recognised placeholders are a fixed set; anything else in braces is left in
place. Each placeholder is substituted at its first occurrence only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable

ALL_TYPES = "all"

_TYPE_WITH_COMMA = re.compile(r"\s*,\s*\{type\}|\{type\}\s*,\s*")


@dataclass(frozen=True)
class TemplateContext:
    environment: str
    deploy_type: str
    today: date = field(default_factory=date.today)


class Placeholder(str, Enum):
    ENV = "{env}"
    TYPE = "{type}"
    DATE_YMD_DASH = "{date:y-m-d}"
    DATE_YMD_SLASH = "{date:y/m/d}"
    DATE_DMY_DASH = "{date:d-m-y}"
    DATE_DMY_SLASH = "{date:d/m/y}"


_RESOLVERS: Dict[Placeholder, Callable[[TemplateContext], str]] = {
    Placeholder.ENV: lambda ctx: ctx.environment,
    Placeholder.TYPE: lambda ctx: ctx.deploy_type,
    Placeholder.DATE_YMD_DASH: lambda ctx: f"{ctx.today.year}-{ctx.today.month}-{ctx.today.day}",
    Placeholder.DATE_YMD_SLASH: lambda ctx: f"{ctx.today.year}/{ctx.today.month}/{ctx.today.day}",
    Placeholder.DATE_DMY_DASH: lambda ctx: f"{ctx.today.day}-{ctx.today.month}-{ctx.today.year}",
    Placeholder.DATE_DMY_SLASH: lambda ctx: f"{ctx.today.day}/{ctx.today.month}/{ctx.today.year}",
}

COMMIT_PLACEHOLDERS: tuple[Placeholder, ...] = (Placeholder.ENV, Placeholder.TYPE)
FILE_CONTENT_PLACEHOLDERS: tuple[Placeholder, ...] = tuple(Placeholder)


def strip_type_placeholder(template: str) -> str:
    """Drop ``{type}`` together with one adjacent comma (first match only).

    ``"deploy: {env}, {type}"`` becomes ``"deploy: {env}"`` and
    ``"{type}, {env}"`` becomes ``"{env}"``. A ``{type}`` without a neighbouring
    comma is left for normal substitution.
    """
    return _TYPE_WITH_COMMA.sub("", template, count=1)


def expand(template: str, context: TemplateContext, placeholders: Iterable[Placeholder]) -> str:
    result = template
    if context.deploy_type == ALL_TYPES:
        result = strip_type_placeholder(result)
    for placeholder in placeholders:
        result = result.replace(placeholder.value, _RESOLVERS[placeholder](context), 1)
    return result


def expand_commit_message(template: str, context: TemplateContext) -> str:
    return expand(template, context, COMMIT_PLACEHOLDERS)


def expand_file_content(template: str, context: TemplateContext) -> str:
    return expand(template, context, FILE_CONTENT_PLACEHOLDERS)
