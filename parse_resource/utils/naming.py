"""
Name inflection helpers used to derive class names from relationship fields.

`belongs_to` on field `post` targets class `Post`; `has_many` on field
`comments` targets class `Comment`. Only the regular English plural forms
are handled; pass an explicit class name for anything else.
"""

from __future__ import annotations

import re

_WORD_BOUNDARY = re.compile(r"[_\-\s]+")


def camelize(name: str) -> str:
    """`blog_post` -> `BlogPost`; already camelized names are kept."""
    parts = [part for part in _WORD_BOUNDARY.split(name) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def singularize(word: str) -> str:
    """`comments` -> `comment`, `categories` -> `category`, `boxes` -> `box`."""
    lowered = word.lower()
    if lowered.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lowered.endswith(("sses", "xes", "ches", "shes", "zes")):
        return word[:-2]
    if lowered.endswith("s") and not lowered.endswith("ss"):
        return word[:-1]
    return word


def foreign_key_for(class_name: str) -> str:
    """Field on the child that points back at an owner of `class_name`."""
    return class_name.lower()


__all__ = ["camelize", "foreign_key_for", "singularize"]
