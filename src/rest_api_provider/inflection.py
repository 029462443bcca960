"""Minimal English inflection for resource and field names.

Only the handful of rules needed to derive default paths
(``BlogPost`` -> ``/blog_posts/:slug``), default relation targets
(``blog_posts`` -> ``BlogPost``) and snake_case field names
(``firstName`` -> ``first_name``).
"""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

_UNCOUNTABLE = {"equipment", "information", "rice", "money", "species", "series", "fish", "sheep", "news"}
_IRREGULAR = {"person": "people", "man": "men", "child": "children", "mouse": "mice"}
_IRREGULAR_PLURALS = {plural: singular for singular, plural in _IRREGULAR.items()}


def underscore(name: str) -> str:
    """Convert a CamelCase or camelCase name to snake_case.

    >>> underscore("TestResource")
    'test_resource'
    >>> underscore("HTTPResponseCode")
    'http_response_code'
    >>> underscore("first-name")
    'first_name'
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


def camelize(name: str) -> str:
    """Convert snake_case to CamelCase.

    >>> camelize("test_resource")
    'TestResource'
    """
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def pluralize(word: str) -> str:
    """Return the plural of the last word in a snake_case *word*.

    >>> pluralize("test_resource")
    'test_resources'
    >>> pluralize("category")
    'categories'
    """
    head, _, last = word.rpartition("_")
    prefix = f"{head}_" if head else ""
    lower = last.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return prefix + _IRREGULAR[lower]
    if re.search(r"[^aeiou]y$", lower):
        return prefix + last[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return prefix + last + "es"
    return prefix + last + "s"


def singularize(word: str) -> str:
    """Return the singular of the last word in a snake_case *word*.

    >>> singularize("test_resources")
    'test_resource'
    >>> singularize("categories")
    'category'
    """
    head, _, last = word.rpartition("_")
    prefix = f"{head}_" if head else ""
    lower = last.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        return prefix + _IRREGULAR_PLURALS[lower]
    if lower.endswith("ies") and len(lower) > 3:
        return prefix + last[:-3] + "y"
    if re.search(r"(ss|x|z|ch|sh)es$", lower):
        return prefix + last[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return prefix + last[:-1]
    return word


def classify(name: str) -> str:
    """Turn a (possibly plural) snake_case relation name into a class name.

    >>> classify("test_resources")
    'TestResource'
    >>> classify("author")
    'Author'
    """
    return camelize(singularize(underscore(name)))
