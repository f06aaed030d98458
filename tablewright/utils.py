"""Naming helpers for deriving table and key names from record type names."""

import re

# (pattern, replacement) pairs, checked in order
_PLURAL_RULES: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])um$", r"\1a"),
    (r"(bu)s$", r"\1ses"),
    (r"(alias|status)$", r"\1es"),
    (r"(octop|vir)us$", r"\1i"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULAR_RULES: list[tuple[str, str]] = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(alias|status)es$", r"\1"),
    (r"(octop|vir)i$", r"\1us"),
    (r"(bus)es$", r"\1"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"([^f])ves$", r"\1fe"),
    (r"(analy|ba|diagno|parenthe|progno|synop|the)ses$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"ss$", "ss"),
    (r"s$", ""),
]

_IRREGULAR: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "ox": "oxen",
}

_UNCOUNTABLE = {"equipment", "information", "money", "series", "species", "news"}


def _apply_rules(word: str, rules: list[tuple[str, str]]) -> str:
    for pattern, replacement in rules:
        if re.search(pattern, word):
            return re.sub(pattern, replacement, word)
    return word


def pluralize(word: str) -> str:
    """Return the plural form of an English noun.

    Example:
        >>> pluralize("category")
        "categories"
    """
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return word[0] + _IRREGULAR[lower][1:]
    return _apply_rules(word, _PLURAL_RULES)


def singularize(word: str) -> str:
    """Return the singular form of an English noun."""
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    for singular, plural in _IRREGULAR.items():
        if lower == plural:
            return word[0] + singular[1:]
    return _apply_rules(word, _SINGULAR_RULES)


def underscore(name: str) -> str:
    """Convert a CamelCase name to snake_case.

    Example:
        >>> underscore("BlogPost")
        "blog_post"
    """
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def camelize(name: str) -> str:
    """Convert a snake_case name to CamelCase ("blog_post" -> "BlogPost")."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def tableize(type_name: str) -> str:
    """Derive a table name from a record type name ("BlogPost" -> "blog_posts")."""
    return pluralize(underscore(type_name))


def foreign_key(name: str) -> str:
    """Derive a foreign key column from a record type or table name.

    Example:
        >>> foreign_key("Article")
        "article_id"
    """
    return f"{underscore(name)}_id"
