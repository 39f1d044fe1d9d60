"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/rules.py
Declarative categorization rules: matching, loading and validation.

RULE FORMAT
-----------
Rules are kept in an ordered sequence; order is priority (first match wins).
The JSON document format is:

    {"rules": [
        {"name": "Browsers",
         "conditions": {"pathContains": [...], "filenameContains": [...], "extensions": [...]}}
    ]}

MATCHING
--------
A rule matches when ANY populated condition list matches:
  • pathContains     : the lowercased path contains one of the substrings
  • filenameContains : the lowercased name contains one of the substrings
  • extensions       : the lowercased extension equals one of the listed extensions
A rule without populated conditions never matches.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from filededup.core.exceptions import InvalidRule
from filededup.core.models import CategoryRule, RuleConditions

logger = logging.getLogger(__name__)

_CONDITION_KEYS = {
    "pathContains": "path_contains",
    "filenameContains": "filename_contains",
    "extensions": "extensions",
}


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def matches_rule(file_name: str, file_path: str, extension: str, rule: CategoryRule) -> bool:
    """True if any populated condition list of `rule` matches the file."""
    conditions = rule.conditions
    file_name = file_name.lower()
    file_path = file_path.lower()
    extension = extension.lower()

    if conditions.path_contains:
        if any(keyword.lower() in file_path for keyword in conditions.path_contains):
            return True

    if conditions.filename_contains:
        if any(keyword.lower() in file_name for keyword in conditions.filename_contains):
            return True

    if conditions.extensions and extension:
        if any(extension == _normalize_extension(ext) for ext in conditions.extensions):
            return True

    return False


def validate_rules(rules: Sequence[CategoryRule]) -> List[str]:
    """
    Returns configuration warnings for a rule set.
    An empty set and rules without conditions are legal but degenerate.
    """
    warnings = []
    if not rules:
        warnings.append("No categorization rules configured; every file will be Uncategorized")
    for index, rule in enumerate(rules):
        if rule.conditions.is_empty():
            warnings.append(f"Rule #{index + 1} '{rule.name}' has no conditions and will never match")
    for warning in warnings:
        logger.warning(warning)
    return warnings


def _parse_condition(rule_name: str, key: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidRule(f"Rule '{rule_name}': '{key}' must be a list of strings")
    items = tuple(item for item in value if item.strip())
    if key == "extensions":
        items = tuple(_normalize_extension(item) for item in items)
    return items


def rule_from_dict(data: Mapping[str, Any]) -> CategoryRule:
    """Builds one CategoryRule from its JSON object form."""
    if not isinstance(data, Mapping):
        raise InvalidRule(f"Rule must be an object, got {type(data).__name__}")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidRule("Rule is missing a non-empty 'name'")

    raw_conditions = data.get("conditions") or {}
    if not isinstance(raw_conditions, Mapping):
        raise InvalidRule(f"Rule '{name}': 'conditions' must be an object")

    unknown = set(raw_conditions) - set(_CONDITION_KEYS)
    if unknown:
        logger.warning(f"Rule '{name}': ignoring unknown conditions {sorted(unknown)}")

    kwargs = {
        attr: _parse_condition(name, key, raw_conditions.get(key))
        for key, attr in _CONDITION_KEYS.items()
    }
    return CategoryRule(name=name.strip(), conditions=RuleConditions(**kwargs))


def rule_to_dict(rule: CategoryRule) -> dict:
    conditions = {}
    for key, attr in _CONDITION_KEYS.items():
        values = getattr(rule.conditions, attr)
        if values:
            conditions[key] = list(values)
    return {"name": rule.name, "conditions": conditions}


def rules_from_config(data: Any) -> Tuple[CategoryRule, ...]:
    """Parses an already-decoded rule document, preserving rule order."""
    if not isinstance(data, Mapping):
        raise InvalidRule("Rule document must be an object with a 'rules' list")
    raw_rules = data.get("rules", [])
    if not isinstance(raw_rules, list):
        raise InvalidRule("'rules' must be a list")
    rules = tuple(rule_from_dict(item) for item in raw_rules)
    validate_rules(rules)
    return rules


def rules_to_config(rules: Sequence[CategoryRule]) -> dict:
    """Inverse of rules_from_config, used to write a rules file template."""
    return {"rules": [rule_to_dict(rule) for rule in rules]}


def load_rules(path: str) -> Tuple[CategoryRule, ...]:
    """Loads an ordered rule set from a JSON file."""
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidRule(f"Invalid JSON in rules file {path}: {e}") from e
    except OSError as e:
        raise RuntimeError(f"Failed to read rules file {path}: {e}") from e

    rules = rules_from_config(data)
    logger.debug(f"Loaded {len(rules)} categorization rules from {path}")
    return rules


def _rule(name: str, path_contains: Iterable[str] = (), filename_contains: Iterable[str] = (),
          extensions: Iterable[str] = ()) -> CategoryRule:
    return CategoryRule(name, RuleConditions(
        path_contains=tuple(path_contains),
        filename_contains=tuple(filename_contains),
        extensions=tuple(extensions),
    ))


DEFAULT_RULES: Tuple[CategoryRule, ...] = (
    _rule("Browsers", filename_contains=["chrome", "firefox", "safari", "edge", "opera", "brave"]),
    _rule("Media Players", filename_contains=["vlc", "mpv", "itunes", "spotify", "winamp"]),
    _rule("Development", path_contains=["/node_modules/", "/.git/", "/venv/"],
          filename_contains=["vscode", "xcode", "intellij", "pycharm"]),
    _rule("Communication", filename_contains=["slack", "zoom", "teams", "discord", "skype", "telegram"]),
    _rule("Images", extensions=[".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".svg", ".webp"]),
    _rule("Videos", extensions=[".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v"]),
    _rule("Audio", extensions=[".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"]),
    _rule("Documents", extensions=[".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt",
                                   ".xls", ".xlsx", ".ppt", ".pptx", ".md"]),
    _rule("Archives", extensions=[".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".dmg"]),
)
