"""
Core scan engine — fingerprinter, rule matcher, categorizer, grouper, activity log and session.

This package contains the whole domain logic of filededup:
- HasherImpl + SHA256AlgorithmImpl: chunked SHA-256 content fingerprints
- matches_rule / load_rules: ordered, first-match-wins categorization rules
- CategorizerImpl: one category per file, CATEGORY log entries
- FileGrouperImpl: order-preserving grouping by digest, DUPLICATE log entries
- ActivityLog: append-only, filterable, exportable event log
- ScanSession: scan(files) -> ScanResult

No filesystem traversal and no storage here — callers supply FileSource objects.
"""

from .models import (
    FileSource, FileRecord, DuplicateGroup, RuleConditions, CategoryRule,
    LogType, LogEntry, ScanResult, ScanParams, UNCATEGORIZED)
from .exceptions import UnreadableSource, InvalidRule, ScanCancelled
from .hasher import HasherImpl, SHA256AlgorithmImpl
from .rules import DEFAULT_RULES, matches_rule, load_rules, rules_from_config, rules_to_config, validate_rules
from .activity_log import ActivityLog
from .grouper import FileGrouperImpl
from .categorizer import CategorizerImpl
from .session import ScanSession

__all__ = [
    "FileSource",
    "FileRecord",
    "DuplicateGroup",
    "RuleConditions",
    "CategoryRule",
    "LogType",
    "LogEntry",
    "ScanResult",
    "ScanParams",
    "UNCATEGORIZED",
    "UnreadableSource",
    "InvalidRule",
    "ScanCancelled",
    "HasherImpl",
    "SHA256AlgorithmImpl",
    "DEFAULT_RULES",
    "matches_rule",
    "load_rules",
    "rules_from_config",
    "rules_to_config",
    "validate_rules",
    "ActivityLog",
    "FileGrouperImpl",
    "CategorizerImpl",
    "ScanSession",
]
