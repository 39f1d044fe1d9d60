"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/categorizer.py
Assigns every file exactly one category using an ordered rule set.
The first matching rule wins; files matching no rule are Uncategorized.
"""

from typing import Dict, List, Optional, Sequence
import logging

from filededup.core.interfaces import Categorizer, LogRecorder
from filededup.core.models import UNCATEGORIZED, CategoryRule, FileRecord, LogType
from filededup.core.rules import matches_rule, validate_rules

logger = logging.getLogger(__name__)


class CategorizerImpl(Categorizer):
    """Rule-based categorizer. Rule order is priority."""

    def __init__(self, rules: Sequence[CategoryRule]):
        if isinstance(rules, dict):
            raise TypeError("Rules must be an ordered sequence, not a mapping")
        self.rules = tuple(rules)
        self.warnings = validate_rules(self.rules)

    def classify(self, file: FileRecord) -> Optional[CategoryRule]:
        """Returns the first rule matching `file`, or None."""
        for rule in self.rules:
            if matches_rule(file.name, file.path, file.extension, rule):
                return rule
        return None

    def categorize(
            self,
            files: List[FileRecord],
            log: Optional[LogRecorder] = None
    ) -> Dict[str, List[FileRecord]]:
        categories: Dict[str, List[FileRecord]] = {}

        for file in files:
            rule = self.classify(file)
            file.category = rule.name if rule else UNCATEGORIZED
            categories.setdefault(file.category, []).append(file)

            if log is not None:
                message = f"File categorized as {rule.name}" if rule else "File marked as uncategorized"
                log.record(LogType.CATEGORY, message, file.path, file.content_digest)

        logger.debug(f"Categorized {len(files)} files into {len(categories)} categories")
        return categories
