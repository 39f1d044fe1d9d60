from filededup.core.models import LogType

LOG_TYPE_ALIASES = {
    "scan": LogType.SCAN,
    "duplicate": LogType.DUPLICATE,
    "category": LogType.CATEGORY,
    "delete": LogType.DELETE,
}

LOG_TYPE_CHOICES = list(LOG_TYPE_ALIASES.keys())

LOG_TYPE_HELP_TEXT = (
    "Show only log entries of one type (with --show-log):\n"
    "  scan       : scan start/finish, scanned and unreadable files\n"
    "  duplicate  : one entry per duplicate group\n"
    "  category   : one entry per categorized file\n"
    "  delete     : files moved to trash\n"
)

RULES_HELP_TEXT = (
    "JSON file with ordered categorization rules (first match wins):\n"
    '  {"rules": [{"name": "Browsers",\n'
    '              "conditions": {"filenameContains": ["chrome"],\n'
    '                             "pathContains": ["/applications/"],\n'
    '                             "extensions": [".app"]}}]}\n'
    "Default: built-in rules (Browsers, Media Players, Images, Documents, ...)"
)

EPILOG_TEXT = """
Examples:
  Find duplicates among some files
  %(prog)s ~/Downloads/*.zip ~/Desktop/*.zip

  Read paths from another tool (no directory walking is done by %(prog)s)
  find ~/Applications -type f | %(prog)s -

  Categorize with custom rules and print the category map
  %(prog)s ~/Downloads/* --rules rules.json --categories

  Write the built-in rules to a file as a starting point for your own
  %(prog)s --dump-rules > rules.json

  Move all but the first file of every group to trash (with confirmation prompt)
  %(prog)s ~/Downloads/* --keep-one

  Same as above without confirmation, keeping the activity log
  %(prog)s ~/Downloads/* --keep-one --force --export-log ~/dedup.log

  Show only duplicate entries of the activity log mentioning "chrome"
  %(prog)s ~/Downloads/* --show-log --log-type duplicate --search chrome
"""
