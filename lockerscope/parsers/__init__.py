from lockerscope.parsers.account_report import (
    AccountSummary,
    ParsedAccountReport,
    ReportEntry,
    clean_token,
    deduplicate_tokens,
    extract_account_details,
    iter_report_entries,
    parse_account_report,
)

__all__ = [
    "AccountSummary",
    "ParsedAccountReport",
    "ReportEntry",
    "clean_token",
    "deduplicate_tokens",
    "extract_account_details",
    "iter_report_entries",
    "parse_account_report",
]
