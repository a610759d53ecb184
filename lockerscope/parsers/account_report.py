"""
Parser for account-report text.

Report lines look like:
    AthenaCharacter: CID_028_Athena_Commando_F_Halloween [2017-11-02]
    AthenaBackpack: BID_004_BlackKnight1

Input is the raw text of each document page; PDF extraction happens
upstream. Output is the per-category token inventory the resolver consumes,
plus acquisition dates for character tokens.
"""

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date

from lockerscope.models.catalog import Category, OwnedItemToken

# Groups: (category, details)
ITEM_LINE_PATTERN = re.compile(r"(\bAthena\w+):\s*(.+)", re.IGNORECASE)

# Bare, bracketed or parenthesized YYYY-MM-DD
DATE_PATTERN = re.compile(
    r"\b(\d{4}-\d{2}-\d{2})\b|\[(\d{4}-\d{2}-\d{2})\]|\((\d{4}-\d{2}-\d{2})\)",
    re.IGNORECASE,
)
DATE_REMOVAL_PATTERN = re.compile(r"\s*\[?\(?\d{4}-\d{2}-\d{2}\)?\]?\s*")

# Every report line carries this trailing filler after the id
FILLER_SUFFIX = "1"

EMOTE_PREFIX = "eid-"

ACCOUNT_KEYWORDS = (
    "Account Id",
    "Display Name",
    "Created",
    "Last Failed Login",
    "Country",
)
MORE_ACCOUNT_KEYWORDS = (
    "Communication Language",
    "Headless: false",
    "Number Of Display Name Changed",
)

ACCOUNT_HEADER = "----- Account Details -----"
MORE_ACCOUNT_HEADER = "----- More Account Details -----"
COUNTS_HEADER = "----- Cosmetic Counts -----"


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """One item line from a report, before deduplication."""

    category: Category
    token: str
    acquired_on: date | None = None


@dataclass
class ParsedAccountReport:
    """
    Owned-item inventory extracted from a report.

    Attributes:
        tokens: Category -> tokens in first-seen order, deduplicated
        acquisition_dates: Lower-cased character token -> acquisition date
    """

    tokens: dict[Category, list[OwnedItemToken]] = field(
        default_factory=lambda: {category: [] for category in Category}
    )
    acquisition_dates: dict[str, date] = field(default_factory=dict)

    @property
    def category_counts(self) -> dict[Category, int]:
        return {category: len(self.tokens.get(category, [])) for category in Category}

    @property
    def total_items(self) -> int:
        return sum(len(tokens) for tokens in self.tokens.values())

    def is_empty(self) -> bool:
        return self.total_items == 0

    def token_pairs(self) -> list[tuple[Category, str]]:
        """Flatten to (category, raw token) pairs in report order per category."""
        return [
            (category, token.text) for category, tokens in self.tokens.items() for token in tokens
        ]

    def sorted_item_lists(self) -> dict[Category, list[str]]:
        """Per-category token text sorted ascending (flat output file content)."""
        return {
            category: sorted(token.text for token in tokens)
            for category, tokens in self.tokens.items()
        }


def _parse_iso_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def clean_token(details: str) -> tuple[str, date | None]:
    """
    Clean one item detail string.

    Removes a YYYY-MM-DD acquisition date (and its brackets), then the
    trailing filler character, then converts underscores to hyphens.

    Returns:
        (token, acquisition date or None)
    """
    details = details.strip()
    acquired_on: date | None = None

    match = DATE_PATTERN.search(details)
    if match:
        date_text = next(group for group in match.groups() if group)
        acquired_on = _parse_iso_date(date_text)
        if acquired_on is not None:
            details = DATE_REMOVAL_PATTERN.sub("", details).strip()

    details = details.removesuffix(FILLER_SUFFIX)
    return details.replace("_", "-"), acquired_on


def iter_report_entries(text_blocks: Iterable[str]) -> Iterator[ReportEntry]:
    """
    Yield item entries from report text in document order.

    Skips unrecognized categories, empty tokens, and emote lines that are
    not real emotes (ids without the "eid-" prefix).
    """
    for text in text_blocks:
        if not text:
            continue

        for match in ITEM_LINE_PATTERN.finditer(text):
            category = Category.parse(match.group(1))
            if category is None:
                continue

            token, acquired_on = clean_token(match.group(2))
            if not token:
                continue

            if category is Category.EMOTE and not token.lower().startswith(EMOTE_PREFIX):
                continue

            yield ReportEntry(category=category, token=token, acquired_on=acquired_on)


def deduplicate_tokens(tokens: Iterable[OwnedItemToken]) -> list[OwnedItemToken]:
    """Drop repeated token text, keeping the first occurrence and order."""
    seen: set[str] = set()
    unique: list[OwnedItemToken] = []
    for token in tokens:
        if token.text in seen:
            continue
        seen.add(token.text)
        unique.append(token)
    return unique


def parse_account_report(text_blocks: Iterable[str]) -> ParsedAccountReport:
    """
    Parse report pages into a deduplicated per-category inventory.

    Args:
        text_blocks: Raw text of each page

    Returns:
        ParsedAccountReport. Acquisition dates are kept for characters only;
        the last date seen for a token wins.
    """
    report = ParsedAccountReport()
    seen: dict[Category, set[str]] = {category: set() for category in Category}

    for entry in iter_report_entries(text_blocks):
        if entry.category is Category.CHARACTER and entry.acquired_on is not None:
            report.acquisition_dates[entry.token.lower()] = entry.acquired_on

        if entry.token in seen[entry.category]:
            continue
        seen[entry.category].add(entry.token)

        acquired_on = entry.acquired_on if entry.category is Category.CHARACTER else None
        report.tokens[entry.category].append(
            OwnedItemToken(text=entry.token, acquired_on=acquired_on)
        )

    return report


@dataclass
class AccountSummary:
    """
    Account details and cosmetic counts pulled from a report.

    Each line is formatted " | Keyword : value".
    """

    account_lines: list[str] = field(default_factory=list)
    more_account_lines: list[str] = field(default_factory=list)
    count_lines: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.account_lines or self.more_account_lines or self.count_lines)

    def render(self) -> str:
        """Sectioned text; empty sections are omitted."""
        output: list[str] = []
        if self.account_lines:
            output.append(ACCOUNT_HEADER)
            output.extend(self.account_lines)
        if self.more_account_lines:
            output.append(MORE_ACCOUNT_HEADER)
            output.extend(self.more_account_lines)
        if self.count_lines:
            output.append(COUNTS_HEADER)
            output.extend(self.count_lines)
        return "\n".join(output)


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)} *: *([^\n\r]+)", re.IGNORECASE)


_ACCOUNT_PATTERNS = {keyword: _keyword_pattern(keyword) for keyword in ACCOUNT_KEYWORDS}
_MORE_ACCOUNT_PATTERNS = {keyword: _keyword_pattern(keyword) for keyword in MORE_ACCOUNT_KEYWORDS}


def cosmetic_count_lines(category_counts: dict[Category, int]) -> list[str]:
    """Total line followed by one line per category, in category order."""
    lines = [f" | Total Cosmetics : {sum(category_counts.values())}"]
    for category in Category:
        lines.append(f" | {category.count_label} : {category_counts.get(category, 0)}")
    return lines


def extract_account_details(
    text_blocks: Sequence[str],
    category_counts: dict[Category, int] | None = None,
) -> AccountSummary:
    """
    Scan report pages for account detail keywords.

    Args:
        text_blocks: Raw text of each page
        category_counts: Per-category item counts; omitted counts section if None

    Returns:
        AccountSummary with each section's lines sorted
    """
    account_lines: list[str] = []
    more_account_lines: list[str] = []

    for text in text_blocks:
        if not text:
            continue
        for keyword, pattern in _ACCOUNT_PATTERNS.items():
            for match in pattern.finditer(text):
                account_lines.append(f" | {keyword} : {match.group(1).strip()}")
        for keyword, pattern in _MORE_ACCOUNT_PATTERNS.items():
            for match in pattern.finditer(text):
                more_account_lines.append(f" | {keyword} : {match.group(1).strip()}")

    return AccountSummary(
        account_lines=sorted(account_lines),
        more_account_lines=sorted(more_account_lines),
        count_lines=cosmetic_count_lines(category_counts) if category_counts is not None else [],
    )
