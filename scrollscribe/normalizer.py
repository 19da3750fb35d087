"""
Clean raw OCR text from one chunk.

The policy lives in two tables so each rule can be tested on its own:
- NOISE_RULES: regex substitutions applied to the whole text, in order
- LINE_FILTERS: predicates that drop a whole line when they return True

``normalize`` is idempotent, keeps line order, and never joins lines.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Pattern, Tuple

# Unicode blocks that only ever hold emoji, pictographs or decorative symbols
SYMBOL_RANGES: List[Tuple[str, str]] = [
    ("\u2190", "\u21FF"),  # Arrows
    ("\u2300", "\u23FF"),  # Miscellaneous Technical
    ("\u2460", "\u24FF"),  # Enclosed Alphanumerics
    ("\u25A0", "\u25FF"),  # Geometric Shapes
    ("\u2600", "\u26FF"),  # Miscellaneous Symbols
    ("\u2700", "\u27BF"),  # Dingbats
    ("\u2B00", "\u2BFF"),  # Miscellaneous Symbols and Arrows
    ("\uFE00", "\uFE0F"),  # Variation Selectors
    ("\U0001F000", "\U0001F0FF"),  # Mahjong, Domino, Playing Cards
    ("\U0001F100", "\U0001F1FF"),  # Enclosed Alphanumeric Supplement, flags
    ("\U0001F300", "\U0001F5FF"),  # Symbols and Pictographs
    ("\U0001F600", "\U0001F64F"),  # Emoticons
    ("\U0001F680", "\U0001F6FF"),  # Transport and Map
    ("\U0001F700", "\U0001F7FF"),  # Alchemical, Geometric Shapes Extended
    ("\U0001F800", "\U0001F8FF"),  # Supplemental Arrows-C
    ("\U0001F900", "\U0001F9FF"),  # Supplemental Symbols and Pictographs
    ("\U0001FA00", "\U0001FAFF"),  # Chess, Symbols and Pictographs Extended-A
]

ZERO_WIDTH_CHARS = "\u200B\u200C\u200D\u2060\uFEFF"

# Whole-line labels from review-page chrome captured in screenshots
UI_CHROME_KEYWORDS: List[str] = [
    "더보기",
    "접기",
    "펼쳐보기",
    "펼쳐서 더보기",
    "리뷰 더보기",
    "번역보기",
    "원문보기",
    "답글",
    "신고",
    "See more",
    "See less",
    "Read more",
    "Translate",
    "Show original",
    "Reply",
    "Report",
]

# Horizontal whitespace: any whitespace except the newline
HSPACE = r"[^\S\n]"

SPECIAL_CHAR_RATIO_LIMIT = 0.7


@dataclass(frozen=True)
class NoiseRule:
    """A regex substitution applied to the whole text."""

    name: str
    pattern: Pattern[str]
    replacement: str = ""

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True)
class LineFilter:
    """Drops a line when ``predicate`` returns True."""

    name: str
    predicate: Callable[[str], bool]

    def drops(self, line: str) -> bool:
        return self.predicate(line)


def _char_class(ranges: List[Tuple[str, str]]) -> str:
    return "[" + "".join(f"{start}-{end}" for start, end in ranges) + "]"


NOISE_RULES: List[NoiseRule] = [
    NoiseRule("line_endings", re.compile(r"\r\n?"), "\n"),
    NoiseRule("symbols", re.compile(_char_class(SYMBOL_RANGES) + "+")),
    NoiseRule("zero_width", re.compile(f"[{ZERO_WIDTH_CHARS}]+")),
    # "리뷰 >" style navigation markers at the end of a line
    NoiseRule(
        "trailing_marker",
        re.compile(rf"(?<=\S)(?:{HSPACE}*>)+{HSPACE}*$", re.MULTILINE),
    ),
]

UI_CHROME_PATTERN: Pattern[str] = re.compile(
    "(?:"
    + "|".join(
        f"{HSPACE}+".join(re.escape(word) for word in keyword.split())
        for keyword in UI_CHROME_KEYWORDS
    )
    + ")",
    re.IGNORECASE,
)


def special_char_ratio(line: str) -> float:
    """Share of non-space characters that are neither letters nor digits."""
    chars = [c for c in line if not c.isspace()]
    if not chars:
        return 0.0
    special = sum(1 for c in chars if not c.isalnum())
    return special / len(chars)


def _mostly_special(line: str) -> bool:
    return special_char_ratio(line) > SPECIAL_CHAR_RATIO_LIMIT


def _lone_symbol(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) == 1 and not stripped.isalnum()


def _ui_chrome(line: str) -> bool:
    return UI_CHROME_PATTERN.fullmatch(line.strip()) is not None


LINE_FILTERS: List[LineFilter] = [
    LineFilter("ui_chrome", _ui_chrome),
    LineFilter("mostly_special", _mostly_special),
    LineFilter("lone_symbol", _lone_symbol),
]


def normalize(raw_text: str) -> str:
    """
    Strip OCR noise from one chunk's text.

    Args:
        raw_text: Text as returned by the OCR engine

    Returns:
        Cleaned text: at most one blank line in a row, single spaces,
        no leading/trailing whitespace
    """
    if not raw_text:
        return ""

    text = raw_text
    for rule in NOISE_RULES:
        text = rule.apply(text)

    kept = [
        line
        for line in text.split("\n")
        if not any(f.drops(line) for f in LINE_FILTERS)
    ]

    lines = [re.sub(rf"{HSPACE}+", " ", line).strip() for line in kept]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
