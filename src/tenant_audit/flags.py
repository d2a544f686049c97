"""Flag evaluation for inspected files.

Each rule maps a file's content and path to one human-readable flag. Rules
always run in the order of ``FLAG_RULES``; that order is the order flags are
reported in.
"""

import unicodedata
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .file_ops import file_extension

NEZHA_FLAG = "Nezha was detected"
HAN_FLAG = "Contains Chinese characters"
SHELL_SCRIPT_FLAG = "File ends with .sh"
TUNNEL_KEYWORDS_FLAG = "File contains 'argo' or 'cloudflare'"
ROOT_REFERENCE_FLAG = "Contains references to 'root'"

# Unicode character-name prefixes of code points in the Han script
_HAN_NAME_PREFIXES = (
    "CJK UNIFIED IDEOGRAPH",
    "CJK COMPATIBILITY IDEOGRAPH",
    "CJK RADICAL",
    "KANGXI RADICAL",
    "HANGZHOU NUMERAL",
    "OLD CHINESE",
    "VIETNAMESE ALTERNATE READING MARK",
)
_HAN_NAMES = frozenset(
    {
        "IDEOGRAPHIC ITERATION MARK",
        "VERTICAL IDEOGRAPHIC ITERATION MARK",
        "IDEOGRAPHIC NUMBER ZERO",
    }
)
# CJK RADICAL REPEAT (U+2E80) is the lowest Han code point
_HAN_MIN_CODEPOINT = 0x2E80


def is_han(char: str) -> bool:
    """Return True if a single character belongs to the Han script."""
    if ord(char) < _HAN_MIN_CODEPOINT:
        return False
    name = unicodedata.name(char, "")
    return name.startswith(_HAN_NAME_PREFIXES) or name in _HAN_NAMES


def contains_han(text: str) -> bool:
    """Return True at the first Han-script character in text."""
    return any(is_han(ch) for ch in text)


@dataclass(frozen=True)
class FlagRule:
    """A named heuristic producing one flag."""

    name: str
    flag: str
    matches: Callable[[str, str], bool]


FLAG_RULES: tuple[FlagRule, ...] = (
    FlagRule("nezha", NEZHA_FLAG, lambda content, path: "nezha" in content),
    FlagRule("han", HAN_FLAG, lambda content, path: contains_han(content)),
    FlagRule(
        "shell_script",
        SHELL_SCRIPT_FLAG,
        lambda content, path: file_extension(path) == ".sh",
    ),
    FlagRule(
        "tunnel_keywords",
        TUNNEL_KEYWORDS_FLAG,
        lambda content, path: "argo" in content or "cloudflare" in content,
    ),
    FlagRule("root_reference", ROOT_REFERENCE_FLAG, lambda content, path: "root" in content),
)

RULE_NAMES: tuple[str, ...] = tuple(rule.name for rule in FLAG_RULES)


def evaluate(content: str, path: str = "", rules: Iterable[str] = RULE_NAMES) -> list[str]:
    """
    Evaluate file content and path against the flag rules.

    Pure function: the same inputs always give the same, identically
    ordered list.

    Args:
        content: Decoded file content
        path: File path, used by path-derived rules
        rules: Names of enabled rules; their order does not affect output order

    Returns:
        Flags in rule order, empty if nothing matched
    """
    enabled = set(rules)
    return [
        rule.flag
        for rule in FLAG_RULES
        if rule.name in enabled and rule.matches(content, path)
    ]
