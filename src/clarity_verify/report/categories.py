"""
失败标题 -> 规则（类别）映射。

映射是封闭的静态表；未登记的标题统一归入 unknown-error。
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class Rule:
    id: str
    short_description: str
    help_text: str


ASSERTION = "clarity-verify-assertion"
OVERFLOW = "clarity-verify-overflow"
UNDERFLOW = "clarity-verify-underflow"
DIVISION_BY_ZERO = "clarity-verify-division-by-zero"
EXECUTION_ERROR = "clarity-verify-execution-error"
UNKNOWN_ERROR = "clarity-verify-unknown-error"

RULES: Tuple[Rule, ...] = (
    Rule(
        ASSERTION,
        "Assertion failure in Clarity contract",
        "An assertion in the Clarity contract failed during formal verification.",
    ),
    Rule(
        OVERFLOW,
        "Arithmetic overflow in Clarity contract",
        "An arithmetic operation in the Clarity contract may cause an overflow.",
    ),
    Rule(
        UNDERFLOW,
        "Arithmetic underflow in Clarity contract",
        "An arithmetic operation in the Clarity contract may cause an underflow.",
    ),
    Rule(
        DIVISION_BY_ZERO,
        "Division by zero in Clarity contract",
        "A division operation in the Clarity contract may cause a division by zero.",
    ),
    Rule(
        EXECUTION_ERROR,
        "Execution error in Clarity contract",
        "An error occurred during the execution of the Clarity contract.",
    ),
    Rule(
        UNKNOWN_ERROR,
        "Unknown error in Clarity contract",
        "An unknown error occurred during the verification of the Clarity contract.",
    ),
)

TITLE_TO_RULE: Mapping[str, str] = MappingProxyType({
    "assertion": ASSERTION,
    "arithmetic overflow": OVERFLOW,
    "arithmetic underflow": UNDERFLOW,
    "division by zero": DIVISION_BY_ZERO,
    "execution-error": EXECUTION_ERROR,
})


def rule_for_title(title: str) -> str:
    """按失败标题取规则 id；未登记的标题返回 unknown-error。"""
    return TITLE_TO_RULE.get(title, UNKNOWN_ERROR)
