"""
报告层：标题归类、Finding 生成、Markdown 摘要与 SARIF 适配。
"""

from .categories import RULES, TITLE_TO_RULE, Rule, rule_for_title
from .findings import Finding, build_findings, coerce_line
from .sarif import build_sarif, write_report_text, write_sarif
from .summary import generate_summary

__all__ = [
    "RULES",
    "TITLE_TO_RULE",
    "Finding",
    "Rule",
    "build_findings",
    "build_sarif",
    "coerce_line",
    "generate_summary",
    "rule_for_title",
    "write_report_text",
    "write_sarif",
]
