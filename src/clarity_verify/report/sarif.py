"""
SARIF 2.1.0 适配器：把 Finding 列表与规则表序列化为静态分析交换格式。
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from clarity_verify.errors import ReportWriteError

from .categories import RULES, Rule
from .findings import Finding

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
)


def _rule_to_sarif(rule: Rule) -> Dict[str, Any]:
    return {
        "id": rule.id,
        "shortDescription": {"text": rule.short_description},
        "helpText": {"text": rule.help_text},
    }


def _finding_to_sarif(finding: Finding) -> Dict[str, Any]:
    region: Dict[str, Any] = {"startLine": finding.line}
    if finding.column is not None:
        region["startColumn"] = finding.column
    return {
        "ruleId": finding.rule_id,
        "level": "error",
        "message": {"text": finding.message},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": finding.file},
                    "region": region,
                }
            }
        ],
    }


def build_sarif(findings: Sequence[Finding], tool_name: str, tool_version: str) -> Dict[str, Any]:
    results: List[Dict[str, Any]] = [_finding_to_sarif(f) for f in findings]
    return {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": tool_name,
                        "version": tool_version,
                        "rules": [_rule_to_sarif(r) for r in RULES],
                    }
                },
                "results": results,
            }
        ],
    }


def write_report_text(path: str | Path, text: str) -> Path:
    """写入报告文本（自动创建父目录）；失败时抛 ReportWriteError。"""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(f"Failed to write report {target}: {e}") from e
    return target


def write_sarif(document: Dict[str, Any], path: str | Path = "results.sarif") -> Path:
    return write_report_text(path, json.dumps(document, indent=2, ensure_ascii=False))
