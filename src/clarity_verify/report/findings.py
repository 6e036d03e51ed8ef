"""统一的发现（Finding）模型与从验证结果到发现的转换。"""
from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_verify.verification.models import VerificationResult

from .categories import rule_for_title


class Finding(BaseModel):
    """一条归类后的验证问题（行号从 1 开始，永不为非正数）。"""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    message: str
    file: str
    line: int = Field(..., ge=1)
    column: Optional[int] = Field(default=None, ge=1)


def coerce_line(line_number: int) -> int:
    """未知或非法行号一律落到第 1 行。"""
    return line_number if line_number > 0 else 1


def build_findings(results: Iterable[VerificationResult]) -> List[Finding]:
    """每个未通过结果中的每条失败记录生成一条 Finding。"""
    findings: List[Finding] = []
    for result in results:
        if result.verified:
            continue
        for failure in result.failures:
            findings.append(
                Finding(
                    rule_id=rule_for_title(failure.title),
                    message=f"Verification failed in function '{failure.function_name}': {failure.failing_code}",
                    file=result.file,
                    line=coerce_line(failure.line_number),
                    column=1,
                )
            )
    return findings
