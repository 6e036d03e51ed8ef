"""Markdown 验证摘要。"""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Sequence

from clarity_verify.verification.models import VerificationResult

from .categories import rule_for_title

SUMMARY_TITLE = "# Clarity Smart Contract Verification Summary"
ALL_VERIFIED_MESSAGE = "All functions were successfully verified!"


def _base_name(file: str) -> str:
    return PurePosixPath(file.replace("\\", "/")).name


def generate_summary(results: Sequence[VerificationResult]) -> str:
    total = len(results)
    verified = sum(1 for r in results if r.verified)
    failed = total - verified

    parts = [
        f"{SUMMARY_TITLE}\n\n",
        f"- Total functions verified: {total}\n",
        f"- Successfully verified: {verified}\n",
        f"- Verification failed: {failed}\n\n",
    ]

    if failed == 0:
        parts.append(f"{ALL_VERIFIED_MESSAGE}\n")
        return "".join(parts)

    parts.append("## Failed Verifications\n\n")
    for result in results:
        if result.verified:
            continue
        parts.append(f"### Function: `{result.function_name}` in `{_base_name(result.file)}`\n\n")
        for failure in result.failures:
            line = failure.line_number if failure.line_number > 0 else "unknown"
            parts.append(f"- **{failure.title}** (`{rule_for_title(failure.title)}`) at line {line}\n")
            parts.append(f"  `{failure.failing_code}`\n\n")

    return "".join(parts)
