"""
验证任务规划：按文件分组变更函数，为每个 (文件, 函数) 生成一个 VerificationJob。

AST 产物缺失的文件整体跳过（记录告警，不中断）。
"""
from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Protocol, Sequence

from clarity_verify.detection.models import ChangedFunction

from .models import VerificationJob

CLARITY_SUFFIX = ".clar"


class AstArtifactProvider(Protocol):
    """file -> AST 产物引用；无法提供时返回 None。"""

    def get_artifact(self, file: str) -> Optional[str]: ...


def contract_name(file: str) -> str:
    """合约标识：文件名去掉 .clar 扩展名。"""
    name = PurePosixPath(file.replace("\\", "/")).name
    if name.endswith(CLARITY_SUFFIX):
        return name[: -len(CLARITY_SUFFIX)]
    return name


def resolve_flags(baseline: str, overrides: str) -> str:
    """基线开关在前、用户开关在后，用户开关可按文本追加或覆盖基线。"""
    return " ".join(part for part in (baseline.strip(), overrides.strip()) if part)


def group_by_file(changed: Sequence[ChangedFunction]) -> Dict[str, List[str]]:
    """按文件分组函数名；文件顺序与文件内函数顺序均保持发现顺序。"""
    grouped: Dict[str, List[str]] = {}
    for func in changed:
        grouped.setdefault(func.file, []).append(func.name)
    return grouped


def plan_jobs(
    changed: Sequence[ChangedFunction],
    provider: AstArtifactProvider,
    *,
    baseline_flags: str,
    flag_overrides: str = "",
    logger: Optional[logging.Logger] = None,
) -> List[VerificationJob]:
    """
    生成验证任务列表（顺序 = 文件顺序 × 文件内函数顺序）。
    """
    log = logger or logging.getLogger(__name__)
    flags = resolve_flags(baseline_flags, flag_overrides)
    jobs: List[VerificationJob] = []

    for file, functions in group_by_file(changed).items():
        artifact = provider.get_artifact(file)
        if not artifact:
            log.warning(f"未找到 {file} 的 AST 产物，跳过该文件的 {len(functions)} 个函数")
            continue

        contract = contract_name(file)
        for function_name in functions:
            jobs.append(
                VerificationJob(
                    file=file,
                    function_name=function_name,
                    contract_name=contract,
                    artifact=artifact,
                    flags=flags,
                )
            )

    log.info(f"生成 {len(jobs)} 个验证任务")
    return jobs
