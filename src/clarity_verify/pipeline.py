"""
顶层编排：变更检测 -> 任务规划 -> 串行验证 -> 报告。

状态机（整体）：
    no_changes：比较器没有产出任何变更函数，直接返回，不进入后续阶段
    failure：至少一个结果未通过验证
    success：全部通过（包括没有生成任何任务的情况）

任务队列与结果累积器只归编排器所有，任何阶段都不并发修改。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from clarity_verify.config import VerifyConfig
from clarity_verify.detection.git_source import (
    RevisionSource,
    detect_changed_functions,
    filter_excluded,
)
from clarity_verify.detection.models import ChangedFunction
from clarity_verify.report.findings import Finding, build_findings
from clarity_verify.report.summary import generate_summary
from clarity_verify.verification.models import VerificationJob, VerificationResult
from clarity_verify.verification.planner import AstArtifactProvider, plan_jobs
from clarity_verify.verification.runner import ModelChecker, run_jobs


class VerificationStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NO_CHANGES = "no_changes"


@dataclass
class PipelineOutcome:
    status: VerificationStatus
    changed_functions: List[ChangedFunction] = field(default_factory=list)
    jobs: List[VerificationJob] = field(default_factory=list)
    results: List[VerificationResult] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)
    summary: str = ""


def should_fail(outcome: PipelineOutcome, fail_on_issue: bool) -> bool:
    """失败策略：开启 fail_on_issue 且整体状态为 failure 时判定为失败。"""
    return fail_on_issue and outcome.status is VerificationStatus.FAILURE


class VerificationPipeline:
    """串联各阶段的编排器；外部协作者（git / AST / ESBMC）全部通过构造参数注入。"""

    def __init__(
        self,
        config: VerifyConfig,
        *,
        source: RevisionSource,
        ast_provider: AstArtifactProvider,
        checker: ModelChecker,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.source = source
        self.ast_provider = ast_provider
        self.checker = checker
        self.logger = logger or logging.getLogger(__name__)

    def collect_files(self) -> List[str]:
        cfg = self.config
        modified = self.source.list_modified_files(cfg.base_ref, cfg.head_ref, cfg.scan.contracts_dir)
        files = filter_excluded(modified, cfg.scan.excluded_contracts)
        self.logger.info(f"发现 {len(files)} 个变更的 Clarity 文件（排除前 {len(modified)} 个）")
        return files

    def run(self, files: Optional[Sequence[str]] = None) -> PipelineOutcome:
        """
        执行完整流水线。

        Args:
            files: 指定要分析的文件；None 时从 git 差异中收集
        """
        cfg = self.config
        self.logger.info(f"开始 Clarity 合约验证: {cfg.base_ref} -> {cfg.head_ref}")

        targets = list(files) if files is not None else self.collect_files()
        changed = detect_changed_functions(
            self.source,
            cfg.base_ref,
            cfg.head_ref,
            targets,
            comment_aware=cfg.scan.comment_aware_parens,
            logger=self.logger,
        )
        if not changed:
            self.logger.info("未检测到变更的 Clarity 函数")
            return PipelineOutcome(status=VerificationStatus.NO_CHANGES)

        jobs = plan_jobs(
            changed,
            self.ast_provider,
            baseline_flags=cfg.checker.baseline_flags,
            flag_overrides=cfg.checker.flags,
            logger=self.logger,
        )

        results: List[VerificationResult] = run_jobs(jobs, self.checker, logger=self.logger)
        findings = build_findings(results)
        has_failures = any(not r.verified for r in results)
        status = VerificationStatus.FAILURE if has_failures else VerificationStatus.SUCCESS
        self.logger.info(f"验证完成: {len(results)} 个函数，状态 {status.value}，{len(findings)} 条发现")

        return PipelineOutcome(
            status=status,
            changed_functions=changed,
            jobs=jobs,
            results=results,
            findings=findings,
            summary=generate_summary(results),
        )
