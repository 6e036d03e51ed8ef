"""
ESBMC 验证执行：逐任务调用检查器并解析输出。

任务严格串行执行（检查器的容器环境不支持并发调用）；
单个任务的执行异常降级为 execution-error 结果，批次继续。
"""
from __future__ import annotations

import logging
import shlex
from typing import Iterable, List, Optional, Protocol

from rich.markup import escape

from clarity_verify.errors import CheckerExecutionError

from .container import ContainerRunner
from .models import UNKNOWN_LINE, FailureRecord, VerificationJob, VerificationResult
from .output_parser import FAILURE_MARKER, parse_checker_output
from .planner import contract_name

EXECUTION_ERROR_TITLE = "execution-error"

# ESBMC 发现性质违反时以 1 退出，此时输出仍然有效；
# 因此“非零退出即执行错误”对退出码 1 + VERIFICATION FAILED 不成立，其余非零退出仍按执行错误处理
ESBMC_VIOLATION_EXIT_CODE = 1


class ModelChecker(Protocol):
    """(源文件, AST 产物, 函数名, 开关) -> 原始文本输出（阻塞）。"""

    def check(self, source_file: str, artifact: str, function_name: str, flags: str) -> str: ...


class EsbmcContainerChecker:
    """在 ESBMC 镜像中验证单个 Clarity 函数。"""

    def __init__(
        self,
        runner: ContainerRunner,
        *,
        image: str,
        tag: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runner = runner
        self.image = image
        self.tag = tag
        self.logger = logger or logging.getLogger(__name__)

    def build_args(self, source_file: str, artifact: str, function_name: str, flags: str) -> List[str]:
        return [
            "--clar", source_file, artifact,
            "--clar_contract", contract_name(source_file),
            *shlex.split(flags),
            "--function", function_name,
        ]

    def check(self, source_file: str, artifact: str, function_name: str, flags: str) -> str:
        output = self.runner.run(self.image, self.tag, self.build_args(source_file, artifact, function_name, flags))
        if output.returncode == 0:
            return output.stdout
        if output.returncode == ESBMC_VIOLATION_EXIT_CODE and FAILURE_MARKER in output.stdout:
            return output.stdout
        raise CheckerExecutionError(
            f"ESBMC exited with code {output.returncode}: {output.stderr.strip() or output.stdout.strip()}",
            returncode=output.returncode,
            output=output.stdout,
        )


def execution_error_result(job: VerificationJob, error: BaseException) -> VerificationResult:
    return VerificationResult(
        verified=False,
        failures=[
            FailureRecord(
                function_name=job.function_name,
                line_number=UNKNOWN_LINE,
                title=EXECUTION_ERROR_TITLE,
                failing_code=f"ESBMC execution failed: {error}",
            )
        ],
        raw_output=f"Error: {error}",
        file=job.file,
        function_name=job.function_name,
    )


def run_job(
    job: VerificationJob,
    checker: ModelChecker,
    *,
    logger: Optional[logging.Logger] = None,
) -> VerificationResult:
    """执行单个验证任务；检查器抛出的任何异常都转换为 execution-error 结果。"""
    log = logger or logging.getLogger(__name__)
    log.info(f"运行 ESBMC: 函数 {job.function_name} @ {job.file}")
    try:
        raw = checker.check(job.file, job.artifact, job.function_name, job.flags)
    except Exception as e:  # 外部检查器的任何故障都只影响当前任务
        log.error(f"ESBMC 执行失败 ({job.function_name}): {escape(str(e))}")
        return execution_error_result(job, e)

    result = parse_checker_output(raw, job.file, job.function_name)
    status = "通过" if result.verified else f"失败（{len(result.failures)} 条记录）"
    log.info(f"验证{status}: {job.function_name}")
    return result


def run_jobs(
    jobs: Iterable[VerificationJob],
    checker: ModelChecker,
    *,
    logger: Optional[logging.Logger] = None,
) -> List[VerificationResult]:
    """按顺序逐个执行任务并累积结果。"""
    return [run_job(job, checker, logger=logger) for job in jobs]
