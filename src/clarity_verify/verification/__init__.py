"""
验证层：任务规划、AST 产物、ESBMC 调用与输出解析。
"""

from .artifacts import ContainerAstProvider
from .container import ContainerOutput, ContainerRunner
from .models import FailureRecord, VerificationJob, VerificationResult
from .output_parser import (
    CounterexampleParser,
    LineCursor,
    ParserState,
    parse_checker_output,
    parse_counterexamples,
)
from .planner import AstArtifactProvider, contract_name, group_by_file, plan_jobs, resolve_flags
from .runner import EsbmcContainerChecker, ModelChecker, run_job, run_jobs

__all__ = [
    "AstArtifactProvider",
    "ContainerAstProvider",
    "ContainerOutput",
    "ContainerRunner",
    "CounterexampleParser",
    "EsbmcContainerChecker",
    "FailureRecord",
    "LineCursor",
    "ModelChecker",
    "ParserState",
    "VerificationJob",
    "VerificationResult",
    "contract_name",
    "group_by_file",
    "parse_checker_output",
    "parse_counterexamples",
    "plan_jobs",
    "resolve_flags",
    "run_job",
    "run_jobs",
]
