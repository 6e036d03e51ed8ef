"""
变更函数检测：函数边界解析 + 按名比较两个版本。
"""

from .comparator import compare_functions, compare_revisions
from .function_parser import parse_functions
from .git_source import (
    GitRevisionFetcher,
    RevisionContentFetcher,
    RevisionSource,
    detect_changed_functions,
    filter_excluded,
)
from .models import ChangedFunction, ChangeType, FunctionDefinition, FunctionKind

__all__ = [
    "ChangeType",
    "ChangedFunction",
    "FunctionDefinition",
    "FunctionKind",
    "GitRevisionFetcher",
    "RevisionContentFetcher",
    "RevisionSource",
    "compare_functions",
    "compare_revisions",
    "detect_changed_functions",
    "filter_excluded",
    "parse_functions",
]
