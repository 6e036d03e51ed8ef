"""
统一异常定义。

说明：
- 任务粒度的失败（内容获取失败、AST 缺失、检查器异常、无法识别的输出）一律降级为结果记录，不抛出；
- 只有不可恢复的调用错误（例如报告无法写入）才以异常形式向上传递，由 CLI 统一处理。
"""
from __future__ import annotations


class ClarityVerifyError(RuntimeError):
    """clarity-verify 通用异常基类。"""


class CheckerExecutionError(ClarityVerifyError):
    """外部命令（容器内 ESBMC / AST 生成器）执行失败。"""

    def __init__(self, message: str, *, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class ReportWriteError(ClarityVerifyError):
    """SARIF 报告或摘要文件写入失败。"""
