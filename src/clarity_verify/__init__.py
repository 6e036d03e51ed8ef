"""
clarity-verify：针对 Clarity 合约变更函数的增量形式化验证流水线。

流程：变更函数检测 -> 验证任务规划 -> ESBMC 逐函数验证 -> 输出解析 -> 报告（SARIF / 摘要）。
"""

__version__ = "0.1.0"
