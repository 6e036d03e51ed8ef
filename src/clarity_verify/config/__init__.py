"""
配置模块统一管理

统一导入接口：
    from clarity_verify.config import VerifyConfig, parse_list_input
"""

from .config import (
    DEFAULT_BASELINE_FLAGS,
    CheckerConfig,
    LoggingConfig,
    ReportConfig,
    ScanConfig,
    VerifyConfig,
    parse_list_input,
)

__all__ = [
    "DEFAULT_BASELINE_FLAGS",
    "CheckerConfig",
    "LoggingConfig",
    "ReportConfig",
    "ScanConfig",
    "VerifyConfig",
    "parse_list_input",
]
