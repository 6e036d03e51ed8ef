"""
统一日志系统模块。

控制台输出走 Rich（支持 markup），文件输出带 `[文件名:行号]` 前缀并自动滚动。

约定：各组件不持有全局 logger，而是通过构造参数 / 关键字参数注入 `logging.Logger`；
CLI 入口负责按配置创建 logger 并逐层传递。
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

# 工作区内默认日志目录
DEFAULT_LOG_DIR = Path(".clarity-verify") / "logs"


def _tag_caller(record: logging.LogRecord) -> None:
    # 文件格式里使用 lineno_caller，缺省时回落到 logging 自身记录的位置
    record.filename = Path(record.pathname).name
    record.lineno_caller = record.lineno


class FileLineRichHandler(RichHandler):
    """
    控制台处理器：只输出消息内容（颜色由 Rich markup 控制）。
    """

    def emit(self, record: logging.LogRecord) -> None:
        _tag_caller(record)
        super().emit(record)


class FileLineFileHandler(RotatingFileHandler):
    """
    文件输出处理器，支持自动滚动。

    格式：级别     [文件名:行号] 级别 - 消息内容
    """

    def __init__(
        self,
        filename: str,
        mode: str = "a",
        encoding: str = "utf-8",
        delay: bool = False,
        maxBytes: int = 10_485_760,  # 10MB
        backupCount: int = 5,
        log_format: Optional[str] = None,
        date_format: Optional[str] = None,
    ):
        super().__init__(filename, mode, maxBytes, backupCount, encoding, delay)
        fmt = log_format or "%(levelname)-8s [%(filename)s:%(lineno_caller)s] %(levelname)s - %(message)s"
        self.setFormatter(logging.Formatter(fmt=fmt, datefmt=date_format or ""))

    def emit(self, record: logging.LogRecord) -> None:
        _tag_caller(record)
        super().emit(record)


def get_logger(
    name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    workspace_root: Optional[str] = None,
    log_to_console: bool = False,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
) -> logging.Logger:
    """
    获取配置好的日志记录器。

    参数:
        name: 日志记录器名称（通常是模块名，如 __name__）
        level: 日志级别（int 如 logging.INFO，或字符串如 'DEBUG'）
        log_file: 可选的文件路径；相对路径按 workspace_root 解析
        workspace_root: 工作区根目录；提供且 log_file 未指定时写入 .clarity-verify/logs/app.log
        log_to_console: 是否输出到控制台
        max_bytes / backup_count: 日志滚动参数
        log_format / date_format: 文件日志格式

    返回:
        配置好的 Logger 实例（重复调用不会重复挂载处理器）
    """
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    has_console_handler = any(isinstance(h, FileLineRichHandler) for h in logger.handlers)
    has_file_handler = any(isinstance(h, FileLineFileHandler) for h in logger.handlers)

    if log_to_console:
        if not has_console_handler:
            console_handler = FileLineRichHandler(
                console=Console(stderr=True),
                show_time=False,
                show_path=False,
                rich_tracebacks=True,
                markup=True,
                show_level=False,
            )
            console_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt=""))
            logger.addHandler(console_handler)
    else:
        # 不输出到控制台时，禁止消息向上传递给带有控制台处理器的父 logger
        logger.propagate = False

    effective_log_file = log_file
    if workspace_root:
        if effective_log_file and not os.path.isabs(effective_log_file):
            effective_log_file = str(Path(workspace_root) / effective_log_file)
        elif not effective_log_file:
            effective_log_file = str(Path(workspace_root) / DEFAULT_LOG_DIR / "app.log")

    if effective_log_file and not has_file_handler:
        try:
            os.makedirs(os.path.dirname(effective_log_file) or ".", exist_ok=True)
        except OSError as e:
            # 目录创建失败不阻塞控制台日志
            logger.warning(f"日志目录创建失败，仅输出到控制台: {e}")
            return logger
        file_handler = FileLineFileHandler(
            effective_log_file,
            encoding="utf-8",
            maxBytes=max_bytes,
            backupCount=backup_count,
            log_format=log_format,
            date_format=date_format,
        )
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def get_logger_from_config(name: str, cfg: Any, *, log_to_file: bool = True) -> logging.Logger:
    """
    按 VerifyConfig 的 logging 段创建 logger。

    Args:
        name: 日志记录器名称
        cfg: VerifyConfig 对象（需要 workspace_root 与 logging 两个字段）
        log_to_file: 是否写入文件（测试或一次性命令可关闭）
    """
    logging_cfg = cfg.logging
    return get_logger(
        name,
        level=logging_cfg.level,
        log_file=logging_cfg.file_path if log_to_file else None,
        workspace_root=cfg.workspace_root if log_to_file else None,
        log_to_console=logging_cfg.log_to_console,
        max_bytes=logging_cfg.max_bytes,
        backup_count=logging_cfg.backup_count,
        log_format=logging_cfg.log_format,
        date_format=logging_cfg.date_format,
    )
