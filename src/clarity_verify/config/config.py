from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.markup import escape

_logger = logging.getLogger(__name__)

# ESBMC 针对 Clarity 的固定基线开关；用户 flags 追加在其后，可按文本覆盖
DEFAULT_BASELINE_FLAGS = (
    "--force-malloc-success --k-induction --max-k-step 6 --unwind 200 "
    "--no-bounds-check --array-flattener --no-unlimited-scanf-check "
    "--no-unwinding-assertions --multi-property"
)


def parse_list_input(value: str | None) -> List[str]:
    """
    解析逗号或换行分隔的字符串为列表（去空白、去空项）。

    例：
        parse_list_input("contracts, lib\\nextra") -> ["contracts", "lib", "extra"]
    """
    if not value:
        return []
    items = value.replace("\n", ",").split(",")
    return [s.strip() for s in items if s.strip()]


class LoggingConfig(BaseModel):
    """日志系统配置。"""
    log_to_console: bool = Field(default=True, description="是否将日志输出到控制台。")
    level: str = Field(default="INFO", description="日志级别：DEBUG, INFO, WARNING, ERROR, CRITICAL。")
    file_path: str = Field(default=".clarity-verify/logs/app.log", description="日志文件存储路径（相对工作区）。")
    max_bytes: int = Field(default=10_485_760, ge=1024, description="单个日志文件的最大字节数，超过后自动滚动。")
    backup_count: int = Field(default=5, ge=0, description="保留的历史日志文件数量。")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="日志消息格式。",
    )
    date_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="日志时间格式。")


class ScanConfig(BaseModel):
    """变更检测范围配置。"""
    contracts_dir: List[str] = Field(
        default_factory=lambda: ["./"],
        description="合约所在目录（只分析这些目录下的 .clar 文件）。",
    )
    excluded_contracts: List[str] = Field(
        default_factory=list,
        description="排除模式（* 匹配任意字符，按子串搜索）。",
    )
    comment_aware_parens: bool = Field(
        default=False,
        description="括号计数是否跳过 ;; 注释与字符串字面量（默认关闭：按原始字符计数）。",
    )

    @field_validator("contracts_dir", "excluded_contracts", mode="before")
    @classmethod
    def _split_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_list_input(v)
        return v


class CheckerConfig(BaseModel):
    """ESBMC / AST 生成器容器配置。"""
    baseline_flags: str = Field(default=DEFAULT_BASELINE_FLAGS, description="ESBMC 基线开关。")
    flags: str = Field(default="--verbose", description="用户追加的 ESBMC 开关（位于基线之后）。")
    container_repo: str = Field(default="ghcr.io/companyx/clarity-esbmc", description="ESBMC 镜像仓库。")
    ast_container_repo: str = Field(
        default="ghcr.io/companyx/clarity-ast-generator",
        description="AST 生成器镜像仓库。",
    )
    container_version: str = Field(default="v1.0.0", description="镜像标签。")
    docker_bin: str = Field(default="docker", description="容器运行时可执行文件。")
    reuse_ast: bool = Field(
        default=False,
        description="是否复用不早于合约源码的已有 .clarast（默认关闭：每次重新生成）。",
    )
    timeout_s: Optional[int] = Field(default=None, ge=1, description="单次容器调用超时（秒），None 表示不限。")


class ReportConfig(BaseModel):
    """报告输出配置。"""
    sarif_path: str = Field(default="results.sarif", description="SARIF 报告输出路径。")
    summary_path: Optional[str] = Field(default=None, description="Markdown 摘要输出路径（None 不写文件）。")
    tool_name: str = Field(default="ESBMC Clarity Formal Verification")
    tool_version: str = Field(default="1.0.0")


class VerifyConfig(BaseSettings):
    """
    Config priority (high -> low):
    - init arguments
    - environment variables (prefix CLARITY_VERIFY_, nested delimiter __)
    - dotenv
    - config file (.clarity-verify/config.yaml)
    - defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="CLARITY_VERIFY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(  # type: ignore[override]
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        配置优先级（高 -> 低）：init > env > dotenv > YAML 文件 > secrets > 默认值。
        """

        def yaml_file_settings() -> Dict[str, Any]:
            try:
                return _load_config_from_file()
            except (OSError, yaml.YAMLError) as e:
                _logger.warning(f"读取 YAML 配置失败，将使用默认/环境变量配置: {escape(str(e))}")
                return {}

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_file_settings,
            file_secret_settings,
        )

    workspace_root: str = "."
    base_ref: str = "main"
    head_ref: str = "HEAD"
    fail_on_issue: bool = True
    scan: ScanConfig = ScanConfig()
    checker: CheckerConfig = CheckerConfig()
    report: ReportConfig = ReportConfig()
    logging: LoggingConfig = LoggingConfig()


def _find_config_file() -> Optional[Path]:
    """查找配置文件（按优先级顺序）

    搜索顺序：
    1. ./.clarity-verify/config.yaml
    2. ./.clarity-verify/config.yml
    3. ./clarity-verify.yaml
    """
    search_paths = [
        Path(".clarity-verify/config.yaml"),
        Path(".clarity-verify/config.yml"),
        Path("clarity-verify.yaml"),
    ]
    for path in search_paths:
        if path.exists() and path.is_file():
            return path
    return None


def _load_config_from_file() -> Dict[str, Any]:
    """从 YAML 文件加载配置（不存在时返回空字典）。"""
    config_file = _find_config_file()
    if config_file is None:
        return {}
    with open(config_file, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        _logger.warning(f"配置文件顶层不是映射，已忽略: {config_file}")
        return {}
    return data
