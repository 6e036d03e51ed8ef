"""
AST 产物提供者：在容器中为合约生成 .clarast（默认每次运行都重新生成）。

产物路径相对容器工作目录（即工作区根目录）解析，返回值保持与合约路径同样的相对形式，
这样 ESBMC 在同一工作目录下可以直接找到它。
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.markup import escape

from clarity_verify.errors import CheckerExecutionError

from .container import ContainerRunner

AST_SUFFIX = ".clarast"


def artifact_path_for(file: str) -> Path:
    return Path(file).with_suffix(AST_SUFFIX)


class ContainerAstProvider:
    """调用 AST 生成器镜像（stdout 即 AST JSON），产物写到合约同目录。"""

    def __init__(
        self,
        runner: ContainerRunner,
        *,
        image: str,
        tag: str,
        reuse_existing: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runner = runner
        self.image = image
        self.tag = tag
        self.reuse_existing = reuse_existing
        self.logger = logger or logging.getLogger(__name__)

    def _in_workdir(self, path: Path) -> Path:
        return path if path.is_absolute() else Path(self.runner.workdir) / path

    def _is_fresh(self, source: Path, target: Path) -> bool:
        # 只复用不早于合约源码的产物
        if not target.is_file():
            return False
        try:
            return target.stat().st_mtime >= source.stat().st_mtime
        except OSError:
            return False

    def get_artifact(self, file: str) -> Optional[str]:
        artifact = artifact_path_for(file)
        source = self._in_workdir(Path(file))
        target = self._in_workdir(artifact)

        if self.reuse_existing and self._is_fresh(source, target):
            self.logger.debug(f"复用已有 AST 产物: {escape(str(target))}")
            return str(artifact)

        self.logger.info(f"为 {escape(file)} 生成 AST")
        try:
            output = self.runner.run(self.image, self.tag, [file])
        except CheckerExecutionError as e:
            self.logger.warning(f"AST 生成失败，跳过 {escape(file)}: {escape(str(e))}")
            return None

        if output.returncode != 0 or not output.stdout.strip():
            self.logger.warning(
                f"AST 生成器退出码 {output.returncode}，跳过 {escape(file)}: {escape(output.stderr.strip())}"
            )
            return None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(output.stdout, encoding="utf-8")
        except OSError as e:
            self.logger.warning(f"AST 产物写入失败，跳过 {escape(file)}: {escape(str(e))}")
            return None

        self.logger.info(f"AST 已生成: {escape(str(target))}")
        return str(artifact)
