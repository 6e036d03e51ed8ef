"""
容器命令执行（docker run --rm，挂载当前工作目录）。

AST 生成与 ESBMC 验证共用；调用按顺序阻塞执行，不做并发。
"""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich.markup import escape

from clarity_verify.errors import CheckerExecutionError


@dataclass(frozen=True)
class ContainerOutput:
    returncode: int
    stdout: str
    stderr: str


class ContainerRunner:
    """在指定镜像中执行命令并收集输出。"""

    def __init__(
        self,
        *,
        docker_bin: str = "docker",
        workdir: Optional[str] = None,
        timeout_s: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.docker_bin = docker_bin
        self.workdir = workdir or os.getcwd()
        self.timeout_s = timeout_s
        self.logger = logger or logging.getLogger(__name__)

    def build_command(self, image: str, tag: str, args: Sequence[str]) -> List[str]:
        return [
            self.docker_bin, "run", "--rm",
            "-v", f"{self.workdir}:{self.workdir}",
            "-w", self.workdir,
            f"{image}:{tag}",
            *args,
        ]

    def run(self, image: str, tag: str, args: Sequence[str]) -> ContainerOutput:
        """
        执行容器命令。

        非零退出码不在这里判定成败（交给调用方按工具语义处理）；
        只有进程无法启动或超时才抛出 CheckerExecutionError。
        """
        cmd = self.build_command(image, tag, args)
        self.logger.debug(f"容器执行: {escape(' '.join(cmd))}")
        try:
            p = subprocess.run(
                cmd,
                cwd=self.workdir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_s,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CheckerExecutionError(f"容器执行超时 ({self.timeout_s}s): {image}:{tag}") from e
        except OSError as e:
            raise CheckerExecutionError(f"无法启动容器运行时 {self.docker_bin}: {e}") from e

        return ContainerOutput(p.returncode, p.stdout or "", p.stderr or "")
