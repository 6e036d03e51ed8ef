"""
基于 git 的版本内容获取与变更函数检测。

内容获取失败一律降级为“内容缺失”（返回 None 并记录告警），不中断流程。
"""
from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from rich.markup import escape

from .comparator import compare_revisions
from .models import ChangedFunction

CLARITY_SUFFIX = ".clar"


class RevisionContentFetcher(Protocol):
    """(revision, path) -> 文件全文；不存在或获取失败时返回 None。"""

    def get_file_content(self, revision: str, path: str) -> Optional[str]: ...


class RevisionSource(RevisionContentFetcher, Protocol):
    """在内容获取之外，还能列出两个版本间变更的合约文件。"""

    def list_modified_files(self, base_ref: str, head_ref: str, contract_dirs: Sequence[str]) -> List[str]: ...


class GitRevisionFetcher:
    """通过 git 命令行读取指定版本的文件内容与差异文件列表。"""

    def __init__(
        self,
        repo_root: str | Path = ".",
        *,
        git_bin: str = "git",
        timeout_s: int = 60,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.git_bin = git_bin
        self.timeout_s = timeout_s
        self.logger = logger or logging.getLogger(__name__)

    def _run_git(self, args: List[str]) -> tuple[int, str, str]:
        try:
            p = subprocess.run(
                [self.git_bin, *args],
                cwd=str(self.repo_root),
                capture_output=True,
                timeout=self.timeout_s,
                check=False,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
            return int(p.returncode), str(p.stdout or ""), str(p.stderr or "")
        except (OSError, subprocess.SubprocessError) as e:
            return 1, "", f"git_run_failed: {type(e).__name__}: {e}"

    def get_file_content(self, revision: str, path: str) -> Optional[str]:
        code, out, err = self._run_git(["show", f"{revision}:{path}"])
        if code != 0:
            self.logger.warning(f"获取 {path}@{revision} 内容失败: {escape(err.strip())}")
            return None
        return out

    def list_modified_files(self, base_ref: str, head_ref: str, contract_dirs: Sequence[str]) -> List[str]:
        """列出两个版本间变更的 .clar 文件（只保留位于 contract_dirs 之下的）。"""
        code, out, err = self._run_git(["diff", "--name-only", base_ref, head_ref])
        if code != 0:
            self.logger.error(f"获取变更文件列表失败: {escape(err.strip())}")
            return []

        files = [f.strip() for f in out.splitlines()]
        return [
            f for f in files
            if f.endswith(CLARITY_SUFFIX) and any(is_under_dir(f, d) for d in contract_dirs)
        ]


def is_under_dir(file_path: str, directory: str) -> bool:
    """file_path 是否位于 directory 之下（按相对路径判断，不访问文件系统）。"""
    relative = os.path.relpath(file_path, directory)
    return not relative.startswith("..") and not os.path.isabs(relative)


def _pattern_to_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(re.escape(pattern).replace(r"\*", ".*"))


def filter_excluded(files: Iterable[str], patterns: Sequence[str]) -> List[str]:
    """
    过滤排除模式命中的文件。

    `*` 匹配任意字符序列；匹配为子串搜索（不锚定首尾）。
    """
    regexes = [_pattern_to_regex(p) for p in patterns]
    return [f for f in files if not any(r.search(f) for r in regexes)]


def detect_changed_functions(
    fetcher: RevisionContentFetcher,
    base_ref: str,
    head_ref: str,
    files: Sequence[str],
    *,
    comment_aware: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[ChangedFunction]:
    """
    逐文件读取 base / head 内容并比较，返回按文件顺序拼接的变更函数列表。
    """
    log = logger or logging.getLogger(__name__)
    log.info("检测变更的 Clarity 函数...")

    changed: List[ChangedFunction] = []
    for file_path in files:
        log.debug(f"分析文件变更: {file_path}")
        base_content = fetcher.get_file_content(base_ref, file_path)
        head_content = fetcher.get_file_content(head_ref, file_path)
        changed.extend(
            compare_revisions(
                base_content,
                head_content,
                file_path,
                comment_aware=comment_aware,
                logger=log,
            )
        )

    log.info(f"共检测到 {len(changed)} 个变更函数")
    return changed
