"""
Clarity 函数边界解析器。

只识别顶层定义：命中定义头后开始计数，深度回到 0 的那一行即为函数结束行；
函数内部再次出现的 define-* 只当作普通字符计数，不做嵌套识别。
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .models import FunctionDefinition, FunctionKind
from .tokenizer import ParenDepthCounter, SourceMasker

# 定义头：三种定义关键字 + 紧随的参数形式 `(name ...`
FUNCTION_HEADER_RE = re.compile(r"\(define-(public|private|read-only)\s+\(([^)]+)")


@dataclass
class _OpenFunction:
    name: str
    kind: FunctionKind
    start_line: int
    counter: ParenDepthCounter
    lines: List[str] = field(default_factory=list)

    def close(self, file_path: str, end_line: int) -> FunctionDefinition:
        return FunctionDefinition(
            name=self.name,
            kind=self.kind,
            file=file_path,
            start_line=self.start_line,
            end_line=end_line,
            content="\n".join(self.lines),
        )


def parse_functions(
    content: str,
    file_path: str,
    *,
    comment_aware: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[FunctionDefinition]:
    """
    解析一个文件中的顶层函数定义（保持源码顺序）。

    Args:
        content: 文件全文
        file_path: 文件路径（写入每条 FunctionDefinition）
        comment_aware: 是否跳过注释 / 字符串中的括号
        logger: 注入的日志记录器

    Returns:
        FunctionDefinition 列表；括号不配平时，最后一个函数吞掉文件剩余部分
    """
    log = logger or logging.getLogger(__name__)
    masker = SourceMasker(enabled=comment_aware)
    lines = content.split("\n")

    functions: List[FunctionDefinition] = []
    current: Optional[_OpenFunction] = None

    for index, raw_line in enumerate(lines):
        line_no = index + 1
        scan_line = masker.mask(raw_line)

        if current is None:
            match = FUNCTION_HEADER_RE.search(scan_line)
            if not match:
                continue
            name_tokens = match.group(2).split()
            counter = ParenDepthCounter(initial=1)  # 定义头的左括号已计入
            counter.feed(scan_line, start=match.start() + 1)
            current = _OpenFunction(
                name=name_tokens[0] if name_tokens else "",
                kind=FunctionKind(match.group(1)),
                start_line=line_no,
                counter=counter,
                lines=[raw_line],
            )
        else:
            current.lines.append(raw_line)
            current.counter.feed(scan_line)

        if current.counter.closed:
            functions.append(current.close(file_path, line_no))
            current = None

    if current is not None:
        log.warning(
            f"{file_path}: 函数 {current.name} 自第 {current.start_line} 行起括号未配平"
            f"（深度 {current.counter.depth}），剩余内容全部归入该函数"
        )
        functions.append(current.close(file_path, len(lines)))

    log.debug(f"{file_path}: 解析到 {len(functions)} 个函数定义")
    return functions
