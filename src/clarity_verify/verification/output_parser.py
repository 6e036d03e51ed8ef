"""
ESBMC 输出解析器。

整体判定（针对全文，不按块）：
1. 含 `VERIFICATION SUCCESSFUL` -> 验证通过，无失败记录（优先级最高）
2. 含 `VERIFICATION FAILED` -> 验证失败，失败记录来自反例状态机（可能为空）
3. 两者都没有 -> 验证失败，附一条 unknown-result 记录

反例状态机：
    SCANNING --[Counterexample]--> IN_COUNTEREXAMPLE
    IN_COUNTEREXAMPLE: `State ... line L function G ...` 更新当前行号/函数（后者覆盖前者）
    IN_COUNTEREXAMPLE --Violated property:--> 读取标题与失败代码，产出一条记录 -> SCANNING
"""
from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Sequence

from .models import UNKNOWN_LINE, FailureRecord, VerificationResult

COUNTEREXAMPLE_MARKER = "[Counterexample]"
VIOLATED_PROPERTY_PREFIX = "Violated property:"
SUCCESS_MARKER = "VERIFICATION SUCCESSFUL"
FAILURE_MARKER = "VERIFICATION FAILED"

UNKNOWN_FUNCTION = "unknown_function"
UNKNOWN_PROPERTY = "unknown-property"
UNKNOWN_FAILING_CODE = "unknown-failing-code"
UNKNOWN_RESULT_TITLE = "unknown-result"
UNKNOWN_RESULT_MESSAGE = "ESBMC did not produce a clear verification result"

STATE_LINE_RE = re.compile(
    r"State\s+\d+\s+file\s+.+?\s+line\s+(\d+)\s+function\s+(\S+)\s+thread\s+\d+"
)


class ParserState(str, Enum):
    SCANNING = "SCANNING"
    IN_COUNTEREXAMPLE = "IN_COUNTEREXAMPLE"


def is_filler_line(line: str) -> bool:
    """空行或只含空白的行。"""
    return line.strip() == ""


class LineCursor:
    """按行游标；返回的行均已去除首尾空白。"""

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = lines
        self.position = 0

    def at_end(self) -> bool:
        return self.position >= len(self._lines)

    def next_line(self) -> Optional[str]:
        if self.at_end():
            return None
        line = self._lines[self.position].strip()
        self.position += 1
        return line

    def next_content_line(self) -> Optional[str]:
        """跳过填充行，返回下一条有内容的行；到达末尾返回 None。"""
        while not self.at_end():
            line = self.next_line()
            if line is not None and not is_filler_line(line):
                return line
        return None


class CounterexampleParser:
    """从 ESBMC 原始输出中提取反例失败记录的有限状态机。"""

    def __init__(self) -> None:
        self.state = ParserState.SCANNING
        self.current_line: Optional[int] = None
        self.current_function: Optional[str] = None
        self.records: List[FailureRecord] = []

    def parse(self, text: str) -> List[FailureRecord]:
        cursor = LineCursor(text.split("\n"))
        while not cursor.at_end():
            line = cursor.next_line()
            if line is not None:
                self._step(line, cursor)
        return self.records

    def _step(self, line: str, cursor: LineCursor) -> None:
        if line == COUNTEREXAMPLE_MARKER:
            self.state = ParserState.IN_COUNTEREXAMPLE
            return

        if self.state is not ParserState.IN_COUNTEREXAMPLE:
            return

        match = STATE_LINE_RE.search(line)
        if match:
            self.current_line = int(match.group(1))
            self.current_function = match.group(2)
            return

        if line.startswith(VIOLATED_PROPERTY_PREFIX):
            title = cursor.next_content_line() or UNKNOWN_PROPERTY
            failing_code = cursor.next_content_line() or UNKNOWN_FAILING_CODE
            self.records.append(
                FailureRecord(
                    function_name=self.current_function or UNKNOWN_FUNCTION,
                    line_number=self.current_line if self.current_line is not None else UNKNOWN_LINE,
                    title=title,
                    failing_code=failing_code,
                )
            )
            # 一条记录关闭当前反例块，需要新的 [Counterexample] 才会继续
            self.state = ParserState.SCANNING


def parse_counterexamples(text: str) -> List[FailureRecord]:
    return CounterexampleParser().parse(text)


def parse_checker_output(text: str, file: str, function_name: str) -> VerificationResult:
    """把一次 ESBMC 调用的原始输出归类为 VerificationResult。"""
    if SUCCESS_MARKER in text:
        return VerificationResult(
            verified=True,
            failures=[],
            raw_output=text,
            file=file,
            function_name=function_name,
        )

    if FAILURE_MARKER in text:
        return VerificationResult(
            verified=False,
            failures=parse_counterexamples(text),
            raw_output=text,
            file=file,
            function_name=function_name,
        )

    return VerificationResult(
        verified=False,
        failures=[
            FailureRecord(
                function_name=function_name,
                line_number=UNKNOWN_LINE,
                title=UNKNOWN_RESULT_TITLE,
                failing_code=UNKNOWN_RESULT_MESSAGE,
            )
        ],
        raw_output=text,
        file=file,
        function_name=function_name,
    )
