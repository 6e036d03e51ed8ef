"""
括号分词与深度计数。

函数边界只由圆括号深度决定：`(` 深度 +1，`)` 深度 -1。

默认按原始字符计数：注释 `;;` 与字符串字面量里的括号同样参与计数，
因此注释里的不配对括号会干扰边界判定（已知的脆弱点，保持原样）。
开启 comment_aware 后，SourceMasker 会把注释与字符串内容替换为空格再计数。
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

COMMENT_MARKER = ";;"


class TokenKind(str, Enum):
    OPEN = "open"
    CLOSE = "close"


@dataclass(frozen=True)
class ParenToken:
    kind: TokenKind
    column: int  # 0-based


def iter_paren_tokens(line: str, start: int = 0) -> Iterator[ParenToken]:
    """按字符流产出一行中（从 start 起）的括号 token。"""
    for column in range(start, len(line)):
        ch = line[column]
        if ch == "(":
            yield ParenToken(TokenKind.OPEN, column)
        elif ch == ")":
            yield ParenToken(TokenKind.CLOSE, column)


class SourceMasker:
    """
    把注释与字符串内容替换为空格（保持列号不变）。

    字符串可以跨行，因此 masker 在行与行之间保留状态；关闭时原样返回。
    """

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._in_string = False

    def mask(self, line: str) -> str:
        if not self.enabled:
            return line

        out: list[str] = []
        escaped = False
        i = 0
        while i < len(line):
            ch = line[i]
            if self._in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    self._in_string = False
                    out.append(ch)
                    i += 1
                    continue
                out.append(" ")
            elif ch == '"':
                self._in_string = True
                out.append(ch)
            elif line.startswith(COMMENT_MARKER, i):
                out.append(" " * (len(line) - i))
                break
            else:
                out.append(ch)
            i += 1
        return "".join(out)


class ParenDepthCounter:
    """括号深度计数器；depth 回到 0 表示当前形式闭合。"""

    def __init__(self, initial: int = 0) -> None:
        self.depth = initial

    def feed(self, line: str, start: int = 0) -> int:
        for token in iter_paren_tokens(line, start):
            self.depth += 1 if token.kind is TokenKind.OPEN else -1
        return self.depth

    @property
    def closed(self) -> bool:
        return self.depth == 0
