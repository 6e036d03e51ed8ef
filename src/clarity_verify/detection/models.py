"""变更检测数据模型：函数定义与变更函数记录。"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FunctionKind(str, Enum):
    """Clarity 函数定义类型（对应 define-public / define-private / define-read-only）。"""

    PUBLIC = "public"
    PRIVATE = "private"
    READ_ONLY = "read-only"


class ChangeType(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


class FunctionDefinition(BaseModel):
    """单个顶层函数定义（行号从 1 开始，闭区间）。"""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FunctionKind
    file: str
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)
    content: str = Field(..., description="函数原始文本（按行以 \\n 连接）")


class ChangedFunction(FunctionDefinition):
    """
    变更函数记录。

    deleted 记录携带 base 版本的区间；added / modified 携带 head 版本的区间。
    """

    change_type: ChangeType

    @classmethod
    def from_definition(cls, definition: FunctionDefinition, change_type: ChangeType) -> "ChangedFunction":
        return cls(**definition.model_dump(), change_type=change_type)
