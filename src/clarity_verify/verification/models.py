from typing import List
from pydantic import BaseModel, ConfigDict, Field

# 行号未知时的占位值
UNKNOWN_LINE = -1


class FailureRecord(BaseModel):
    """单条验证失败信息（来自一个反例块或执行错误）。"""
    function_name: str
    line_number: int = UNKNOWN_LINE
    title: str = Field(..., description="性质类别，如 assertion / arithmetic overflow")
    failing_code: str


class VerificationJob(BaseModel):
    """一次 ESBMC 调用（一个文件中的一个变更函数）。"""
    model_config = ConfigDict(frozen=True)

    file: str
    function_name: str
    contract_name: str
    artifact: str = Field(..., description="AST 产物路径")
    flags: str = Field(default="", description="基线开关 + 用户开关（基线在前）")


class VerificationResult(BaseModel):
    """单个函数的验证结果。"""
    verified: bool
    failures: List[FailureRecord] = Field(default_factory=list)
    raw_output: str = ""
    file: str
    function_name: str
