"""测试共享夹具：示例合约、ESBMC 输出样本与外部协作者的内存替身。"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest


BASE_CONTRACT = """;; sample deposit contract
(define-map deposits { owner: principal } { amount: uint })
(define-data-var total-deposits uint u0)

(define-read-only (get-balance (owner principal))
  (default-to u0 (get amount (map-get? deposits { owner: owner }))))

(define-public (deposit (amount uint))
  (begin
    (try! (stx-transfer? amount tx-sender (as-contract tx-sender)))
    (map-set deposits { owner: tx-sender } { amount: (+ (get-balance tx-sender) amount) })
    (var-set total-deposits (+ (var-get total-deposits) amount))
    (ok true)))
"""

# 只改动 deposit 中的 try! 一行
HEAD_CONTRACT = BASE_CONTRACT.replace(
    "(try! (stx-transfer? amount tx-sender (as-contract tx-sender)))",
    "(try! (stx-transfer? (+ amount u0) tx-sender (as-contract tx-sender)))",
)

FAILED_OUTPUT = """ESBMC version 7.6.1 64-bit x86_64 linux
Parsing sample.clar
Converting
Starting Bounded Model Checking

[Counterexample]


State 1 file sample.clar line 9 function deposit thread 0
----------------------------------------------------
  amount = 100 (00000000 01100100)

State 3 file sample.clar line 17 function deposit thread 0
----------------------------------------------------
Violated property:

  assertion

  try! (stx-transfer? amount tx-sender (as-contract tx-sender))


VERIFICATION FAILED
"""

SUCCESS_OUTPUT = """ESBMC version 7.6.1 64-bit x86_64 linux
Parsing sample.clar
Solving with solver Z3 v4.12.2
VERIFICATION SUCCESSFUL
"""


class FakeRevisionSource:
    """内存版 git：{(revision, path): content}；缺失的键返回 None。"""

    def __init__(self, contents: Dict[Tuple[str, str], str], modified: Sequence[str] = ()) -> None:
        self.contents = contents
        self.modified = list(modified)
        self.content_requests: List[Tuple[str, str]] = []

    def get_file_content(self, revision: str, path: str) -> Optional[str]:
        self.content_requests.append((revision, path))
        return self.contents.get((revision, path))

    def list_modified_files(self, base_ref: str, head_ref: str, contract_dirs: Sequence[str]) -> List[str]:
        return list(self.modified)


class DictAstProvider:
    def __init__(self, artifacts: Dict[str, str]) -> None:
        self.artifacts = artifacts
        self.requests: List[str] = []

    def get_artifact(self, file: str) -> Optional[str]:
        self.requests.append(file)
        return self.artifacts.get(file)


class ScriptedChecker:
    """按函数名返回预置输出；值为异常实例时抛出。"""

    def __init__(self, outputs: Dict[str, object], default: str = SUCCESS_OUTPUT) -> None:
        self.outputs = outputs
        self.default = default
        self.calls: List[Tuple[str, str, str, str]] = []

    def check(self, source_file: str, artifact: str, function_name: str, flags: str) -> str:
        self.calls.append((source_file, artifact, function_name, flags))
        out = self.outputs.get(function_name, self.default)
        if isinstance(out, BaseException):
            raise out
        return str(out)


@pytest.fixture
def base_contract() -> str:
    return BASE_CONTRACT


@pytest.fixture
def head_contract() -> str:
    return HEAD_CONTRACT


@pytest.fixture
def failed_output() -> str:
    return FAILED_OUTPUT


@pytest.fixture
def success_output() -> str:
    return SUCCESS_OUTPUT
