"""
变更集比较：按函数名对齐 base / head 两个版本的函数定义。

相等判定为原始文本完全一致，仅空白或注释变化同样视为 modified。
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .function_parser import parse_functions
from .models import ChangedFunction, ChangeType, FunctionDefinition


def _index_by_name(functions: Sequence[FunctionDefinition]) -> Dict[str, FunctionDefinition]:
    # 同名函数不做区分：按名查找时第一个定义生效
    index: Dict[str, FunctionDefinition] = {}
    for func in functions:
        index.setdefault(func.name, func)
    return index


def compare_functions(
    base_functions: Sequence[FunctionDefinition],
    head_functions: Sequence[FunctionDefinition],
) -> List[ChangedFunction]:
    """
    比较两个版本的函数定义，识别新增 / 修改 / 删除。

    - base 有、head 无 -> deleted（保留 base 区间）
    - 两边都有且文本不同 -> modified（保留 head 区间）
    - 两边文本相同 -> 不输出
    - head 有、base 无 -> added
    """
    head_by_name = _index_by_name(head_functions)
    base_by_name = _index_by_name(base_functions)
    changed: List[ChangedFunction] = []

    for base_func in base_functions:
        head_func = head_by_name.get(base_func.name)
        if head_func is None:
            changed.append(ChangedFunction.from_definition(base_func, ChangeType.DELETED))
        elif base_func.content != head_func.content:
            changed.append(ChangedFunction.from_definition(head_func, ChangeType.MODIFIED))

    for head_func in head_functions:
        if head_func.name not in base_by_name:
            changed.append(ChangedFunction.from_definition(head_func, ChangeType.ADDED))

    return changed


def compare_revisions(
    base_content: Optional[str],
    head_content: Optional[str],
    file_path: str,
    *,
    comment_aware: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[ChangedFunction]:
    """
    比较同一文件的两个版本全文。

    任一侧内容缺失（None 或空串）时按“零个函数”处理：
    base 缺失 -> 全部 added；head 缺失 -> 全部 deleted。
    """
    base_functions = (
        parse_functions(base_content, file_path, comment_aware=comment_aware, logger=logger)
        if base_content
        else []
    )
    head_functions = (
        parse_functions(head_content, file_path, comment_aware=comment_aware, logger=logger)
        if head_content
        else []
    )
    return compare_functions(base_functions, head_functions)
