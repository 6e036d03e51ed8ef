"""
ESBMC 输出解析回归用例

验证场景：
1. 典型反例块 -> (deposit, 17, assertion, try! ...) 一条记录
2. 整体判定优先级：SUCCESSFUL > FAILED > unknown-result
3. 反例块外的 Violated property 不产生记录
4. 多个反例块、状态行覆盖、标题 / 代码缺失时的占位值
"""

from conftest import FAILED_OUTPUT, SUCCESS_OUTPUT

from clarity_verify.verification.models import UNKNOWN_LINE
from clarity_verify.verification.output_parser import (
    UNKNOWN_FAILING_CODE,
    UNKNOWN_FUNCTION,
    UNKNOWN_PROPERTY,
    UNKNOWN_RESULT_MESSAGE,
    UNKNOWN_RESULT_TITLE,
    CounterexampleParser,
    LineCursor,
    ParserState,
    parse_checker_output,
    parse_counterexamples,
)


def _block(state_lines, title="assertion", code="(asserts! false (err u1))"):
    lines = ["[Counterexample]", ""]
    lines.extend(state_lines)
    lines.extend(["Violated property:", "", f"  {title}", "", f"  {code}", ""])
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# 行游标
# ---------------------------------------------------------------------------
class TestLineCursor:
    def test_next_content_line_skips_filler(self):
        cursor = LineCursor(["", "   ", "  title  ", "", "code"])
        assert cursor.next_content_line() == "title"
        assert cursor.next_content_line() == "code"
        assert cursor.next_content_line() is None
        assert cursor.at_end()

    def test_next_line_strips_and_ends_with_none(self):
        cursor = LineCursor(["  x\r"])
        assert cursor.next_line() == "x"
        assert cursor.next_line() is None


# ---------------------------------------------------------------------------
# 反例状态机
# ---------------------------------------------------------------------------
class TestCounterexampleParser:
    def test_typical_block(self):
        records = parse_counterexamples(FAILED_OUTPUT)

        assert len(records) == 1
        record = records[0]
        assert record.function_name == "deposit"
        assert record.line_number == 17
        assert record.title == "assertion"
        assert record.failing_code == "try! (stx-transfer? amount tx-sender (as-contract tx-sender))"

    def test_state_returns_to_scanning_after_record(self):
        parser = CounterexampleParser()
        parser.parse(FAILED_OUTPUT)
        assert parser.state is ParserState.SCANNING

    def test_violated_property_outside_block_is_ignored(self):
        text = "Violated property:\n  assertion\n  (ok u1)\nVERIFICATION FAILED\n"
        assert parse_counterexamples(text) == []

    def test_multiple_blocks(self):
        text = "\n".join(
            [
                _block(["State 1 file a.clar line 4 function withdraw thread 0"], title="arithmetic underflow"),
                _block(["State 2 file a.clar line 9 function transfer thread 0"], title="division by zero"),
                "VERIFICATION FAILED",
            ]
        )
        records = parse_counterexamples(text)
        assert [(r.function_name, r.line_number, r.title) for r in records] == [
            ("withdraw", 4, "arithmetic underflow"),
            ("transfer", 9, "division by zero"),
        ]

    def test_later_state_line_wins(self):
        text = _block(
            [
                "State 1 file a.clar line 3 function helper thread 0",
                "State 7 file a.clar line 21 function deposit thread 0",
            ]
        )
        record = parse_counterexamples(text)[0]
        assert (record.function_name, record.line_number) == ("deposit", 21)

    def test_block_without_state_line_uses_placeholders(self):
        record = parse_counterexamples(_block([]))[0]
        assert record.function_name == UNKNOWN_FUNCTION
        assert record.line_number == UNKNOWN_LINE

    def test_state_carries_over_between_blocks(self):
        text = _block(["State 1 file a.clar line 5 function mint thread 0"]) + "\n" + _block([])
        records = parse_counterexamples(text)
        assert [(r.function_name, r.line_number) for r in records] == [("mint", 5), ("mint", 5)]

    def test_truncated_block_defaults(self):
        text = "[Counterexample]\nState 1 file a.clar line 2 function f thread 0\nViolated property:\n\n"
        record = parse_counterexamples(text)[0]
        assert record.title == UNKNOWN_PROPERTY
        assert record.failing_code == UNKNOWN_FAILING_CODE

    def test_missing_failing_code_only(self):
        text = "[Counterexample]\nViolated property:\n  arithmetic overflow\n"
        record = parse_counterexamples(text)[0]
        assert record.title == "arithmetic overflow"
        assert record.failing_code == UNKNOWN_FAILING_CODE

    def test_crlf_output(self):
        records = parse_counterexamples(FAILED_OUTPUT.replace("\n", "\r\n"))
        assert [(r.function_name, r.line_number, r.title) for r in records] == [("deposit", 17, "assertion")]


# ---------------------------------------------------------------------------
# 整体判定
# ---------------------------------------------------------------------------
class TestParseCheckerOutput:
    def test_success(self):
        result = parse_checker_output(SUCCESS_OUTPUT, "sample.clar", "deposit")
        assert result.verified
        assert result.failures == []
        assert result.raw_output == SUCCESS_OUTPUT

    def test_success_marker_takes_priority(self):
        result = parse_checker_output(FAILED_OUTPUT + "\nVERIFICATION SUCCESSFUL\n", "sample.clar", "deposit")
        assert result.verified
        assert result.failures == []

    def test_failure_with_counterexample(self):
        result = parse_checker_output(FAILED_OUTPUT, "sample.clar", "deposit")
        assert not result.verified
        assert result.file == "sample.clar"
        assert result.function_name == "deposit"
        assert len(result.failures) == 1

    def test_failure_without_counterexample_has_no_records(self):
        result = parse_checker_output("Parsing\nVERIFICATION FAILED\n", "sample.clar", "deposit")
        assert not result.verified
        assert result.failures == []

    def test_unrecognised_output(self):
        result = parse_checker_output("Segmentation fault\n", "sample.clar", "deposit")
        assert not result.verified
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.function_name == "deposit"
        assert failure.line_number == UNKNOWN_LINE
        assert failure.title == UNKNOWN_RESULT_TITLE
        assert failure.failing_code == UNKNOWN_RESULT_MESSAGE
