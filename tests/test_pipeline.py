"""
端到端流水线回归用例（git / AST / ESBMC 全部使用内存替身）

验证场景：
1. 无变更函数 -> no_changes，且不调用 AST 提供者与检查器
2. 示例合约只改 deposit -> 恰好一个任务、一条 assertion 发现
3. 全部通过 / AST 缺失 -> success
4. 显式文件列表绕过 git 差异收集；排除模式生效
5. 失败策略 should_fail
"""

import pytest

from conftest import BASE_CONTRACT, FAILED_OUTPUT, HEAD_CONTRACT, DictAstProvider, FakeRevisionSource, ScriptedChecker

from clarity_verify.config import DEFAULT_BASELINE_FLAGS, VerifyConfig
from clarity_verify.pipeline import PipelineOutcome, VerificationPipeline, VerificationStatus, should_fail
from clarity_verify.report.categories import ASSERTION

SAMPLE = "contracts/sample.clar"


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    # 隔离工作目录中的 YAML 配置
    monkeypatch.chdir(tmp_path)
    return VerifyConfig(base_ref="base", head_ref="head")


def _source(head=HEAD_CONTRACT, modified=(SAMPLE,)):
    return FakeRevisionSource({("base", SAMPLE): BASE_CONTRACT, ("head", SAMPLE): head}, modified=modified)


def _pipeline(cfg, source, provider=None, checker=None):
    return VerificationPipeline(
        cfg,
        source=source,
        ast_provider=provider or DictAstProvider({SAMPLE: "contracts/sample.clarast"}),
        checker=checker or ScriptedChecker({}),
    )


class TestPipeline:
    def test_no_changes_short_circuits(self, cfg):
        provider = DictAstProvider({SAMPLE: "contracts/sample.clarast"})
        checker = ScriptedChecker({})

        outcome = _pipeline(cfg, _source(head=BASE_CONTRACT), provider, checker).run()

        assert outcome.status is VerificationStatus.NO_CHANGES
        assert outcome.results == []
        assert provider.requests == []
        assert checker.calls == []

    def test_single_modified_function_end_to_end(self, cfg):
        checker = ScriptedChecker({"deposit": FAILED_OUTPUT})

        outcome = _pipeline(cfg, _source(), checker=checker).run()

        assert outcome.status is VerificationStatus.FAILURE
        assert [(c.name, c.change_type.value) for c in outcome.changed_functions] == [("deposit", "modified")]
        assert [(j.function_name, j.contract_name) for j in outcome.jobs] == [("deposit", "sample")]
        assert checker.calls == [
            (SAMPLE, "contracts/sample.clarast", "deposit", f"{DEFAULT_BASELINE_FLAGS} --verbose")
        ]
        assert [(f.rule_id, f.file, f.line) for f in outcome.findings] == [(ASSERTION, SAMPLE, 17)]
        assert "- Verification failed: 1" in outcome.summary

    def test_all_verified(self, cfg):
        outcome = _pipeline(cfg, _source()).run()
        assert outcome.status is VerificationStatus.SUCCESS
        assert outcome.findings == []
        assert "All functions were successfully verified!" in outcome.summary

    def test_missing_artifact_yields_success_without_jobs(self, cfg):
        checker = ScriptedChecker({})
        outcome = _pipeline(cfg, _source(), DictAstProvider({}), checker).run()

        assert outcome.status is VerificationStatus.SUCCESS
        assert outcome.jobs == []
        assert checker.calls == []

    def test_explicit_files_bypass_diff(self, cfg):
        outcome = _pipeline(cfg, _source(modified=())).run([SAMPLE])
        assert [c.name for c in outcome.changed_functions] == ["deposit"]

    def test_excluded_files_are_skipped(self, cfg):
        cfg.scan.excluded_contracts = ["sample"]
        outcome = _pipeline(cfg, _source()).run()
        assert outcome.status is VerificationStatus.NO_CHANGES

    def test_user_flags_follow_baseline(self, cfg):
        cfg.checker.baseline_flags = "--unwind 200"
        cfg.checker.flags = "--unwind 10"
        checker = ScriptedChecker({})

        _pipeline(cfg, _source(), checker=checker).run()

        assert checker.calls[0][3] == "--unwind 200 --unwind 10"


class TestShouldFail:
    @pytest.mark.parametrize(
        "status, fail_on_issue, expected",
        [
            (VerificationStatus.FAILURE, True, True),
            (VerificationStatus.FAILURE, False, False),
            (VerificationStatus.SUCCESS, True, False),
            (VerificationStatus.NO_CHANGES, True, False),
        ],
    )
    def test_policy(self, status, fail_on_issue, expected):
        assert should_fail(PipelineOutcome(status=status), fail_on_issue) is expected
