from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from clarity_verify.config import VerifyConfig, parse_list_input
from clarity_verify.detection.git_source import GitRevisionFetcher, detect_changed_functions, filter_excluded
from clarity_verify.errors import ClarityVerifyError
from clarity_verify.observability.logger import get_logger_from_config
from clarity_verify.pipeline import VerificationPipeline, VerificationStatus, should_fail
from clarity_verify.report.categories import rule_for_title
from clarity_verify.report.findings import build_findings
from clarity_verify.report.sarif import build_sarif, write_report_text, write_sarif
from clarity_verify.verification.artifacts import ContainerAstProvider
from clarity_verify.verification.container import ContainerRunner
from clarity_verify.verification.output_parser import parse_checker_output
from clarity_verify.verification.runner import EsbmcContainerChecker

app = typer.Typer(help="clarity-verify: 对 Clarity 合约中变更的函数运行 ESBMC 形式化验证。")
console = Console()

_STATUS_STYLE = {
    VerificationStatus.SUCCESS: "green",
    VerificationStatus.FAILURE: "red",
    VerificationStatus.NO_CHANGES: "yellow",
}


def _apply_overrides(
    cfg: VerifyConfig,
    *,
    base: Optional[str] = None,
    head: Optional[str] = None,
    contracts_dir: Optional[str] = None,
    exclude: Optional[str] = None,
) -> VerifyConfig:
    if base:
        cfg.base_ref = base
    if head:
        cfg.head_ref = head
    if contracts_dir is not None:
        cfg.scan.contracts_dir = parse_list_input(contracts_dir) or ["./"]
    if exclude is not None:
        cfg.scan.excluded_contracts = parse_list_input(exclude)
    return cfg


def build_pipeline(cfg: VerifyConfig, logger: logging.Logger) -> VerificationPipeline:
    """按配置装配 git / 容器协作者。"""
    workdir = str(Path(cfg.workspace_root).resolve())
    runner = ContainerRunner(
        docker_bin=cfg.checker.docker_bin,
        workdir=workdir,
        timeout_s=cfg.checker.timeout_s,
        logger=logger,
    )
    return VerificationPipeline(
        cfg,
        source=GitRevisionFetcher(workdir, logger=logger),
        ast_provider=ContainerAstProvider(
            runner,
            image=cfg.checker.ast_container_repo,
            tag=cfg.checker.container_version,
            reuse_existing=cfg.checker.reuse_ast,
            logger=logger,
        ),
        checker=EsbmcContainerChecker(
            runner,
            image=cfg.checker.container_repo,
            tag=cfg.checker.container_version,
            logger=logger,
        ),
        logger=logger,
    )


def _print_failures_table(results) -> None:
    table = Table(title="Verification failures")
    table.add_column("Function")
    table.add_column("Line", justify="right")
    table.add_column("Title")
    table.add_column("Rule")
    table.add_column("Failing code", overflow="fold")
    for result in results:
        for failure in result.failures:
            line = str(failure.line_number) if failure.line_number > 0 else "?"
            table.add_row(
                failure.function_name,
                line,
                failure.title,
                rule_for_title(failure.title),
                Text(failure.failing_code),
            )
    console.print(table)


@app.command()
def version() -> None:
    """Print CLI version."""
    from clarity_verify import __version__

    typer.echo(__version__)


@app.command()
def detect(
    base: Optional[str] = typer.Option(None, "--base", help="基准版本（默认取配置 base_ref）"),
    head: Optional[str] = typer.Option(None, "--head", help="目标版本（默认取配置 head_ref）"),
    contracts_dir: Optional[str] = typer.Option(None, "--contracts-dir", help="合约目录，逗号或换行分隔"),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="排除模式，逗号或换行分隔"),
) -> None:
    """列出两个版本之间变更的 Clarity 函数。"""
    cfg = _apply_overrides(VerifyConfig(), base=base, head=head, contracts_dir=contracts_dir, exclude=exclude)
    logger = get_logger_from_config("clarity_verify", cfg)

    fetcher = GitRevisionFetcher(cfg.workspace_root, logger=logger)
    files = filter_excluded(
        fetcher.list_modified_files(cfg.base_ref, cfg.head_ref, cfg.scan.contracts_dir),
        cfg.scan.excluded_contracts,
    )
    changed = detect_changed_functions(
        fetcher,
        cfg.base_ref,
        cfg.head_ref,
        files,
        comment_aware=cfg.scan.comment_aware_parens,
        logger=logger,
    )
    if not changed:
        console.print("[yellow]未检测到变更的 Clarity 函数。[/yellow]")
        return

    table = Table(title=f"Changed functions ({cfg.base_ref} -> {cfg.head_ref})")
    table.add_column("File")
    table.add_column("Function")
    table.add_column("Kind")
    table.add_column("Change")
    table.add_column("Lines", justify="right")
    for func in changed:
        table.add_row(func.file, func.name, func.kind.value, func.change_type.value, f"{func.start_line}-{func.end_line}")
    console.print(table)


@app.command("parse-output")
def parse_output(
    output_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="保存下来的 ESBMC 原始输出"),
    source_file: str = typer.Option("contract.clar", "--file", help="结果归属的合约文件"),
    function_name: str = typer.Option("unknown_function", "--function", help="被验证的函数名"),
    sarif: Optional[Path] = typer.Option(None, "--sarif", help="可选：同时写出 SARIF 报告"),
) -> None:
    """解析一份 ESBMC 原始输出并打印失败记录。"""
    raw = output_file.read_text(encoding="utf-8", errors="replace")
    result = parse_checker_output(raw, source_file, function_name)

    if result.verified:
        console.print(f"[green]VERIFIED[/green] {function_name}")
    else:
        console.print(f"[red]FAILED[/red] {function_name}: {len(result.failures)} failure(s)")
        if result.failures:
            _print_failures_table([result])

    if sarif is not None:
        cfg = VerifyConfig()
        try:
            document = build_sarif(build_findings([result]), cfg.report.tool_name, cfg.report.tool_version)
            written = write_sarif(document, sarif)
        except ClarityVerifyError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=2)
        console.print(f"SARIF 已写入: {written}")


@app.command()
def run(
    base: Optional[str] = typer.Option(None, "--base", help="基准版本（默认取配置 base_ref）"),
    head: Optional[str] = typer.Option(None, "--head", help="目标版本（默认取配置 head_ref）"),
    contracts_dir: Optional[str] = typer.Option(None, "--contracts-dir", help="合约目录，逗号或换行分隔"),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="排除模式，逗号或换行分隔"),
    flags: Optional[str] = typer.Option(None, "--flags", help="追加在基线之后的 ESBMC 开关"),
    sarif: Optional[str] = typer.Option(None, "--sarif", help="SARIF 输出路径"),
    summary: Optional[str] = typer.Option(None, "--summary", help="Markdown 摘要输出路径"),
    fail_on_issue: Optional[bool] = typer.Option(
        None, "--fail-on-issue/--no-fail-on-issue", help="发现问题时以非零状态退出"
    ),
    files: Optional[List[str]] = typer.Argument(None, help="直接指定要分析的合约文件（跳过 git diff 收集）"),
) -> None:
    """运行完整流水线：检测变更函数 -> ESBMC 验证 -> SARIF / 摘要。"""
    cfg = _apply_overrides(VerifyConfig(), base=base, head=head, contracts_dir=contracts_dir, exclude=exclude)
    if flags is not None:
        cfg.checker.flags = flags
    if sarif:
        cfg.report.sarif_path = sarif
    if summary:
        cfg.report.summary_path = summary
    if fail_on_issue is not None:
        cfg.fail_on_issue = fail_on_issue

    logger = get_logger_from_config("clarity_verify", cfg)
    pipeline = build_pipeline(cfg, logger)

    try:
        outcome = pipeline.run(files or None)
        if outcome.status is not VerificationStatus.NO_CHANGES:
            document = build_sarif(outcome.findings, cfg.report.tool_name, cfg.report.tool_version)
            written = write_sarif(document, cfg.report.sarif_path)
            logger.info(f"SARIF 报告已写入: {written}")
            if cfg.report.summary_path:
                write_report_text(cfg.report.summary_path, outcome.summary)
    except ClarityVerifyError as e:
        console.print(f"[red]验证流程失败: {e}[/red]")
        raise typer.Exit(code=2)

    if outcome.summary:
        console.print(outcome.summary, markup=False)
    failed = [r for r in outcome.results if not r.verified]
    if failed:
        _print_failures_table(failed)
    style = _STATUS_STYLE[outcome.status]
    console.print(f"verification_status: [{style}]{outcome.status.value}[/{style}]")

    if should_fail(outcome, cfg.fail_on_issue):
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
