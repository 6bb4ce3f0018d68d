"""
nightly-bench CLI

Command-line interface for the nightly benchmark run.

Usage:
    # Full nightly run (submodule, benchmark, stats, publish)
    nightly-bench run

    # Benchmark a single website and symlink the report index
    nightly-bench run --website example.com --mode symlink

    # Only (re)publish an existing report
    nightly-bench publish --report-dir target/criterion

    # List the websites in the suite checkout
    nightly-bench suite
"""

import argparse
import shlex
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

import config as settings
from utils.exceptions import NightlyBenchError
from utils.logging_config import setup_logging

from . import __version__

console = Console()


def _load_config(args: argparse.Namespace):
    """Build a NightlyConfig from settings, an optional YAML file and CLI flags."""
    from .pipeline import NightlyConfig

    overrides = {
        "repo_root": getattr(args, "repo_root", None),
        "report_dir": getattr(args, "report_dir", None),
        "suite_dir": getattr(args, "suite_dir", None),
        "publish_mode": getattr(args, "mode", None),
        "website": getattr(args, "website", None),
        "bench_command": shlex.split(args.bench_cmd) if getattr(args, "bench_cmd", None) else None,
    }
    if getattr(args, "no_submodule", False):
        overrides["update_submodules"] = False
    if getattr(args, "no_postprocess", False):
        overrides["postprocess"] = False
    if getattr(args, "no_suite_check", False):
        overrides["check_suite"] = False
    if getattr(args, "no_summary", False):
        overrides["write_summary"] = False

    defaults = {
        "bench_command": list(settings.BENCH_COMMAND),
        "toolchain_bin_dir": settings.TOOLCHAIN_BIN_DIR,
        "publish_mode": settings.PUBLISH_MODE,
    }
    if args.config:
        return NightlyConfig.from_yaml(Path(args.config), defaults=defaults, **overrides)
    return NightlyConfig.from_dict(defaults, **overrides)


def cmd_run(args: argparse.Namespace) -> int:
    """Run the full nightly flow."""
    from .pipeline import NightlyPipeline

    config = _load_config(args)
    console.print(f"[cyan]Nightly benchmark: {config.repo_root.resolve()}[/cyan]")
    console.print(f"[dim]Command: {' '.join(config.bench_command)}[/dim]")

    result = NightlyPipeline(config).run()

    table = Table(title="Nightly Run")
    table.add_column("Step", style="cyan")
    table.add_column("Seconds", style="green", justify="right")
    for step, seconds in result.step_seconds.items():
        table.add_row(step, f"{seconds:.1f}")
    console.print(table)

    if result.host:
        console.print(
            f"[dim]Host: {result.host.hostname} "
            f"({result.host.cpu_cores_logical} cores, {result.host.ram_gb:.0f}GB RAM)[/dim]"
        )
    if result.reports_postprocessed:
        console.print(f"[green]Selector stats injected into {result.reports_postprocessed} report(s)[/green]")

    if result.ok:
        console.print(f"[green]Report published at {result.publish.output_path}[/green]")
        return 0
    console.print(f"[red]No report generated; error page written to {result.publish.output_path}[/red]")
    return 1


def cmd_publish(args: argparse.Namespace) -> int:
    """Publish the report index of an existing report tree."""
    from .reporting import publish_report

    config = _load_config(args)
    result = publish_report(config.resolved_report_dir, mode=config.publish_mode)
    if result.ok:
        console.print(f"[green]Report published at {result.output_path} ({result.mode})[/green]")
        return 0
    console.print(f"[red]Report index missing; error page written to {result.output_path}[/red]")
    return 1


def cmd_postprocess(args: argparse.Namespace) -> int:
    """Inject selector stats into an existing report tree."""
    from .reporting import postprocess_reports

    config = _load_config(args)
    stats_path = Path(args.stats) if args.stats else None
    count = postprocess_reports(config.resolved_report_dir, stats_path=stats_path)
    console.print(f"[green]Selector stats injected into {count} report(s)[/green]")
    return 0


def cmd_suite(args: argparse.Namespace) -> int:
    """List the websites in the suite checkout."""
    from .suite import list_websites

    config = _load_config(args)
    websites = list_websites(config.resolved_suite_dir)

    if not websites:
        console.print(f"[yellow]No websites in {config.resolved_suite_dir}[/yellow]")
        return 0

    table = Table(title=f"Websites ({len(websites)})")
    table.add_column("Website", style="cyan")
    for name in websites:
        table.add_row(name)
    console.print(table)
    return 0


COMMANDS = {
    "run": cmd_run,
    "publish": cmd_publish,
    "postprocess": cmd_postprocess,
    "suite": cmd_suite,
}


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", "-c", help="Path to nightly config YAML")
    parser.add_argument("--repo-root", help="Repository root (default: current directory)")
    parser.add_argument("--report-dir", help="Criterion output directory, relative to the repo root")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nightly-bench",
        description="Nightly benchmark runner and report publisher",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run
    run_parser = subparsers.add_parser("run", help="Run the full nightly benchmark")
    _add_common(run_parser)
    run_parser.add_argument("--suite-dir", help="Websites suite directory, relative to the repo root")
    run_parser.add_argument("--mode", "-m", choices=["redirect", "symlink", "copy"], help="Publish mode")
    run_parser.add_argument("--website", "-w", help="Only benchmark this website")
    run_parser.add_argument("--bench-cmd", help="Benchmark command line (default: cargo bench)")
    run_parser.add_argument("--no-submodule", action="store_true", help="Skip git submodule update")
    run_parser.add_argument("--no-suite-check", action="store_true", help="Skip suite validation")
    run_parser.add_argument("--no-postprocess", action="store_true", help="Skip selector stats injection")
    run_parser.add_argument("--no-summary", action="store_true", help="Skip the nightly.json summary")

    # publish
    publish_parser = subparsers.add_parser("publish", help="Publish the report index only")
    _add_common(publish_parser)
    publish_parser.add_argument("--mode", "-m", choices=["redirect", "symlink", "copy"], help="Publish mode")

    # postprocess
    post_parser = subparsers.add_parser("postprocess", help="Inject selector stats into reports")
    _add_common(post_parser)
    post_parser.add_argument("--stats", help="Path to stats.json (default: <report-dir>/stats.json)")

    # suite
    suite_parser = subparsers.add_parser("suite", help="List websites in the suite checkout")
    _add_common(suite_parser)
    suite_parser.add_argument("--suite-dir", help="Websites suite directory, relative to the repo root")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings.validate_config()
    setup_logging(
        level=args.log_level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL),
        log_dir=settings.LOG_DIR,
        console=True,
    )

    try:
        return COMMANDS[args.command](args)
    except NightlyBenchError as e:
        console.print(f"[red]Error: {e}[/red]")
        return _exit_code_for(e)


def _exit_code_for(error: NightlyBenchError) -> int:
    """Exit with the failing command's own status when there is one."""
    code = getattr(error, "exit_code", None)
    if not code:
        return 1
    # Killed by a signal: report it the way a shell does.
    return 128 - code if code < 0 else code


if __name__ == "__main__":
    sys.exit(main())
