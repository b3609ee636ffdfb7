"""Typer CLI — ``a11ybot audit``, ``render``, ``validate`` and ``contrast`` commands."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from a11ybot.config import load_config
from a11ybot.errors import AuditError, InvalidURLError
from a11ybot.orchestrator import validate_url
from a11ybot.schemas.audit import AuditResult
from a11ybot.schemas.config import AuditConfig

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="a11ybot",
    help="A11Y Bot — audit a web page for accessibility defects and export a PDF report.",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config_or_exit(config: Path | None) -> AuditConfig:
    try:
        return load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)


def default_report_path(output_directory: str | Path, now: datetime | None = None) -> Path:
    """``<output_directory>/<UTC timestamp>.pdf`` with ``:`` and ``.`` made file-safe."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return Path(output_directory) / f"{re.sub(r'[:.]', '-', stamp)}.pdf"


@app.command()
def audit(
    url: str = typer.Option(..., "--url", "-u", help="Page URL to audit (http:// or https://)."),
    output: Path = typer.Option(None, "--output", "-o", help="PDF path (default: <output_directory>/<timestamp>.pdf)."),
    config: Path = typer.Option(None, "--config", "-c", help="Path to a11ybot.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Audit one page and write a PDF report plus the raw result as JSON."""
    _setup_logging(verbose)
    try:
        url = validate_url(url)
    except InvalidURLError as exc:
        console.print(f"[red]Audit failed ({exc.kind}):[/] {exc}")
        raise typer.Exit(code=1)
    cfg = _load_config_or_exit(config)
    out = output or default_report_path(cfg.output_directory)

    console.print(f"[bold]Auditing:[/] {url}\n")
    try:
        result = asyncio.run(_run_audit(cfg, url, out))
    except AuditError as exc:
        console.print(f"[red]Audit failed ({exc.kind}):[/] {exc}")
        raise typer.Exit(code=1)

    from a11ybot.shared.progress import summary_table

    json_path = out.with_suffix(".json")
    json_path.write_text(result.model_dump_json(indent=2))

    console.print(summary_table(result))
    console.print(f"[green]PDF report written to:[/] {out}")
    console.print(f"[green]Result JSON written to:[/] {json_path}")


async def _run_audit(cfg: AuditConfig, url: str, out: Path) -> AuditResult:
    """Run the audit pipeline inside one browser session."""
    from a11ybot.orchestrator import AuditOrchestrator
    from a11ybot.shared.browser import BrowserSession
    from a11ybot.shared.progress import AuditProgress

    async with BrowserSession(cfg.browser) as session:
        session.install_shutdown_hook()
        orchestrator = AuditOrchestrator(session, cfg)
        with AuditProgress(url) as progress:
            try:
                result = await orchestrator.audit_to_pdf(url, out, on_progress=progress.update)
            except AuditError as exc:
                progress.fail(exc.kind)
                raise
            progress.finish()
    return result


@app.command()
def render(
    result: Path = typer.Option(..., "--result", "-r", help="Result JSON from a previous `a11ybot audit` run."),
    output: Path = typer.Option(..., "--output", "-o", help="Report path; a .html suffix skips the PDF export."),
    config: Path = typer.Option(None, "--config", "-c", help="Path to a11ybot.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Re-render a report from a saved result JSON — no re-audit required.

    Example:

        a11ybot render --result reports/2025-01-01T10-00-00-000Z.json --output report.pdf
    """
    _setup_logging(verbose)
    cfg = _load_config_or_exit(config)

    from a11ybot.output.report import render_report

    if not result.exists():
        console.print(f"[red]No result JSON found at {result}[/]")
        raise typer.Exit(code=1)

    audit_result = AuditResult.model_validate_json(result.read_text())
    document = render_report(audit_result)

    if output.suffix.lower() in (".html", ".htm"):
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document)
        console.print(f"[green]HTML report written to:[/] {output}")
        return

    try:
        asyncio.run(_run_render(cfg, document, output))
    except AuditError as exc:
        console.print(f"[red]Render failed ({exc.kind}):[/] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[green]PDF report written to:[/] {output}")


async def _run_render(cfg: AuditConfig, document: str, output: Path) -> None:
    from a11ybot.orchestrator import AuditOrchestrator
    from a11ybot.shared.browser import BrowserSession

    async with BrowserSession(cfg.browser) as session:
        await AuditOrchestrator(session, cfg).render_artifact(document, output)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to a11ybot.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Validate a configuration file without running an audit."""
    _setup_logging(verbose)
    cfg = _load_config_or_exit(config)

    console.print("[green]Config is valid![/]\n")
    console.print(f"  Headless:          {cfg.browser.headless}")
    console.print(f"  Browser args:      {' '.join(cfg.browser.args) or '(none)'}")
    console.print(f"  Executable:        {cfg.browser.executable_path or '(bundled Chromium)'}")
    console.print(f"  Navigation limit:  {cfg.navigation_timeout_ms / 1000:.0f}s ({cfg.wait_until})")
    console.print(f"  axe-core:          {cfg.axe_script_path or cfg.axe_source_url}")
    if cfg.axe_tags:
        console.print(f"  axe tags:          {', '.join(cfg.axe_tags)}")
    console.print(f"  Contrast minimum:  {cfg.contrast_threshold}:1")
    console.print(f"  Tab walk cap:      {cfg.max_tab_steps}")
    console.print(f"  Output dir:        {cfg.output_directory}")


@app.command()
def contrast(
    fg: str = typer.Argument(..., help="Text color, e.g. 'rgb(128, 128, 128)'."),
    bg: str = typer.Argument(..., help="Background color, e.g. 'rgb(255, 255, 255)'."),
    threshold: float = typer.Option(4.5, "--threshold", "-t", help="Minimum passing ratio."),
) -> None:
    """Print the WCAG contrast ratio of two opaque rgb() colors.

    Exits with code 1 when the pair falls below the threshold.
    """
    from a11ybot.audit.contrast import contrast_ratio, is_low_contrast, parse_rgb

    fg_rgb, bg_rgb = parse_rgb(fg), parse_rgb(bg)
    if fg_rgb is None or bg_rgb is None:
        bad = fg if fg_rgb is None else bg
        console.print(f"[red]Not an opaque rgb() color:[/] {bad}")
        raise typer.Exit(code=2)

    ratio = contrast_ratio(fg_rgb, bg_rgb)
    if is_low_contrast(fg_rgb, bg_rgb, threshold):
        console.print(f"[red]{ratio:.2f}:1 — below {threshold}:1[/]")
        raise typer.Exit(code=1)
    console.print(f"[green]{ratio:.2f}:1 — passes {threshold}:1[/]")
