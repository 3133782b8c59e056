"""
LeakGuard CLI - Scan Commands

Scan a local file (attributed to the URL it was served from) or download
and scan a remote script. Confirmed findings are merged into the findings
store.
"""
import asyncio
import json
from typing import List, Optional

import aiohttp
import click

from leakguard.core.exceptions import LeakGuardError
from leakguard.core.models import Finding
from leakguard.core.patterns import load_patterns
from leakguard.core.repository import JsonFileFindingsRepository
from leakguard.core.scanner import Scanner
from leakguard.utils.config import ConfigManager
from leakguard.utils.logger import mask_secret


def build_scanner(
    manager: ConfigManager,
    session: aiohttp.ClientSession,
    patterns_file: Optional[str] = None,
) -> Scanner:
    """Scanner wired to the configured findings store and patterns."""
    config = manager.load()
    repository = JsonFileFindingsRepository(config.findings_path)
    registry = load_patterns(patterns_file or config.patterns_file)
    return Scanner(
        repository,
        session=session,
        timeout=config.request_timeout,
        registry=registry,
        **manager.detector_options(),
    )


def format_findings(findings: List[Finding]) -> None:
    """Display new findings, secrets masked."""
    if not findings:
        click.echo("\n✅ No live credentials found.")
        return

    click.echo(f"\n⚠️  {len(findings)} live credential(s) found:\n")
    for finding in findings:
        for occurrence in finding.occurrences:
            source = occurrence.source_content
            location = source.content_filename
            if source.is_resolved:
                location = f"{location}:{source.exact_match_numbers[0]}"
            values = [mask_secret(str(v)) for v in occurrence.secret_value.get("match", {}).values()]
            click.echo(f"  {click.style(finding.secret_type, fg='red', bold=True)} ({occurrence.resource_type})")
            click.echo(f"    URL:    {occurrence.url}")
            click.echo(f"    Source: {location}")
            click.echo(f"    Value:  {', '.join(values)}")


def _run_scan(ctx, patterns_file: Optional[str], output: str, action) -> None:
    manager: ConfigManager = ctx.obj['config']

    async def run():
        timeout = aiohttp.ClientTimeout(total=manager.get("request_timeout"))
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await action(build_scanner(manager, session, patterns_file))

    try:
        results = asyncio.run(run())
    except LeakGuardError as e:
        raise click.ClickException(e.message)

    if output == "json":
        click.echo(json.dumps([f.to_dict() for f in results], indent=2))
    else:
        format_findings(results)

    if results:
        ctx.exit(1)


@click.command("scan")
@click.argument("file", type=click.File("r", encoding="utf-8", errors="replace"))
@click.option("--url", "-u", required=True, help="URL the content was served from")
@click.option("--patterns", "patterns_file", type=click.Path(exists=True), help="Custom patterns file")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def scan(ctx, file, url: str, patterns_file: Optional[str], output: str):
    """🔍 Scan a local file for live credentials."""
    content = file.read()
    _run_scan(ctx, patterns_file, output, lambda scanner: scanner.scan(content, url))


@click.command("scan-url")
@click.argument("url")
@click.option("--patterns", "patterns_file", type=click.Path(exists=True), help="Custom patterns file")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def scan_url(ctx, url: str, patterns_file: Optional[str], output: str):
    """🌐 Download a script and scan it for live credentials."""
    _run_scan(ctx, patterns_file, output, lambda scanner: scanner.scan_url(url))
