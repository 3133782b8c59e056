"""LeakGuard CLI - commands over the findings store."""
import asyncio
import json

import click

from leakguard.core.models import Validity
from leakguard.core.repository import JsonFileFindingsRepository
from leakguard.core.revalidation import revalidate_all
from leakguard.utils.logger import mask_secret

VALIDITY_STYLES = {
    Validity.VALID: {"fg": "red", "bold": True},
    Validity.INVALID: {"fg": "green"},
    Validity.FAILED_TO_CHECK: {"fg": "yellow"},
    Validity.NO_CHECKER: {"fg": "yellow"},
    Validity.UNKNOWN: {},
}


def _repository(ctx) -> JsonFileFindingsRepository:
    return JsonFileFindingsRepository(ctx.obj['config'].get("findings_path"))


def _print_findings(findings) -> None:
    if not findings:
        click.echo("No findings recorded.")
        return
    for finding in findings:
        validity = click.style(finding.validity.value, **VALIDITY_STYLES[finding.validity])
        values = [mask_secret(str(v)) for v in finding.secret_value.get("match", {}).values()]
        click.echo(f"{finding.fingerprint[:12]}  {finding.secret_type:<28} {validity:<20} "
                   f"{finding.num_occurrences} occurrence(s)  {', '.join(values)}")


@click.command("findings")
@click.option("--json", "as_json", is_flag=True, help="Output the stored findings as JSON")
@click.pass_context
def findings(ctx, as_json: bool):
    """📋 List recorded findings."""
    stored = asyncio.run(_repository(ctx).get_existing())
    if as_json:
        click.echo(json.dumps([f.to_dict() for f in stored], indent=2))
    else:
        _print_findings(stored)


@click.command("revalidate")
@click.pass_context
def revalidate(ctx):
    """🔄 Re-check every recorded finding against its service."""
    results = asyncio.run(revalidate_all(_repository(ctx)))
    _print_findings(results)
