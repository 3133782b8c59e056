"""LeakGuard CLI - pattern listing."""
from typing import Optional

import click

from leakguard.core.exceptions import ConfigurationError
from leakguard.core.patterns import load_patterns


@click.command("patterns")
@click.option("--patterns", "patterns_file", type=click.Path(exists=True), help="Custom patterns file")
@click.option("--family", "-f", default=None, help="Only show patterns of this family")
@click.pass_context
def patterns(ctx, patterns_file: Optional[str], family: Optional[str]):
    """🧩 List detection patterns grouped by family."""
    try:
        registry = load_patterns(patterns_file or ctx.obj['config'].get("patterns_file"))
    except ConfigurationError as e:
        raise click.ClickException(e.message)

    for name in registry.families():
        if family and name != family:
            continue
        click.echo(click.style(name, bold=True))
        for pattern in registry.for_family(name):
            scope = "global" if pattern.is_global_match else "first"
            click.echo(f"  {pattern.name:<36} entropy>={pattern.entropy_threshold:<4} {scope}")
