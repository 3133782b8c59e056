"""
LeakGuard CLI - Main entry point
"""
import click
from dotenv import load_dotenv

from leakguard import __version__
from leakguard.cli import config, findings, patterns, scan
from leakguard.utils.config import ConfigManager
from leakguard.utils.logger import get_logger


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx, log_level):
    """
    LeakGuard - Leaked credential detection for web content

    Finds live credentials in JavaScript bundles and other served text,
    validates them against the issuing service and maps them back to the
    original source file through source maps.

    \b
    WORKFLOW:
      leakguard scan-url https://example.com/static/js/main.js
      leakguard scan bundle.js --url https://example.com/static/js/main.js
      leakguard findings
      leakguard revalidate
      leakguard config set max_concurrent 10
    """
    load_dotenv()
    ctx.ensure_object(dict)
    manager = ConfigManager()
    ctx.obj['config'] = manager
    get_logger("leakguard", log_level or manager.get("log_level"))


# Register subcommands
cli.add_command(scan.scan)
cli.add_command(scan.scan_url)
cli.add_command(findings.findings)
cli.add_command(findings.revalidate)
cli.add_command(patterns.patterns)
cli.add_command(config.config)


if __name__ == '__main__':
    cli()
