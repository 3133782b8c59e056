"""
LeakGuard CLI - Configuration commands
"""
from dataclasses import fields

import click

from leakguard.utils.config import ConfigManager, LeakGuardConfig, coerce_value


@click.group()
@click.pass_context
def config(ctx):
    """Manage scan settings"""
    pass


@config.command()
@click.pass_context
def show(ctx):
    """Show the effective configuration"""
    manager: ConfigManager = ctx.obj['config']
    cfg = manager.load()

    click.echo("⚙️  Current Configuration\n")
    for key, value in cfg.to_dict().items():
        click.echo(f"{key}: {'Not set' if value is None else value}")
    click.echo(f"\n📁 Config file: {manager.config_path}")


@config.command("set")
@click.argument("key", type=click.Choice([f.name for f in fields(LeakGuardConfig)]))
@click.argument("value")
@click.pass_context
def set_value(ctx, key: str, value: str):
    """Set one configuration value"""
    manager: ConfigManager = ctx.obj['config']
    try:
        converted = coerce_value(value, manager.get(key))
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a valid value for {key}", param_hint="VALUE")

    manager.set(key, converted)
    click.echo(f"✅ {key} = {converted}")
    click.echo(f"\n💾 Configuration saved to: {manager.config_path}")


@config.command()
@click.confirmation_option(prompt='Are you sure you want to reset all settings?')
@click.pass_context
def reset(ctx):
    """Restore the default configuration"""
    manager: ConfigManager = ctx.obj['config']
    manager.clear()
    click.echo("✅ Configuration reset to defaults")
