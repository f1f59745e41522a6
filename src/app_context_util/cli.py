"""
Command-line interface for inspecting application contexts.

Lists the beans declared by a set of configuration sources, or resolves a
single bean with the one-shot resolver and prints it.
"""

import logging
import sys

import click

from app_context_util.config.loader_settings import ContextLoaderSettings
from app_context_util.context_handle import get_bean
from app_context_util.core.errors import ApplicationContextError
from app_context_util.infrastructure.context.context_loader import YamlApplicationContextLoader
from app_context_util.utils.import_utils import import_string

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option('--log-level', default="WARNING", show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False),
              help='Logging level for context loading diagnostics')
def cli(log_level: str):
    """Application context inspection commands."""
    logging.basicConfig(level=getattr(logging, log_level.upper()))


@cli.command()
@click.argument('sources', nargs=-1, required=True)
def beans(sources):
    """List the beans declared by SOURCES without instantiating them."""
    try:
        settings = ContextLoaderSettings.from_env().model_copy(update={"eager_init": False})
        with YamlApplicationContextLoader(settings).load(sources) as context:
            click.echo(f"📦 {len(context.bean_names())} bean(s) from {len(context.sources)} source(s)")
            for name in context.bean_names():
                definition = context.get_bean_definition(name)
                bean_type = context.get_type(name)
                click.echo(
                    f"  - {name} [{definition.scope.value}] "
                    f"{bean_type.__module__}.{bean_type.__qualname__}"
                )
    except ApplicationContextError as e:
        click.echo(f"❌ Failed to load application context: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Unexpected error: {e}", err=True)
        sys.exit(1)


@cli.command('get-bean')
@click.argument('bean_type')
@click.argument('sources', nargs=-1, required=True)
def get_bean_command(bean_type: str, sources):
    """Resolve the single bean of BEAN_TYPE (pkg.module:Class) from SOURCES."""
    try:
        requested = import_string(bean_type)
    except ImportError as e:
        click.echo(f"❌ Cannot import bean type: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Cannot import bean type: {type(e).__name__}: {e}", err=True)
        sys.exit(1)

    try:
        bean = get_bean(requested, *sources)
        click.echo(f"✅ {bean!r}")
    except ApplicationContextError as e:
        click.echo(f"❌ Failed to resolve {bean_type}: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Unexpected error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
