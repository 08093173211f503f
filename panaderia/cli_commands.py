"""
Flask CLI commands.

Commands:
- flask db-upgrade: Apply Alembic migrations and seed the default exchange rate
- flask normalize-legacy-sales: Move legacy JSON sale blobs into normalized rows
"""
import os

import click
from alembic import command
from alembic.config import Config as AlembicConfig

from panaderia.database import get_engine, get_session
from panaderia.services.legacy_sales_service import normalize_legacy_sales
from panaderia.services.settings_service import seed_default_exchange_rate

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def build_alembic_config(database_uri: str) -> AlembicConfig:
    alembic_cfg = AlembicConfig(os.path.join(PROJECT_ROOT, 'alembic.ini'))
    alembic_cfg.set_main_option('script_location', os.path.join(PROJECT_ROOT, 'migrations'))
    alembic_cfg.set_main_option('sqlalchemy.url', database_uri.replace('%', '%%'))
    alembic_cfg.attributes['url_from_caller'] = True
    alembic_cfg.attributes['configure_logger'] = False
    return alembic_cfg


def upgrade_schema(engine, revision: str = 'head') -> None:
    """Run migrations on ``engine`` inside one connection-level transaction."""
    with engine.begin() as connection:
        alembic_cfg = build_alembic_config(engine.url.render_as_string(hide_password=False))
        alembic_cfg.attributes['connection'] = connection
        command.upgrade(alembic_cfg, revision)


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('db-upgrade')
    @click.option('--revision', default='head', help='Target revision')
    def db_upgrade(revision):
        """Apply schema migrations up to REVISION."""
        upgrade_schema(get_engine(), revision)
        click.echo(click.style(f'✅ Esquema migrado a {revision}', fg='green'))

        db_session = get_session()
        try:
            if seed_default_exchange_rate(db_session, app.config.get('DEFAULT_EXCHANGE_RATE')):
                click.echo(f"   Tasa de cambio inicial: {app.config.get('DEFAULT_EXCHANGE_RATE')}")
        finally:
            db_session.remove()

    @app.cli.command('normalize-legacy-sales')
    def normalize_legacy_sales_command():
        """Write normalized line items and payments for legacy sales."""
        db_session = get_session()
        try:
            counts = normalize_legacy_sales(db_session, app.config.get('BASE_CURRENCY', 'NIO'))
        finally:
            db_session.remove()

        click.echo(click.style(f"✅ Ventas normalizadas: {counts['normalized']}", fg='green'))
        if counts['skipped']:
            click.echo(click.style(f"⚠️  Ventas omitidas: {counts['skipped']} (ver log)", fg='yellow'))
