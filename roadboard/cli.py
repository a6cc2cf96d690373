import click
from flask.cli import with_appcontext

from roadboard.extensions import db
from roadboard.services.migration import ensure_unified_roadmap, reset_migration_state
from roadboard.services.sync import SYNC_MODES, sync_database
from roadboard.services.tags import ensure_default_tags, list_tags


@click.group()
def roadmap():
    """Roadmap data ops."""


@roadmap.command("migrate-legacy")
@click.option("--force", is_flag=True, help="Run even if this process already migrated")
@with_appcontext
def migrate_legacy(force):
    if force:
        reset_migration_state()
    result = ensure_unified_roadmap(db.session)
    if result.status == "failed":
        raise click.ClickException(f"Legacy migration failed: {result.error}")
    click.echo(
        f"Legacy migration: status={result.status} moved_items={result.moved_items} "
        f"linked_tags={result.linked_tags}"
    )


@roadmap.command("seed-tags")
@with_appcontext
def seed_tags():
    ensure_default_tags(db.session)
    click.echo(f"Tags: {', '.join(t.name for t in list_tags(db.session))}")


@roadmap.command("sync-db")
@click.option("--source", "source_url", required=True, help="SQLAlchemy URL of the database to copy from")
@click.option("--mode", type=click.Choice(SYNC_MODES), default="merge", show_default=True)
@with_appcontext
def sync_db(source_url, mode):
    counts = sync_database(source_url, mode=mode)
    for name, n in counts.items():
        click.echo(f"[sync] {name}: {n}")
    click.echo(f"[sync] done mode={mode}")


def register_cli(app):
    app.cli.add_command(roadmap)
