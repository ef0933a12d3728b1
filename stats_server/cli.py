"""Click console commands for the statistics server."""
import json
import logging
from datetime import datetime
from pathlib import Path

import click

from stats_server.core.config import ensure_snapshot_dir, settings
from stats_server.core.logging_config import setup_logging
from stats_server.core.security import generate_api_key, hash_api_key
from stats_server.db.session import SessionLocal
from stats_server.models.api_key import APIKey
from stats_server.services.records import StatsError
from stats_server.services.report import VALID_SOURCES, build_report
from stats_server.services.repository import StatsRepository

logger = logging.getLogger(__name__)


def _write_snapshot(source: str, recent: bool, suffix: str) -> Path:
    db = SessionLocal()
    try:
        report = build_report(
            StatsRepository(db),
            source=source,
            recent=recent,
            authorized_raw=True,
            cumulative_total=settings.FULL_TOTAL_CUMULATIVE,
        )
    finally:
        db.close()

    filename = datetime.now().strftime("%Y%m%d_%H%M%S")
    if suffix:
        filename = f"{filename}_{suffix}"
    path = ensure_snapshot_dir() / filename
    path.write_text(json.dumps(report), encoding="utf-8")
    logger.info("Snapshot written to %s", path)
    return path


@click.group()
def cli() -> None:
    """Statistics server maintenance commands."""
    setup_logging()


@cli.command()
@click.option("--source", default="", type=click.Choice(("",) + VALID_SOURCES),
              help="Limit the snapshot to one data source")
def snapshot(source: str) -> None:
    """Write a raw snapshot of the statistics data."""
    try:
        path = _write_snapshot(source, recent=False, suffix=source)
    except StatsError as e:
        raise click.ClickException(str(e))
    click.echo(f"Snapshot recorded: {path}")


@cli.command("snapshot-recent")
def snapshot_recent() -> None:
    """Write a raw snapshot of the recently updated installations."""
    path = _write_snapshot("", recent=True, suffix="recently_updated")
    click.echo(f"Snapshot recorded: {path}")


@cli.command("create-api-key")
@click.argument("name")
def create_api_key(name: str) -> None:
    """Mint an API key granting raw data access."""
    raw_key = generate_api_key()
    db = SessionLocal()
    try:
        db.add(APIKey(key_hash=hash_api_key(raw_key), key_prefix=raw_key[:8], name=name))
        db.commit()
    finally:
        db.close()
    click.echo(f"API key '{name}' created. Store it now, it will not be shown again:")
    click.echo(raw_key)


if __name__ == "__main__":
    cli()
