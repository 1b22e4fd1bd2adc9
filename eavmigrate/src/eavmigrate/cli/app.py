"""Typer CLI application."""

import typer
from pathlib import Path
from typing import Optional

from eavmigrate.config.settings import get_settings
from eavmigrate.config.logging import setup_logging
from eavmigrate.errors import MigrationError, StorageFailure
from eavmigrate.migration.backup import BackupLedger
from eavmigrate.migration.runner import EavMigration, destination_tables
from eavmigrate.model.migration_config import MigrationConfig
from eavmigrate.monitoring.progress import TyperProgress
from eavmigrate.monitoring.report import save_report
from eavmigrate.storage.csv_store import CsvRecordStore
from eavmigrate.utils.config_io import load_config

app = typer.Typer(help="eavmigrate: migrate an EAV attribute taxonomy between schema versions")


def _load_config_or_exit(config: Optional[Path]) -> MigrationConfig:
    config_path = config or get_settings().config_file
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _open_store_or_exit(directory: Path, config: MigrationConfig) -> CsvRecordStore:
    try:
        return CsvRecordStore(
            directory,
            primary_keys=config.primary_keys,
            backup_suffix=get_settings().backup_suffix,
        )
    except StorageFailure as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def migrate(
    source_dir: Path,
    destination_dir: Path,
    config: Optional[Path] = typer.Option(None, "--config", help="Migration config JSON"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the run report to this JSON file"),
    keep_backups: bool = typer.Option(
        True, "--keep-backups/--delete-backups", help="Keep table backups after a successful run"
    ),
    rollback_on_error: bool = typer.Option(
        True, "--rollback-on-error/--no-rollback-on-error", help="Restore the destination if the run fails"
    ),
):
    """
    Migrate attribute sets, groups, attributes, assignments and join tables.

    Args:
        source_dir: Directory of source table CSV files
        destination_dir: Directory of destination table CSV files
    """
    setup_logging()
    settings = get_settings()
    migration_config = _load_config_or_exit(config)
    source = _open_store_or_exit(source_dir, migration_config)
    destination = _open_store_or_exit(destination_dir, migration_config)

    migration = EavMigration(source, destination, migration_config, progress=TyperProgress())
    typer.echo(f"Migrating EAV structure from {source_dir} to {destination_dir}")
    try:
        result = migration.perform()
    except MigrationError as e:
        typer.echo(f"Error: {e}", err=True)
        if rollback_on_error:
            typer.echo("Rolling back destination tables...")
            migration.rollback()
        else:
            typer.echo("Destination left as is; run `eavmigrate rollback` to restore it")
        raise typer.Exit(1)

    if not keep_backups:
        migration.delete_backups()

    report_path = report or settings.report_file
    if report_path:
        save_report(result, Path(report_path))
        typer.echo(f"Report written to {report_path}")

    for table_report in result.tables:
        status = "skipped" if table_report.skipped else f"{table_report.rows_written} row(s)"
        typer.echo(f"  {table_report.table}: {status}")
    typer.echo(
        f"✓ Complete! {result.total_rows_written} row(s) written, {result.total_dropped} dropped"
    )


@app.command()
def rollback(
    destination_dir: Path,
    config: Optional[Path] = typer.Option(None, "--config", help="Migration config JSON"),
):
    """
    Restore every backed-up destination table.

    Args:
        destination_dir: Directory of destination table CSV files
    """
    setup_logging()
    migration_config = _load_config_or_exit(config)
    destination = _open_store_or_exit(destination_dir, migration_config)
    BackupLedger(destination).rollback(destination_tables(migration_config))
    typer.echo(f"✓ Rolled back {destination_dir}")


@app.command()
def delete_backups(
    destination_dir: Path,
    config: Optional[Path] = typer.Option(None, "--config", help="Migration config JSON"),
):
    """
    Discard table backups after a confirmed run.

    Args:
        destination_dir: Directory of destination table CSV files
    """
    setup_logging()
    migration_config = _load_config_or_exit(config)
    destination = _open_store_or_exit(destination_dir, migration_config)
    BackupLedger(destination).delete_backups(destination_tables(migration_config))
    typer.echo(f"✓ Deleted backups in {destination_dir}")


@app.command()
def plan(
    config: Optional[Path] = typer.Option(None, "--config", help="Migration config JSON"),
):
    """Print the destination tables in migration order with their merge keys."""
    migration_config = _load_config_or_exit(config)
    keys = {spec.name: spec.key_fields for spec in migration_config.join_tables}
    for position, table in enumerate(destination_tables(migration_config), 1):
        source_name = next(
            (name for name, target in migration_config.table_map.items() if target == table),
            table,
        )
        if source_name in keys:
            key = ", ".join(keys[source_name]) or "(straight copy)"
            typer.echo(f"{position}. {table} [{key}]")
        else:
            typer.echo(f"{position}. {table}")


if __name__ == "__main__":
    app()
