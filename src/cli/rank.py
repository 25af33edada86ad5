"""CLI commands for the cluster ranker."""

import json
import logging
import sys
import uuid
from pathlib import Path

import click
import structlog
from pydantic import TypeAdapter, ValidationError

from src.config.constants import COMPONENT_CLI
from src.config.loader import ConfigLoader, ConfigValidationError
from src.observability.logging import bind_run_context, configure_logging
from src.ranker import Document, RankerError, rank_clusters_pure
from src.settings import get_settings


logger = structlog.get_logger()

_SNAPSHOT_ADAPTER = TypeAdapter(list[list[Document]])


def _setup_logging(run_id: str, json_logs: bool, verbose: bool) -> None:
    """Configure logging and bind the run context.

    Args:
        run_id: Unique run identifier.
        json_logs: Whether to emit JSON logs.
        verbose: Whether to enable debug logging.
    """
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level_number()
    configure_logging(level=level, json_format=json_logs)
    bind_run_context(run_id)


def _report_config_errors(loader: ConfigLoader) -> None:
    click.echo("Configuration validation failed:", err=True)
    for error in loader.validation_errors:
        click.echo(f"  - {error['loc']}: {error['msg']} ({error['type']})", err=True)


def load_snapshot(path: Path) -> list[list[Document]]:
    """Load a clustered documents snapshot.

    The snapshot is a JSON list of clusters, each a list of document
    objects with fetch_time, category, url and title keys.

    Args:
        path: Path to the snapshot JSON file.

    Returns:
        Clusters of validated documents.

    Raises:
        ValidationError: If the snapshot does not match the document schema.
    """
    return _SNAPSHOT_ADAPTER.validate_json(path.read_bytes())


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """News cluster ranker CLI."""


@cli.command()
@click.option(
    "--clusters",
    "clusters_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the clustered documents JSON snapshot.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to ranking.yaml (default: RANKER_CONFIG_PATH or built-in).",
)
@click.option(
    "--agency-rating",
    "agency_rating_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to the agency rating YAML/JSON (default: AGENCY_RATING_PATH).",
)
@click.option(
    "--now",
    "reference_timestamp",
    type=click.IntRange(min=0),
    default=None,
    help="Reference timestamp in seconds; estimated from documents if omitted.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write ranked JSON here instead of stdout.",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Log format (default: JSON_LOGS setting).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def rank(  # noqa: PLR0913
    clusters_path: Path,
    config_path: Path | None,
    agency_rating_path: Path | None,
    reference_timestamp: int | None,
    output_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Rank clusters and print per-category ordered threads as JSON."""
    settings = get_settings()
    run_id = str(uuid.uuid4())
    _setup_logging(
        run_id,
        json_logs=settings.json_logs if json_logs is None else json_logs,
        verbose=verbose,
    )
    log = logger.bind(run_id=run_id, component=COMPONENT_CLI, command="rank")

    loader = ConfigLoader(run_id=run_id)
    try:
        ranking_config = loader.load_ranking(
            config_path or settings.ranker_config_path
        )
        agency_rating = loader.load_agency_rating(
            agency_rating_path or settings.agency_rating_path
        )
    except (ConfigValidationError, FileNotFoundError) as e:
        log.error("rank_config_failed", error=str(e))
        _report_config_errors(loader)
        sys.exit(1)

    try:
        clusters = load_snapshot(clusters_path)
    except ValidationError as e:
        log.error("rank_snapshot_invalid", error_count=e.error_count())
        click.echo(f"Invalid clusters snapshot {clusters_path}:", err=True)
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            click.echo(f"  - {loc}: {err['msg']}", err=True)
        sys.exit(1)

    try:
        result = rank_clusters_pure(
            clusters,
            agency_rating,
            reference_timestamp=reference_timestamp,
            ranking_config=ranking_config,
            run_id=run_id,
        )
    except RankerError as e:
        log.error("rank_failed", error=str(e))
        click.echo(f"Ranking failed: {e}", err=True)
        sys.exit(1)

    payload = json.dumps(result.output.to_json_dict(), ensure_ascii=False, indent=2)
    if output_path is None:
        click.echo(payload)
    else:
        output_path.write_text(payload + "\n", encoding="utf-8")

    log.info(
        "rank_complete",
        clusters_in=result.clusters_in,
        reference_timestamp=result.reference_timestamp,
        output_checksum=result.output_checksum,
        config_checksums=loader.file_checksums,
    )


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to ranking.yaml.",
)
@click.option(
    "--agency-rating",
    "agency_rating_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to the agency rating YAML/JSON.",
)
def validate(config_path: Path | None, agency_rating_path: Path | None) -> None:
    """Validate ranking configuration files without ranking."""
    run_id = str(uuid.uuid4())
    configure_logging(json_format=False)
    bind_run_context(run_id)

    loader = ConfigLoader(run_id=run_id)
    try:
        ranking_config = loader.load_ranking(config_path)
        agency_rating = loader.load_agency_rating(agency_rating_path)
    except (ConfigValidationError, FileNotFoundError):
        _report_config_errors(loader)
        sys.exit(1)

    click.echo("Configuration is valid!")
    click.echo(f"  Reference percentile: {ranking_config.reference_percentile}")
    click.echo(f"  Rated agencies: {len(agency_rating)}")


if __name__ == "__main__":
    cli()
