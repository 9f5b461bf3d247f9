import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from .config.settings import Config, ConfigurationError
from .config_loader import load_export_settings, load_ruleset
from .document_store import JsonDocumentStore
from .domain.models import ExportJob
from .pipeline.export import DocumentExporter
from .storage import LocalStorage
from .utils import setup_logging

app = typer.Typer(help="Artist dictionary export: admission -> reconciliation -> enrichment -> descriptor")


def parse_folders(entries: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated KEY=PATH options into a folder mapping."""
    folders = {}
    for entry in entries or []:
        key, sep, path = entry.partition("=")
        if not sep or not key.strip() or not path.strip():
            raise typer.BadParameter(f"Folder must be given as KEY=PATH: {entry}")
        folders[key.strip()] = path.strip()
    return folders


@app.command("export")
def export_command(
    document: Annotated[str, typer.Argument(help="Document identifier (folder name under the metadata folder) or path to a JSON descriptor")],
    config: Annotated[str, typer.Option("--config", "-c", help="Path to the export YAML configuration")],
    destination: Annotated[str, typer.Option("--destination", "-d", help="Folder the exported descriptor is written to")],
    media_folder: Annotated[Optional[str], typer.Option("--media-folder", help="Media folder used for pagination rebuild and original files")] = None,
    image_folder: Annotated[Optional[str], typer.Option("--image-folder", help="Image folder the pages are reconciled against")] = None,
    ruleset: Annotated[Optional[str], typer.Option("--ruleset", "-r", help="Ruleset YAML (defaults to LUXEXPORT_RULESET)")] = None,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Process title (defaults to the document identifier)")] = None,
    process_id: Annotated[Optional[str], typer.Option("--process-id", help="Process identifier used in generated metadata")] = None,
    folder: Annotated[Optional[list[str]], typer.Option("--folder", help="Named job folder for file groups, KEY=PATH (repeatable)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
    log_to_file: Annotated[bool, typer.Option("--log-to-file", help="Create timestamped log files")] = False,
):
    """
    Export one document.

    Problems collected during the export are printed; the command exits with
    status 1 when the export failed.

    Examples:
        luxexport export 1234 -c export.yml -d out/
        luxexport export 1234 -c export.yml -d out/ --image-folder images/1234 --verbose
    """
    job_title = title or Path(document).stem
    setup_logging(verbose, job_title, log_to_file)

    try:
        env = Config()
        ruleset_path = ruleset or env.storage.ruleset_path
        if not ruleset_path:
            raise ConfigurationError("No ruleset configured. Use --ruleset or set LUXEXPORT_RULESET.")
        settings = load_export_settings(config)
        rules = load_ruleset(ruleset_path)
        vocabulary_client = env.create_vocabulary_client() if env.vocabulary.api_url else None
    except ConfigurationError as e:
        typer.echo(f"ERROR loading configuration: {e}", err=True)
        raise typer.Exit(1) from e

    if vocabulary_client is None and settings.vocabulary_configs:
        logging.warning("Vocabulary rules are configured but LUXEXPORT_VOCABULARY_API_URL is not set")

    store = JsonDocumentStore(env.storage.metadata_folder, rules)
    job = ExportJob(
        identifier=document,
        title=job_title,
        process_id=process_id,
        destination=destination,
        media_folder=media_folder,
        image_folder=image_folder,
        folders=parse_folders(folder),
    )

    exporter = DocumentExporter(settings, store, LocalStorage(), vocabulary_client)
    try:
        result = exporter.export(job)
    finally:
        if vocabulary_client is not None:
            vocabulary_client.close()

    for problem in result.problems:
        typer.echo(f"PROBLEM: {problem}", err=True)

    if not result.success:
        raise typer.Exit(1)
    if result.skipped:
        typer.echo(f"Skipped: {document} is not published")
    else:
        typer.echo(f"Exported to: {result.output_path}")


@app.command("check-config")
def check_config(
    config: Annotated[str, typer.Option("--config", "-c", help="Path to the export YAML configuration")],
):
    """Validate an export configuration and print the rules it defines."""
    try:
        settings = load_export_settings(config)
    except ConfigurationError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo("Export configuration")
    typer.echo("=" * 50)
    typer.echo(f"cleanupPagination: {settings.cleanup_pagination}")
    typer.echo(f"exportUnpublishedRecords: {settings.export_unpublished_records}")
    typer.echo(f"addEventLocationFromAgent: {settings.add_event_location_from_agent}")
    typer.echo(f"vocabularyBaseUrl: {settings.vocabulary_base_url or '-'}")

    typer.echo(f"\nMetadata rules ({len(settings.metadata_rules)}):")
    for rule in settings.metadata_rules:
        force = " (force)" if rule.force_creation else ""
        typer.echo(f"* {rule.metadata_type}{force}: {rule.rule_expression}")

    typer.echo(f"\nVocabulary rules ({len(settings.vocabulary_configs)}):")
    for vocab in settings.vocabulary_configs:
        typer.echo(f"* {vocab.group_type} -> vocabulary {vocab.vocabulary_id} via {vocab.identifier_metadata_type}")
        for enrichment in vocab.enrichments:
            typer.echo(f"   {enrichment.vocabulary_field_label} -> {enrichment.target_metadata_type}")

    typer.echo(f"\nFile groups ({len(settings.file_groups)}):")
    for group in settings.file_groups:
        typer.echo(f"* {group.name}: {group.path or '-'}")


@app.command("version")
def version():
    """Display version information."""
    from . import __version__
    typer.echo(f"luxexport version: {__version__}")


if __name__ == "__main__":
    app()
