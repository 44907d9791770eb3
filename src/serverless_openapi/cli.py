"""CLI entry point for serverless-openapi."""

import logging
from pathlib import Path

import click

from serverless_openapi.errors import GenerationError
from serverless_openapi.generator.document import generate_document
from serverless_openapi.output import OUTPUT_FORMATS, default_output_path, render_document
from serverless_openapi.parser.serverless import load_service_config, parse_service


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every generation step.")
def main(verbose: bool):
    """Serverless OpenAPI — generate OpenAPI v3 documentation from serverless.yml."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("-c", "--config", "config_path", default="serverless.yml", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Service configuration file.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Output file location [default: openapi.yml|json].")
@click.option("-f", "--format", "fmt", default="yaml", type=click.Choice(OUTPUT_FORMATS, case_sensitive=False), help="OpenAPI file format.")
@click.option("-i", "--indent", default=2, type=click.IntRange(min=1), help="File indentation in spaces.")
def generate(config_path: Path, output: Path | None, fmt: str, indent: int):
    """Generate OpenAPI v3 documentation."""
    fmt = fmt.lower()
    output = output or Path(default_output_path(fmt))
    click.echo(f'[OPTIONS] format: "{fmt}", output file: "{output}", indentation: "{indent}"')

    try:
        metadata, declarations = parse_service(load_service_config(config_path))
        click.echo(f"Found {len(declarations)} endpoints.")
        result = generate_document(metadata, declarations)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    for warning in result.warnings:
        click.echo(f"[WARNING] {warning}", err=True)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_document(result.document, fmt, indent), encoding="utf-8")
    click.echo(f'[SUCCESS] Output file to "{output}"')
