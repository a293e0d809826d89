"""Schema CLI commands: validate YAML type schema documents."""

from pathlib import Path

import click

from fieldcheck.config import CheckConfig
from fieldcheck.errors import SchemaError
from fieldcheck.metadata.loader import SchemaLoader
from fieldcheck.metadata.validator import validate_schema_dir, validate_schema_file


@click.group()
def schemas():
    """Schema document commands."""
    pass


@schemas.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Schema directory or single YAML file (default: FIELDCHECK_SCHEMA_PATH).",
)
@click.pass_obj
def validate(config: CheckConfig, strict: bool, target_path: Path | None):
    """Validate YAML schema documents and resolve their references."""
    target = target_path or config.schema_path

    # ── Document (JSON Schema) validation ───────────────────────────────────
    if target.is_file():
        issues = validate_schema_file(target)
    else:
        if not target.exists():
            click.echo(f"Error: Schema directory not found at {target}", err=True)
            raise SystemExit(1)
        issues = validate_schema_dir(target, strict=strict)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Reference resolution ────────────────────────────────────────────────
    # Only a whole directory can be resolved; single files may name types defined elsewhere
    if target.is_dir():
        loader = SchemaLoader(target)
        try:
            loader.load_all()
        except SchemaError as e:
            click.echo(click.style(f"\nSchema resolution failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        names = loader.list_schemas()
        click.echo(f"\nLoaded {len(names)} schema(s):")
        for name in sorted(names):
            schema = loader.get_schema(name)
            field_count = len(schema.fields) if schema else 0
            click.echo(f"  ✓ {name} ({field_count} fields)")

    click.echo(click.style("\nAll schemas are valid.", fg="green", bold=True))
