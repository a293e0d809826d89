"""Check CLI command: validate a JSON or YAML payload against a type schema."""

import json
from pathlib import Path
from typing import Any

import click
import yaml

from fieldcheck.config import CheckConfig
from fieldcheck.errors import SchemaError
from fieldcheck.metadata.loader import SchemaLoader
from fieldcheck.metadata.records import bind


def _load_payload(path: Path) -> Any:
    """Parse a payload file; .json files as JSON, everything else as YAML."""
    with path.open() as fh:
        if path.suffix == ".json":
            return json.load(fh)
        return yaml.safe_load(fh)


@click.command()
@click.argument("type_name", metavar="TYPE")
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--schemas",
    "schema_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Schema directory (default: FIELDCHECK_SCHEMA_PATH).",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def check(config: CheckConfig, type_name: str, payload: Path, schema_path: Path | None, as_json: bool):
    """Validate PAYLOAD as an instance of TYPE.

    Exits with status 1 when the payload is invalid.
    """
    try:
        registry = SchemaLoader(schema_path or config.schema_path).load_all()
    except SchemaError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(2)

    if not registry.is_registered(type_name):
        click.echo(f"Error: Unknown type '{type_name}'", err=True)
        raise SystemExit(2)

    try:
        data = _load_payload(payload)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        click.echo(f"Error: Cannot parse {payload}: {e}", err=True)
        raise SystemExit(2)

    record = bind(data, type_name, registry)
    result = config.create_validator(registry).validate(record)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.valid:
        click.echo(click.style("Valid.", fg="green"))
    else:
        click.echo(click.style(result.error_message, fg="red"))

    if not result.valid:
        raise SystemExit(1)
