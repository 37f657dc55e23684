import json
import sys
from pathlib import Path

import click
from marshmallow import ValidationError

import reprint
from reprint_changes import Change


def parse_change_arg(spec: str) -> Change:
    """Parse `START:END:TEXT`. TEXT is everything after the second colon."""
    parts = spec.split(":", 2)
    if len(parts) != 3:
        raise click.BadParameter(f"expected START:END:TEXT, got {spec!r}", param_hint="--change")
    start, end, text = parts
    try:
        return Change(int(start), int(end), text)
    except ValueError:
        raise click.BadParameter(
            f"offsets must be integers, got {start!r} and {end!r}", param_hint="--change"
        ) from None


def load_changes_json(path: Path) -> list[Change]:
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise click.BadParameter(f"{path}: {e}", param_hint="--changes-json") from e
    if not isinstance(raw, list):
        raise click.BadParameter(
            f"{path} must contain a JSON array of changes", param_hint="--changes-json"
        )
    try:
        return Change.schema().load(raw, many=True)
    except ValidationError as e:
        raise click.BadParameter(f"{path}: {e.messages}", param_hint="--changes-json") from e


@click.group()
def cli():
    pass


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--change",
    "change_specs",
    multiple=True,
    help="A change as START:END:TEXT (byte offsets into FILE). May be repeated.",
)
@click.option(
    "--changes-json",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='JSON array of {"start_byte", "end_byte", "text"} objects.',
)
@click.option("--quiet", is_flag=True, help="Do not print diagnostics.")
def apply(file, change_specs, changes_json, quiet):
    """Apply byte-range changes to FILE, keeping the previous content in FILE.bk."""
    changes = [parse_change_arg(spec) for spec in change_specs]
    if changes_json is not None:
        changes.extend(load_changes_json(changes_json))

    result = reprint.reprint(file, changes, quiet=quiet or None)
    if result.needs_manual_recovery:
        sys.exit(3)
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
