"""
GATE import command for Pathwise.

Turns a subject -> chapter -> lecture-count JSON file into a study plan.
"""

import json
from pathlib import Path

import click

from pathwise.exceptions import PathwiseError
from pathwise.importer import export_document, save_document_file, study_plan_from_lecture_counts


@click.command(name="import-gate")
@click.argument("counts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-n", "--name", required=True, help="Name of the new study plan.")
@click.option("--desc", "description", default=None, help="Description of the study plan.")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the study plan here instead of printing it.",
)
def import_gate(counts_file, name, description, output):
    """Builds a study plan from a lecture-count JSON file."""
    try:
        with open(counts_file, "r", encoding="utf-8") as f:
            counts = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {counts_file}: {e}")

    try:
        plan = study_plan_from_lecture_counts(counts, name, description)
        if output:
            save_document_file(output, plan)
    except PathwiseError as e:
        raise click.ClickException(str(e))

    if output:
        lectures = sum(len(chapter.lectures) for subject in plan.subjects for chapter in subject.chapters)
        click.echo(f"✓ Created study plan '{plan.name}' with {len(plan.subjects)} subject(s) and {lectures} lecture(s)")
    else:
        click.echo(json.dumps(export_document(plan), indent=2))
