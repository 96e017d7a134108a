"""
Recompute command for Pathwise.

Normalises a document file so every progress and status value is
consistent with its children.
"""

from pathlib import Path
from typing import List

import click

from pathwise.exceptions import PathwiseError
from pathwise.importer import export_document, import_document, read_document_file, save_document_file
from pathwise.managers.events import Event, EventBus, EventListener, EventType
from pathwise.managers.recompute_engine import RecomputeEngine


class ChangeCounter(EventListener):
    """Collects how many nodes a full recompute pass changed."""

    def __init__(self) -> None:
        self.changed = 0

    @property
    def subscribed_events(self) -> List[EventType]:
        return [EventType.TREE_RECOMPUTED]

    def handle(self, event: Event) -> None:
        self.changed += event.data.get("changed", 0)


@click.command(name="recompute")
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result here instead of overwriting the input file.",
)
@click.option(
    "--check",
    is_flag=True,
    help="Don't write anything; exit with status 1 if the file is out of date.",
)
def recompute(document_file, output, check):
    """Recalculates progress and status for every node in a document."""
    bus = EventBus()
    counter = ChangeCounter()
    bus.subscribe(counter)
    engine = RecomputeEngine(event_bus=bus)

    try:
        raw = read_document_file(document_file)
        document = import_document(raw, engine=engine)
    except PathwiseError as e:
        raise click.ClickException(str(e))

    if check:
        if counter.changed or export_document(document) != raw:
            click.echo(
                f"{document_file}: out of date ({counter.changed} node(s) recomputed).", err=True
            )
            click.get_current_context().exit(1)
        click.echo(f"{document_file}: up to date.")
        return

    target = output or document_file
    try:
        save_document_file(target, document)
    except PathwiseError as e:
        raise click.ClickException(str(e))
    click.echo(f"✓ {document.name}: {counter.changed} node(s) updated, written to {target}")
