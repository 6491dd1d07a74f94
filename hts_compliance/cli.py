"""
Command line front end for the compliance desk.

Usage:
    # Run the HTTP gateway
    hts-compliance serve --port 3001

    # Reference material
    hts-compliance context set-file annex_i.pdf
    hts-compliance context set-text "7317.00.30 Steel nails ..." --name "Annex I excerpt"
    hts-compliance context show
    hts-compliance context clear

    # Manual override rules
    hts-compliance entries add --code 9903.81.91 --category "Steel Derivative" \
        --description "matches Annex I" --metal-type Steel
    hts-compliance entries list

    # Searches (several codes share one rolling history)
    hts-compliance search 7614.10 7317.00.30
    hts-compliance search 7317.00.30 --mode lookup
    hts-compliance headings
"""

import base64
import logging
import mimetypes
import sys
from pathlib import Path

import click

from hts_compliance.errors import (
    EntryValidationError,
    GatewayError,
    PersistenceError,
    SystemUninitializedError,
)
from hts_compliance.schemas import DocumentContext


def _make_app(with_gateway: bool = False):
    from hts_compliance.web import create_app

    try:
        return create_app(enable_gateway=with_gateway)
    except ValueError as e:
        # Missing GEMINI_API_KEY surfaces here when the provider is built
        _fail(f"Cannot start the classification gateway: {e}")


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def cli(verbose: bool):
    """HTS compliance desk."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', '-p', default=3001, type=int, help='Port (default: 3001)')
def serve(host: str, port: int):
    """Run the classification gateway and record API."""
    app = _make_app(with_gateway=True)
    app.run(host=host, port=port)


# ─────────────────────────────────────────────────────────────────────────────
# Document context
# ─────────────────────────────────────────────────────────────────────────────

@cli.group()
def context():
    """Manage the reference document."""


@context.command('show')
def context_show():
    from hts_compliance.services.record_store import RecordStore

    with _make_app().app_context():
        current = RecordStore().get_context()
    if current is None:
        click.echo("System context is uninitialized.")
        return
    size = len(current.content_bytes()) if current.is_file else len(current.content)
    click.echo(f"{current.name} [{current.kind}{', ' + current.mime_type if current.mime_type else ''}] {size} bytes")


@context.command('set-text')
@click.argument('text')
@click.option('--name', default='Pasted Text Content', help='Label for the source')
def context_set_text(text: str, name: str):
    if not text.strip():
        raise click.BadParameter("text must not be blank", param_hint="TEXT")
    _store_context(DocumentContext(kind="text", content=text, name=name))


@context.command('set-file')
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--mime-type', default=None, help='Override the guessed MIME type')
def context_set_file(path: Path, mime_type: str):
    mime_type = mime_type or mimetypes.guess_type(path.name)[0] or "application/pdf"
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    _store_context(DocumentContext(kind="file", content=payload, mime_type=mime_type, name=path.name))


@context.command('clear')
def context_clear():
    _store_context(None)


def _store_context(value):
    from hts_compliance.services.record_store import RecordStore

    with _make_app().app_context():
        try:
            RecordStore().set_context(value)
        except PersistenceError as e:
            _fail(str(e))
    click.echo("Context cleared." if value is None else f"Context set: {value.name}")


# ─────────────────────────────────────────────────────────────────────────────
# Manual entries
# ─────────────────────────────────────────────────────────────────────────────

@cli.group()
def entries():
    """Manage manual override rules."""


@entries.command('list')
def entries_list():
    from hts_compliance.services.record_store import RecordStore

    with _make_app().app_context():
        rows = RecordStore().list_entries()
    if not rows:
        click.echo("No manual entries.")
        return
    for entry in rows:
        click.echo(f"{entry.id}  {entry.code:<22} {entry.metal_type.value:<9} {entry.category}: {entry.description}")


@entries.command('add')
@click.option('--code', required=True)
@click.option('--category', required=True)
@click.option('--description', required=True)
@click.option('--metal-type', default='Aluminum', type=click.Choice(['Aluminum', 'Steel', 'Both']))
def entries_add(code, category, description, metal_type):
    _save_entry({"code": code, "category": category, "description": description, "metalType": metal_type})


@entries.command('update')
@click.argument('entry_id')
@click.option('--code')
@click.option('--category')
@click.option('--description')
@click.option('--metal-type', type=click.Choice(['Aluminum', 'Steel', 'Both']))
def entries_update(entry_id, code, category, description, metal_type):
    from hts_compliance.services.record_store import RecordStore

    with _make_app().app_context():
        existing = RecordStore().get_entry(entry_id)
    if existing is None:
        _fail(f"No manual entry with id {entry_id}")

    data = existing.as_dict()
    for key, value in (("code", code), ("category", category),
                       ("description", description), ("metalType", metal_type)):
        if value is not None:
            data[key] = value
    _save_entry(data, entry_id=entry_id)


@entries.command('delete')
@click.argument('entry_id')
def entries_delete(entry_id):
    from hts_compliance.services.record_store import RecordStore

    with _make_app().app_context():
        try:
            deleted = RecordStore().delete_entry(entry_id)
        except PersistenceError as e:
            _fail(str(e))
    if not deleted:
        _fail(f"No manual entry with id {entry_id}")
    click.echo(f"Deleted {entry_id}")


def _save_entry(data, entry_id=None):
    from hts_compliance.services.entry_validator import build_entry
    from hts_compliance.services.record_store import RecordStore

    try:
        entry = build_entry(data, entry_id=entry_id)
    except EntryValidationError as e:
        for field_name, message in e.fields.items():
            click.echo(f"  {field_name}: {message}", err=True)
        _fail("Manual entry rejected")

    with _make_app().app_context():
        try:
            RecordStore().save_entry(entry)
        except PersistenceError as e:
            _fail(str(e))
    click.echo(f"Saved {entry.id} ({entry.code})")


# ─────────────────────────────────────────────────────────────────────────────
# Searches
# ─────────────────────────────────────────────────────────────────────────────

@cli.command()
@click.argument('codes', nargs=-1, required=True)
@click.option('--mode', '-m', default='compliance', type=click.Choice(['compliance', 'lookup']),
              help='compliance (default) checks derivative lists; lookup returns provision details')
def search(codes, mode):
    """Check one or more HTS codes."""
    from hts_compliance.services.record_store import RecordStore
    from hts_compliance.services.search_session import SearchSession

    app = _make_app(with_gateway=True)
    with app.app_context():
        session = SearchSession(app.extensions["classification_gateway"], RecordStore())
        if not session.is_ready():
            _fail(str(SystemUninitializedError()))

        for code in codes:
            try:
                outcome = session.search(code, mode=mode)
            except EntryValidationError as e:
                click.echo(f"{code}: {e}", err=True)
                continue
            except (GatewayError, ValueError) as e:
                click.echo(f"Analysis failed for {code}: {e}", err=True)
                click.echo("Re-attempt the classification by running the command again.", err=True)
                continue
            if outcome.accepted:
                _print_report(outcome.report)

        if mode == 'compliance' and len(session.history):
            click.echo("\nRecent searches:")
            for item in session.history.entries():
                click.echo(f"  {item.code:<16} {'SUBJECT' if item.found else 'not subject'}")


@cli.command()
def headings():
    """List 4-digit headings found in the reference document."""
    from hts_compliance.services.record_store import RecordStore
    from hts_compliance.services.search_session import SearchSession

    app = _make_app(with_gateway=True)
    with app.app_context():
        session = SearchSession(app.extensions["classification_gateway"], RecordStore())
        try:
            outcome = session.extract_headings()
        except SystemUninitializedError:
            _fail("Headings extraction needs a reference document. Run 'context set-file' first.")
        except (GatewayError, ValueError) as e:
            _fail(f"Heading extraction failed: {e}")

    for item in outcome.report.headings:
        click.echo(f"{item.heading or '????'}  {item.description or ''}")


def _print_report(report):
    from hts_compliance.services.result_presenter import ComplianceReport, ProvisionReport

    if isinstance(report, ComplianceReport):
        click.echo(report.headline)
        if not report.found:
            click.echo(f"  {report.reasoning}")
            return
        for match in report.matches:
            click.echo(f"  - {match.derivativeCategory} [{match.metalType}, {match.confidence} confidence]")
            click.echo(f"    {match.matchDetail}")
            click.echo(f"    \"{match.sourceSnippet}\"")
        click.echo(f"  {report.reasoning}")
    elif isinstance(report, ProvisionReport):
        click.echo(f"{report.code}:")
        for key, value in report.details.items():
            click.echo(f"  {key}: {value}")


def _fail(message: str):
    click.echo(message, err=True)
    sys.exit(1)


if __name__ == '__main__':
    cli()
