#!/usr/bin/env python3
"""
Label PR Desk Terminal CLI
Command-line interface for contacts, tracks, release plans, links and AI tools.
"""

import functools
import logging
from datetime import date
from typing import Optional

import click

from labelpr.db.storage import StorageError
from labelpr.engine import records
from labelpr.models import (
    CONTACT_CATEGORIES, GENRES, LINK_COLORS, LINK_ICONS, PARTITIONS, PLAN_STATUSES,
    PLAN_STATUS_LABELS, TRACK_STATUSES, TRACK_STATUS_LABELS, category_label,
)
from labelpr.logging_config import configure_logging, log_call

AI_MODEL_CHOICES = ['gemini-flash', 'claude', 'deepseek-chat']

CONFIRM_TEXT = "Вы уверены?"


@log_call
def _prompt_date(label: str, default: Optional[date] = None) -> Optional[str]:
    """Prompt for a date, re-prompting on bad format. Returns ISO string or None if left blank."""
    logger = logging.getLogger("labelpr")
    default_str = str(default) if default else ""
    while True:
        raw = click.prompt(label, default=default_str, show_default=bool(default_str)) or ""
        if not raw:
            return None
        try:
            return date.fromisoformat(raw).isoformat()
        except ValueError:
            logger.debug(f"_prompt_date | rejected input={raw!r}")
            click.echo("  Invalid format — please use YYYY-MM-DD.", err=True)


def _optional(label: str) -> str:
    return click.prompt(label, default="", show_default=False)


def _confirm_delete(yes: bool) -> bool:
    if yes:
        return True
    return click.confirm(CONFIRM_TEXT, default=False)


def _collect(**options) -> dict:
    """Drop options the user did not pass."""
    return {k: v for k, v in options.items() if v is not None}


def _reports_save_errors(func):
    """Turn a failed store write into an error message instead of a traceback."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StorageError as e:
            logging.getLogger("labelpr").warning(f"{func.__name__} | store not saved: {e}")
            click.echo(f"Error: {e}", err=True)
            click.echo("Nothing was changed.", err=True)

    return wrapper


@click.group()
def cli():
    """Label PR Desk - contacts, releases and pitching for a music label"""
    configure_logging()


# =============================================================================
# CONTACTS COMMANDS
# =============================================================================

@cli.group()
def contacts():
    """Manage PR contacts, label artists and platform curators"""
    pass


@contacts.command('list')
@click.option('--partition', type=click.Choice(PARTITIONS),
              help='Only one list: contacts, label_artists or platform_contacts')
@click.option('--category', type=click.Choice(CONTACT_CATEGORIES), help='Filter by category')
@click.option('--search', help='Name contains (case-insensitive)')
@log_call
def contacts_list(partition, category, search):
    """List contacts"""
    results = records.search_contacts(partition=partition, search=search, category=category)

    if not results:
        click.echo("No contacts found.")
        return

    click.echo(f"\nFound {len(results)} contacts:\n")
    click.echo(f"{'ID':<28} {'Name':<24} {'Category':<15} {'Platform':<14} {'Reach':<12}")
    click.echo("-" * 96)

    for c in results:
        click.echo(
            f"{c.id[:26]:<28} {c.name[:22]:<24} {category_label(c.category)[:13]:<15} "
            f"{(c.platform or '')[:12]:<14} {(c.reach or '')[:12]:<12}"
        )


@contacts.command('show')
@click.argument('contact_id')
@log_call
def contacts_show(contact_id):
    """Show full contact details"""
    logger = logging.getLogger("labelpr")
    contact = records.get_contact(contact_id)

    if not contact:
        logger.warning(f"contacts_show | contact_id={contact_id} not found")
        click.echo(f"Contact {contact_id} not found.", err=True)
        return

    click.echo(f"\n{'='*80}")
    click.echo(f"CONTACT {contact.id}: {contact.name}")
    click.echo(f"{'='*80}")
    click.echo(f"Category:    {category_label(contact.category)} ({contact.category})")
    click.echo(f"Platform:    {contact.platform or '(not set)'}")
    click.echo(f"Handle:      {contact.handle or '(not set)'}")
    click.echo(f"Reach:       {contact.reach or '(not set)'}")
    click.echo(f"URL:         {contact.contact_url or '(not set)'}")
    click.echo(f"Tags:        {', '.join(contact.tags) if contact.tags else '(none)'}")
    if contact.pitching_url:
        click.echo(f"Pitching:    {contact.pitching_url}")

    if contact.notes:
        click.echo(f"\nNotes:\n{contact.notes}")

    click.echo()


@contacts.command('add')
@log_call
@_reports_save_errors
def contacts_add():
    """Add a new contact (interactive)"""
    click.echo("\n=== ADD NEW CONTACT ===\n")

    fields = {
        'name': _optional("Name / alias"),
        'category': click.prompt(
            "Category", type=click.Choice(CONTACT_CATEGORIES), default="Blogger"
        ),
        'platform': click.prompt("Platform (IG / TG / TikTok)", default="Instagram"),
        'contact_url': _optional("Handle or link"),
        'reach': _optional("Approximate reach (e.g. 500k)"),
        'notes': _optional("Notes"),
        'tags': _optional("Tags, comma separated"),
    }

    contact = records.create_contact(fields)
    click.echo(f"\n✓ Created contact {contact.id}: {contact.name} [{category_label(contact.category)}]")


@contacts.command('edit')
@click.argument('contact_id')
@click.option('--name', help='Update name')
@click.option('--category', type=click.Choice(CONTACT_CATEGORIES), help='Update category (moves between lists)')
@click.option('--platform', help='Update platform')
@click.option('--handle', help='Update handle')
@click.option('--reach', help='Update reach')
@click.option('--url', 'contact_url', help='Update contact URL')
@click.option('--notes', help='Update notes')
@click.option('--tags', help='Replace tags (comma separated)')
@click.option('--pitching-url', help='Update pitching portal URL')
@log_call
@_reports_save_errors
def contacts_edit(contact_id, name, category, platform, handle, reach, contact_url, notes, tags, pitching_url):
    """Edit a contact (use options to set fields)"""
    logger = logging.getLogger("labelpr")
    updates = _collect(
        name=name, category=category, platform=platform, handle=handle, reach=reach,
        contact_url=contact_url, notes=notes, tags=tags, pitching_url=pitching_url,
    )

    if not updates:
        click.echo("No updates specified. Use --name, --category, --platform, --notes, ...", err=True)
        return

    if records.update_contact(contact_id, updates):
        click.echo(f"✓ Updated contact {contact_id}")
    else:
        logger.warning(f"contacts_edit | contact_id={contact_id} not found")
        click.echo(f"Contact {contact_id} not found", err=True)


@contacts.command('delete')
@click.argument('contact_id')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@log_call
@_reports_save_errors
def contacts_delete(contact_id, yes):
    """Delete a contact"""
    if not _confirm_delete(yes):
        click.echo("Cancelled.")
        return
    if records.delete_contact(contact_id):
        click.echo(f"✓ Deleted contact {contact_id}")
    else:
        click.echo(f"Contact {contact_id} not found", err=True)


# =============================================================================
# TRACKS COMMANDS
# =============================================================================

@cli.group()
def tracks():
    """Manage the track catalogue"""
    pass


@tracks.command('list')
@click.option('--search', help='Title or artist contains')
@log_call
def tracks_list(search):
    """List tracks"""
    results = records.search_tracks(search=search)

    if not results:
        click.echo("No tracks found.")
        return

    click.echo(f"\nFound {len(results)} tracks:\n")
    click.echo(f"{'ID':<24} {'Title':<24} {'Artist':<18} {'ISRC':<18} {'Genre':<9} {'Release':<11} {'Status':<10}")
    click.echo("-" * 120)

    for t in results:
        click.echo(
            f"{t.id[:22]:<24} {t.title[:22]:<24} {t.artist_name[:16]:<18} "
            f"{(t.isrc or 'н/д')[:16]:<18} {(t.genre or 'Pop')[:8]:<9} "
            f"{(t.release_date or '')[:10]:<11} {TRACK_STATUS_LABELS.get(t.status, t.status):<10}"
        )


@tracks.command('add')
@log_call
@_reports_save_errors
def tracks_add():
    """Add a new track (interactive)"""
    click.echo("\n=== ADD NEW TRACK ===\n")

    fields = {
        'title': _optional("Single / album title"),
        'artist_name': _optional("Artist"),
        'genre': click.prompt("Genre", type=click.Choice(GENRES), default="Pop"),
        'status': click.prompt("Status", type=click.Choice(TRACK_STATUSES), default="In Progress"),
        'isrc': _optional("ISRC"),
        'release_date': _prompt_date("Release date (YYYY-MM-DD)", default=date.today()),
    }

    track = records.create_track(fields)
    click.echo(f"\n✓ Created track {track.id}: {track.title} — {track.artist_name}")


@tracks.command('edit')
@click.argument('track_id')
@click.option('--title', help='Update title')
@click.option('--artist', 'artist_name', help='Update artist')
@click.option('--status', type=click.Choice(TRACK_STATUSES), help='Update status')
@click.option('--release-date', help='Update release date (YYYY-MM-DD)')
@click.option('--isrc', help='Update ISRC')
@click.option('--upc', help='Update UPC')
@click.option('--genre', help='Update genre')
@click.option('--mood', help='Update mood')
@click.option('--asset-link', help='Link to WAV / Dropbox / Drive')
@log_call
@_reports_save_errors
def tracks_edit(track_id, title, artist_name, status, release_date, isrc, upc, genre, mood, asset_link):
    """Edit a track (use options to set fields)"""
    updates = _collect(
        title=title, artist_name=artist_name, status=status, release_date=release_date,
        isrc=isrc, upc=upc, genre=genre, mood=mood, asset_link=asset_link,
    )

    if not updates:
        click.echo("No updates specified. Use --title, --status, --isrc, ...", err=True)
        return

    if records.update_track(track_id, updates):
        click.echo(f"✓ Updated track {track_id}")
    else:
        logging.getLogger("labelpr").warning(f"tracks_edit | track_id={track_id} not found")
        click.echo(f"Track {track_id} not found", err=True)


@tracks.command('delete')
@click.argument('track_id')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@log_call
@_reports_save_errors
def tracks_delete(track_id, yes):
    """Delete a track"""
    if not _confirm_delete(yes):
        click.echo("Cancelled.")
        return
    if records.delete_track(track_id):
        click.echo(f"✓ Deleted track {track_id}")
    else:
        click.echo(f"Track {track_id} not found", err=True)


# =============================================================================
# RELEASE PLAN COMMANDS
# =============================================================================

@cli.group()
def plans():
    """Manage release campaigns and their checklists"""
    pass


@plans.command('list')
@click.option('--search', help='Title contains')
@log_call
def plans_list(search):
    """List release plans"""
    results = records.search_plans(search=search)

    if not results:
        click.echo("No release plans found.")
        return

    click.echo(f"\nFound {len(results)} release plans:\n")
    click.echo(f"{'ID':<24} {'Title':<26} {'Artist':<18} {'Date':<11} {'Status':<13} {'Done':>5}")
    click.echo("-" * 102)

    for p in results:
        click.echo(
            f"{p.id[:22]:<24} {p.title[:24]:<26} {p.artist[:16]:<18} {(p.date or '')[:10]:<11} "
            f"{PLAN_STATUS_LABELS.get(p.status, p.status):<13} {records.plan_progress(p):>4}%"
        )


@plans.command('show')
@click.argument('plan_id')
@log_call
def plans_show(plan_id):
    """Show a plan with its checklist"""
    plan = records.get_plan(plan_id)
    if not plan:
        click.echo(f"Release plan {plan_id} not found.", err=True)
        return

    click.echo(f"\n{'='*80}")
    click.echo(f"{plan.title} — {plan.artist}")
    click.echo(f"{'='*80}")
    click.echo(f"Date:     {plan.date}")
    click.echo(f"Status:   {PLAN_STATUS_LABELS.get(plan.status, plan.status)}")
    if plan.budget:
        click.echo(f"Budget:   {plan.budget}")
    click.echo(f"Progress: {records.plan_progress(plan)}%\n")

    if not plan.tasks:
        click.echo("No tasks yet.")
    for task in plan.tasks:
        mark = 'x' if task.completed else ' '
        click.echo(f"  [{mark}] {task.label}  (task {task.id})")
    click.echo()


@plans.command('add')
@log_call
@_reports_save_errors
def plans_add():
    """Add a new release plan (interactive)"""
    click.echo("\n=== ADD NEW RELEASE PLAN ===\n")

    fields = {
        'title': _optional("Campaign title"),
        'artist': _optional("Artist"),
        'status': click.prompt("Status", type=click.Choice(PLAN_STATUSES), default="Planning"),
        'date': _prompt_date("Release date (YYYY-MM-DD)", default=date.today()),
        'budget': _optional("Budget"),
    }

    plan = records.create_plan(fields)
    click.echo(f"\n✓ Created release plan {plan.id}: {plan.title} ({len(plan.tasks)} tasks)")


@plans.command('edit')
@click.argument('plan_id')
@click.option('--title', help='Update title')
@click.option('--artist', help='Update artist')
@click.option('--date', 'date_', help='Update date (YYYY-MM-DD)')
@click.option('--status', type=click.Choice(PLAN_STATUSES), help='Update status')
@click.option('--budget', help='Update budget')
@log_call
@_reports_save_errors
def plans_edit(plan_id, title, artist, date_, status, budget):
    """Edit a release plan (use options to set fields)"""
    updates = _collect(title=title, artist=artist, date=date_, status=status, budget=budget)

    if not updates:
        click.echo("No updates specified. Use --title, --artist, --date, --status or --budget", err=True)
        return

    if records.update_plan(plan_id, updates):
        click.echo(f"✓ Updated release plan {plan_id}")
    else:
        click.echo(f"Release plan {plan_id} not found", err=True)


@plans.command('delete')
@click.argument('plan_id')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@log_call
@_reports_save_errors
def plans_delete(plan_id, yes):
    """Delete a release plan"""
    if not _confirm_delete(yes):
        click.echo("Cancelled.")
        return
    if records.delete_plan(plan_id):
        click.echo(f"✓ Deleted release plan {plan_id}")
    else:
        click.echo(f"Release plan {plan_id} not found", err=True)


@plans.command('toggle')
@click.argument('plan_id')
@click.argument('task_id')
@log_call
@_reports_save_errors
def plans_toggle(plan_id, task_id):
    """Mark a checklist task done / not done"""
    state = records.toggle_task(plan_id, task_id)
    if state is None:
        click.echo(f"Task {task_id} in plan {plan_id} not found", err=True)
        return
    click.echo(f"✓ Task {task_id}: {'done' if state else 'open'}")


@plans.command('add-task')
@click.argument('plan_id')
@click.argument('label')
@log_call
@_reports_save_errors
def plans_add_task(plan_id, label):
    """Append a task to a plan's checklist"""
    try:
        task = records.add_task(plan_id, label)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return
    if task is None:
        click.echo(f"Release plan {plan_id} not found", err=True)
        return
    click.echo(f"✓ Added task {task.id}: {task.label}")


# =============================================================================
# LINKS & STATS
# =============================================================================

@cli.group()
def links():
    """Manage quick resource links"""
    pass


@links.command('list')
@log_call
def links_list():
    """List quick links"""
    results = records.list_links()
    if not results:
        click.echo("No links yet.")
        return
    for link in results:
        click.echo(f"{link.id[:22]:<24} {link.title[:28]:<30} {link.url}")


@links.command('add')
@click.option('--title', prompt='Link title', default='', show_default=False)
@click.option('--url', prompt='URL', default='', show_default=False)
@click.option('--icon', type=click.Choice(LINK_ICONS), default='fa-link', show_default=True)
@click.option('--color', type=click.Choice(LINK_COLORS), default='bg-indigo-500', show_default=True)
@log_call
@_reports_save_errors
def links_add(title, url, icon, color):
    """Add a quick link"""
    link = records.create_link({'title': title, 'url': url, 'icon': icon, 'color': color})
    click.echo(f"✓ Created link {link.id}: {link.title}")


@links.command('delete')
@click.argument('link_id')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@log_call
@_reports_save_errors
def links_delete(link_id, yes):
    """Delete a quick link"""
    if not _confirm_delete(yes):
        click.echo("Cancelled.")
        return
    if records.delete_link(link_id):
        click.echo(f"✓ Deleted link {link_id}")
    else:
        click.echo(f"Link {link_id} not found", err=True)


@cli.command('stats')
@log_call
def stats():
    """Show label metrics and store totals"""
    metrics = records.list_metrics()
    arrows = {'up': '↑', 'down': '↓', 'neutral': '→'}

    click.echo("\nMETRICS\n")
    if not metrics:
        click.echo("No metrics.")
    for m in metrics:
        click.echo(f"  {m.label[:28]:<30} {m.value:>8}  {arrows.get(m.trend, '→')} {m.trend_value}")

    store = records.load_store()
    click.echo("\nTOTALS\n")
    click.echo(f"  Contacts:          {len(store.contacts)}")
    click.echo(f"  Label artists:     {len(store.label_artists)}")
    click.echo(f"  Platform curators: {len(store.platform_contacts)}")
    click.echo(f"  Tracks:            {len(store.tracks)}")
    click.echo(f"  Release plans:     {len(store.release_plans)}")
    click.echo(f"  Links:             {len(store.links)}")
    click.echo()


# =============================================================================
# AI COMMANDS
# =============================================================================

@cli.command('pitch')
@click.argument('contact_id')
@click.option('--context', help='News hook for the pitch (release, premiere, tour)')
@click.option('--model', type=click.Choice(AI_MODEL_CHOICES),
              help='AI model to use (default: DEFAULT_AI_MODEL from .env)')
@click.option('--no-save', is_flag=True, help='Do not save the pitch to data/pitches')
@log_call
def pitch(contact_id, context, model, no_save):
    """Draft a PR pitch for a contact via AI"""
    try:
        from labelpr.engine import pitch as pitch_engine

        if not context:
            context = click.prompt("Describe the news hook", type=str)

        click.echo(f"\nDrafting pitch for contact {contact_id} [{model or 'default model'}]...\n")
        result = pitch_engine.generate_pitch(contact_id, context, model=model, save=not no_save)

        click.echo(f"{'='*80}")
        click.echo(f"TO: {result['contact_name']}")
        click.echo(f"{'='*80}\n")
        click.echo(result['text'])
        click.echo(f"\n{'='*80}")
        if result['pitch_path']:
            click.echo(f"✓ Pitch saved to: {result['pitch_path']}")
        elif not result['ok']:
            click.echo("Make sure GEMINI_API_KEY / ANTHROPIC_API_KEY / DEEPSEEK_API_KEY is set in .env", err=True)
        click.echo()

    except ValueError as e:
        logging.getLogger("labelpr").warning(f"pitch failed for contact {contact_id}: {e}")
        click.echo(f"Error: {e}", err=True)
    except Exception as e:
        logging.getLogger("labelpr").error(f"pitch unexpected error for contact {contact_id}: {e}", exc_info=True)
        click.echo(f"Unexpected error: {e}", err=True)


@cli.command('import')
@click.option('--file', 'file_path', type=click.Path(exists=True, dir_okay=False),
              help='Read free text from a file')
@click.option('--text', help='Free text to analyse')
@click.option('--model', type=click.Choice(AI_MODEL_CHOICES),
              help='AI model to use (default: DEFAULT_AI_MODEL from .env)')
@click.option('--skip-duplicates', is_flag=True, help='Skip contacts already in the same list')
@log_call
def smart_import_cmd(file_path, text, model, skip_duplicates):
    """Smart import: extract contacts, tracks, plans and links from free text"""
    try:
        from labelpr.engine import smart_import

        if file_path:
            with open(file_path, encoding='utf-8') as f:
                text = f.read()
        if not text or not text.strip():
            click.echo("Nothing to import. Pass --text or --file.", err=True)
            return

        click.echo(f"\nAnalysing text [{model or 'default model'}]...\n")
        counts = smart_import.smart_import(text, model=model, skip_duplicates=skip_duplicates)

        click.echo(f"Успешно импортировано {counts['total']} объектов!")
        click.echo(f"  Contacts:      {counts['contacts']}")
        click.echo(f"  Tracks:        {counts['tracks']}")
        click.echo(f"  Release plans: {counts['plans']}")
        click.echo(f"  Links:         {counts['links']}")
        if counts['skipped']:
            click.echo(f"  Skipped:       {counts['skipped']}")
        click.echo()

    except Exception as e:
        logging.getLogger("labelpr").error(f"import failed: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)


# =============================================================================
# EXPORT / RESTORE
# =============================================================================

@cli.command('export')
@click.argument('path', type=click.Path(dir_okay=False))
@log_call
def export_cmd(path):
    """Export the whole store to a JSON file"""
    from labelpr.engine import transfer

    try:
        counts = transfer.export_store(path)
    except OSError as e:
        logging.getLogger("labelpr").warning(f"export failed for {path}: {e}")
        click.echo(f"Error: cannot write {path}: {e}", err=True)
        return
    click.echo(f"✓ Exported {sum(counts.values())} records to {path}")


@cli.command('restore')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Skip confirmation')
@log_call
@_reports_save_errors
def restore_cmd(path, yes):
    """Replace the store with a JSON export"""
    from labelpr.engine import transfer

    if not yes and not click.confirm("This replaces all current data. Continue?", default=False):
        click.echo("Cancelled.")
        return
    try:
        counts = transfer.import_store(path)
    except ValueError as e:
        logging.getLogger("labelpr").warning(f"restore failed for {path}: {e}")
        click.echo(f"Error: {e}", err=True)
        return
    click.echo(f"✓ Restored {sum(counts.values())} records from {path}")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
