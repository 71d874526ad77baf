"""
msgcatalog UI Module - Rich rendering of catalogs, plural rules and preferences.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from msgcatalog.catalog.decoders import MessageRecord
from msgcatalog.catalog.plural import PluralRule
from msgcatalog.catalog.translator import Translator

console = Console()

BADGE = "[bold white on dark_cyan] MC [/bold white on dark_cyan]"
PANEL_WIDTH = 70
PLURAL_SEPARATOR = " | "


# ============================================================================
# NOTICES
# ============================================================================


def _notice(mark: str, message: str, details: str, details_style: str) -> None:
    console.print(f"{BADGE} {mark} {escape(message)}")
    if details:
        console.print(f"    [{details_style}]{escape(details)}[/{details_style}]")


def success(message: str, details: str = ""):
    _notice("[green]✓[/green]", message, details, "dim")


def error(message: str, details: str = ""):
    _notice("[red]✗[/red]", message, details, "red")


def warning(message: str, details: str = ""):
    _notice("[yellow]⚠[/yellow]", message, details, "dim")


def info(message: str):
    console.print(escape(message))


# ============================================================================
# PANELS
# ============================================================================


def _fields_panel(title: str, fields: Mapping[str, object]) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Field", style="dim", no_wrap=True)
    table.add_column("Value", style="white")
    for name, value in fields.items():
        table.add_row(f"{name}:", escape(str(value)))
    return Panel(
        table,
        title=f"[bold]{title}[/bold]",
        border_style="cyan",
        padding=(1, 2),
        expand=False,
        width=PANEL_WIDTH,
    )


def catalog_summary(translator: Translator, source: str) -> dict[str, str]:
    """Describe a loaded catalog: language, plural rule and message counts."""
    records = translator.messages.values()
    rule = translator.plural_rule
    return {
        "Source": source,
        "Language": translator.language or "??",
        "Plural-Forms": rule.header,
        "Rule shape": rule.shape.name,
        "Messages": str(len(records)),
        "Plural messages": str(sum(1 for record in records if record.msgid_plural)),
        "Contexts": str(len({record.context for record in records if record.context})),
        "Plural overflows": str(translator.plural_overflows),
    }


def show_catalog(translator: Translator, source: str):
    console.print(_fields_panel("CATALOG", catalog_summary(translator, source)))


def show_preferences(
    language_info: Mapping[str, str],
    localedir: str,
    domain: str,
    locale_env: Mapping[str, str | None] | None = None,
):
    """Show the effective language, where it came from and the catalog search settings."""
    fields = {
        "Language": language_info["language"],
        "Source": language_info["source"],
        "Plural-Forms": language_info["plural_forms"],
        "Locale dir": localedir,
        "Domain": domain,
    }
    for var, value in (locale_env or {}).items():
        fields[var] = value or "-"
    console.print(_fields_panel("LANGUAGE", fields))


# ============================================================================
# TABLES
# ============================================================================


def message_row(record: MessageRecord) -> tuple[str, str, str]:
    """
    Format a record as (context, source, translation) cells.

    Plural records show both source strings and every plural form, e.g.
    ``("", "file / files", "archivo | archivos")``.
    """
    if record.msgid_plural:
        return (
            record.context,
            f"{record.msgid} / {record.msgid_plural}",
            PLURAL_SEPARATOR.join(record.msgstr_plural),
        )
    return record.context, record.msgid, record.msgstr


def show_messages(records: Iterable[MessageRecord], total: int):
    table = Table(title=f"{total} messages", border_style="dim", title_style="bold", padding=(0, 1))
    table.add_column("Context", style="dim")
    table.add_column("Message", style="cyan")
    table.add_column("Translation", style="green")
    for record in records:
        table.add_row(*(escape(cell) for cell in message_row(record)))

    console.print()
    console.print(table)
    console.print()


def show_plural_forms(rule: PluralRule, counts: Iterable[int]):
    """Print a rule's header and the form it selects for each count."""
    console.print()
    console.print(f"[bold cyan]━━━ {escape(rule.header)} ━━━[/bold cyan]")

    table = Table(
        title=f"{rule.shape.name} rule", border_style="dim", title_style="bold", padding=(0, 1)
    )
    table.add_column("n", justify="right", style="cyan")
    table.add_column("form", justify="right", style="green")
    for count in counts:
        table.add_row(str(count), str(rule(count)))

    console.print()
    console.print(table)
    console.print()
