import argparse
import logging
import sys
from pathlib import Path

from msgcatalog import VERSION
from msgcatalog.catalog import (
    CatalogConfig,
    CatalogError,
    PluralRule,
    Translator,
    load_translator,
)
from msgcatalog.catalog.detector import get_os_locale_info
from msgcatalog.ui import (
    console,
    error,
    info,
    show_catalog,
    show_messages,
    show_plural_forms,
    show_preferences,
    success,
    warning,
)

logger = logging.getLogger(__name__)


class MsgCatalogCLI:
    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self._config: CatalogConfig | None = None

    @property
    def config(self) -> CatalogConfig:
        if self._config is None:
            self._config = CatalogConfig()
        return self._config

    def _load(self, args: argparse.Namespace) -> Translator:
        """Load the catalog named by --file, or the configured one for the language."""
        language = args.language or ""
        if args.file:
            translator = Translator.from_file(args.file, language=language)
        else:
            language = language or self.config.get_language()
            domain = args.domain or self.config.get_domain()
            localedir = self.config.get_localedir()
            translator = load_translator(localedir, domain, language)
            if not translator.messages:
                warning(f"No catalog for '{domain}' ({language}) in {localedir}")
        logger.debug(f"Loaded {translator!r}")
        return translator

    def lookup(self, args: argparse.Namespace) -> int:
        """Print the translation of one message."""
        translator = self._load(args)
        context = args.context or ""

        if args.plural or args.count is not None:
            count = 1 if args.count is None else args.count
            result = translator.pngettext(context, args.msgid, args.plural or "", count)
        else:
            result = translator.pgettext(context, args.msgid)

        print(result)
        if self.verbose and translator.plural_overflows:
            warning(
                "Plural rule selected a form missing from the catalog",
                details=f"{translator.plural_overflows} lookup(s) fell back to the last form",
            )
        return 0

    def info(self, args: argparse.Namespace) -> int:
        """Show catalog summary."""
        translator = self._load(args)
        show_catalog(translator, str(args.file or self.config.get_localedir()))
        return 0

    def dump(self, args: argparse.Namespace) -> int:
        """List catalog records."""
        translator = self._load(args)
        records = sorted(translator.messages.values(), key=lambda record: record.key)
        if args.limit:
            records = records[: args.limit]

        if not records:
            info("Catalog is empty")
            return 0

        show_messages(records, total=len(translator.messages))
        return 0

    def plural(self, args: argparse.Namespace) -> int:
        """Evaluate a plural rule for some counts."""
        if args.rule:
            rule = PluralRule.from_header(args.rule)
        else:
            rule = PluralRule.for_language(args.language)

        show_plural_forms(rule, args.counts)
        return 0

    def language(self, args: argparse.Namespace) -> int:
        """Show or change the language preference."""
        action = args.language_action or "show"

        if action == "set":
            self.config.set_language(args.code)
            success(f"Language set to {self.config.get_language()}")
            return 0

        if action == "clear":
            self.config.clear_language()
            success("Language preference cleared", details="Using auto-detection")
            return 0

        show_preferences(
            self.config.get_language_info(),
            localedir=str(self.config.get_localedir()),
            domain=self.config.get_domain(),
            locale_env=get_os_locale_info() if self.verbose else None,
        )
        return 0


def _add_catalog_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--file", "-f", type=Path, help="Catalog file (.mo, .po or .json)")
    parser.add_argument("--language", "-l", help="Language tag (required for JSON, used by catalogs without a Language header)")
    parser.add_argument("--domain", "-d", help="Text domain when searching the locale dir")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msgcatalog",
        description="Look up translations in gettext-style message catalogs",
    )
    parser.add_argument("--version", "-V", action="version", version=f"msgcatalog {VERSION}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show detailed output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    lookup_parser = subparsers.add_parser("lookup", help="Translate a message")
    lookup_parser.add_argument("msgid", help="Source-language message")
    lookup_parser.add_argument("--context", "-c", help="Message context")
    lookup_parser.add_argument("--plural", "-p", help="Source-language plural message")
    lookup_parser.add_argument("--count", "-n", type=int, help="Count selecting the plural form")
    _add_catalog_arguments(lookup_parser)

    info_parser = subparsers.add_parser("info", help="Show catalog summary")
    _add_catalog_arguments(info_parser)

    dump_parser = subparsers.add_parser("dump", help="List catalog messages")
    dump_parser.add_argument("--limit", type=int, default=0, help="Maximum rows to show")
    _add_catalog_arguments(dump_parser)

    plural_parser = subparsers.add_parser("plural", help="Evaluate a plural rule")
    rule_group = plural_parser.add_mutually_exclusive_group(required=True)
    rule_group.add_argument("--rule", "-r", help="Plural-Forms header or expression")
    rule_group.add_argument("--language", "-l", help="Language tag")
    plural_parser.add_argument("counts", type=int, nargs="+", help="Counts to evaluate")

    language_parser = subparsers.add_parser("language", help="Manage language preference")
    language_subs = language_parser.add_subparsers(dest="language_action")
    language_subs.add_parser("show", help="Show the effective language")
    set_parser = language_subs.add_parser("set", help="Save a language preference")
    set_parser.add_argument("code", help="Language tag, e.g. es or pt_BR")
    language_subs.add_parser("clear", help="Clear the saved preference")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    cli = MsgCatalogCLI(verbose=args.verbose)

    try:
        if args.command == "lookup":
            return cli.lookup(args)
        elif args.command == "info":
            return cli.info(args)
        elif args.command == "dump":
            return cli.dump(args)
        elif args.command == "plural":
            return cli.plural(args)
        elif args.command == "language":
            return cli.language(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        console.print()
        error("Operation cancelled")
        return 130
    except CatalogError as e:
        error(str(e))
        return 1
    except (ValueError, RuntimeError, OSError) as e:
        error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
