"""
Message catalog core for msgcatalog.

Provides gettext-style message lookup with:
- Catalogs decoded from .mo, .po and JSON sources
- Context-aware singular and plural lookups
- Plural form selection from Plural-Forms headers or language tags
- Deterministic fallback to source strings for missing translations

Usage:
    from msgcatalog.catalog import Translator, NULL_TRANSLATOR, load_translator

    translator = Translator.from_file("locale/es/LC_MESSAGES/messages.mo")
    print(translator.pgettext("menu", "Open"))
    print(translator.pngettext("", "file", "files", 3))

    # No catalog available: source strings, English plural boundary
    print(NULL_TRANSLATOR.ngettext("cat", "cats", 2))  # "cats"
"""

from msgcatalog.catalog.config import CatalogConfig
from msgcatalog.catalog.decoders import (
    DecodedCatalog,
    MessageRecord,
    decode_json,
    decode_mo,
    decode_po,
)
from msgcatalog.catalog.detector import detect_os_language
from msgcatalog.catalog.errors import CatalogError, DecodeError, RuleSyntaxError
from msgcatalog.catalog.plural import ENGLISH, LANGUAGE_PLURALS, PluralRule, PluralShape
from msgcatalog.catalog.translator import (
    NULL_TRANSLATOR,
    Translator,
    find_catalog,
    load_translator,
)

__all__ = [
    # Core catalog
    "Translator",
    "NULL_TRANSLATOR",
    "MessageRecord",
    "load_translator",
    "find_catalog",
    # Decoding
    "DecodedCatalog",
    "decode_mo",
    "decode_po",
    "decode_json",
    # Plural rules
    "PluralRule",
    "PluralShape",
    "LANGUAGE_PLURALS",
    "ENGLISH",
    # Errors
    "CatalogError",
    "DecodeError",
    "RuleSyntaxError",
    # Configuration
    "CatalogConfig",
    # Detection
    "detect_os_language",
]
