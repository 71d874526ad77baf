"""
Core translation catalog for msgcatalog.

Provides message lookup with:
- Catalog construction from .mo, .po and JSON sources
- Context-aware singular and plural lookups
- Plural form selection through the catalog's plural rule
- Graceful fallback to the source strings for missing translations
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from msgcatalog.catalog.decoders import (
    DecodedCatalog,
    MessageRecord,
    decode_json,
    decode_mo,
    decode_po,
)
from msgcatalog.catalog.errors import DecodeError
from msgcatalog.catalog.plural import PluralRule, language_candidates

logger = logging.getLogger(__name__)

# Search order for catalog files inside <localedir>/<lang>/LC_MESSAGES/
CATALOG_SUFFIXES = (".mo", ".po", ".json")


class Translator:
    """
    One loaded language catalog.

    A Translator is built once and is read-only afterwards, so a single
    instance can be shared between threads once construction is done.

    Features:
    - Messages keyed by (context, msgid)
    - Plural rule bound at construction
    - Lookups never raise; missing translations fall back to the source text
    """

    def __init__(
        self,
        messages: Mapping[tuple[str, str], MessageRecord] | None = None,
        plural_rule: PluralRule | None = None,
        language: str = "",
    ):
        """
        Initialize the translator.

        Args:
            messages: Mapping of (context, msgid) to records
            plural_rule: Plural form selector, defaults to the rule for ``language``
            language: Language tag the catalog was built for
        """
        self._messages = MappingProxyType(dict(messages or {}))
        self._plural_rule = plural_rule or PluralRule.for_language(language)
        self._language = language
        self._plural_overflows = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(language={self._language!r}, "
            f"messages={len(self._messages)}, plural={self._plural_rule.header!r})"
        )

    @property
    def messages(self) -> Mapping[tuple[str, str], MessageRecord]:
        """Read-only view of the catalog's records."""
        return self._messages

    @property
    def plural_rule(self) -> PluralRule:
        return self._plural_rule

    @property
    def language(self) -> str:
        return self._language

    @property
    def plural_overflows(self) -> int:
        """Number of lookups where the plural rule picked a form the record does not have."""
        return self._plural_overflows

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        records: Iterable[MessageRecord],
        plural_forms: str = "",
        language: str = "",
    ) -> Translator:
        """
        Build a catalog from decoded records.

        Later records with the same (context, msgid) replace earlier ones.

        The plural rule comes from ``plural_forms`` if given, then from
        ``language``, then falls back to the unknown-language rule.

        Raises:
            RuleSyntaxError: If ``plural_forms`` is malformed
        """
        messages: dict[tuple[str, str], MessageRecord] = {}
        for record in records:
            messages[record.key] = record

        if plural_forms:
            plural_rule = PluralRule.from_header(plural_forms)
        else:
            plural_rule = PluralRule.for_language(language)

        translator = cls(messages, plural_rule=plural_rule, language=language)
        logger.debug(
            f"Built catalog language={language or '??'} messages={len(messages)} "
            f"plural={plural_rule.header}"
        )
        return translator

    @classmethod
    def _from_decoded(cls, decoded: DecodedCatalog) -> Translator:
        return cls.from_records(
            decoded.records, plural_forms=decoded.plural_forms, language=decoded.language
        )

    @classmethod
    def from_mo(cls, data: bytes) -> Translator:
        """
        Build a catalog from a binary .mo file's contents.

        Raises:
            DecodeError: If the data is not a valid .mo catalog
            RuleSyntaxError: If its Plural-Forms header is malformed
        """
        return cls._from_decoded(decode_mo(data))

    @classmethod
    def from_po(cls, data: bytes | str) -> Translator:
        """
        Build a catalog from a text .po file's contents.

        Raises:
            DecodeError: If the data is not a valid .po catalog
            RuleSyntaxError: If its Plural-Forms header is malformed
        """
        return cls._from_decoded(decode_po(data))

    @classmethod
    def from_json(cls, language: str, data: bytes | str) -> Translator:
        """
        Build a catalog from a JSON array of messages.

        JSON catalogs carry no plural metadata, so the plural rule is taken
        from ``language``.

        Raises:
            DecodeError: If the JSON is malformed
        """
        decoded = decode_json(data)
        return cls.from_records(decoded.records, language=language)

    @classmethod
    def from_file(cls, path: str | Path, language: str = "") -> Translator:
        """
        Build a catalog from a file, choosing the decoder by suffix.

        Args:
            path: Path to a .mo, .po or .json file
            language: Language tag, required for JSON catalogs and used by
                .mo/.po files that have no Language header

        Raises:
            DecodeError: If the suffix is unknown or the file is malformed
            OSError: If the file cannot be read
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in (".mo", ".po"):
            decode = decode_mo if suffix == ".mo" else decode_po
            decoded = decode(path.read_bytes())
            if not decoded.language:
                decoded.language = language
            return cls._from_decoded(decoded)
        if suffix == ".json":
            return cls.from_json(language, path.read_bytes())
        raise DecodeError(suffix.lstrip(".") or "unknown", f"unsupported catalog file: {path}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def gettext(self, msgid: str) -> str:
        """Translate a message without context."""
        return self.pgettext("", msgid)

    def ngettext(self, msgid: str, msgid_plural: str, n: int) -> str:
        """Translate a plural message without context."""
        return self.pngettext("", msgid, msgid_plural, n)

    def pgettext(self, context: str, msgid: str) -> str:
        """
        Translate a message within a context.

        Args:
            context: Disambiguating context, empty for none
            msgid: Source-language message

        Returns:
            The singular translation, or the plural path's answer for n=1
            when the record has no singular translation. At worst, ``msgid``.
        """
        record = self._messages.get((context, msgid))
        if record is not None and record.msgstr:
            return record.msgstr
        return self.pngettext(context, msgid, "", 1)

    def pngettext(self, context: str, msgid: str, msgid_plural: str, n: int) -> str:
        """
        Translate a plural message within a context.

        Args:
            context: Disambiguating context, empty for none
            msgid: Source-language singular
            msgid_plural: Source-language plural, empty if none
            n: Count selecting the plural form

        Returns:
            The translation for ``n``; otherwise ``msgid_plural`` or ``msgid``
            chosen by the English singular/plural boundary.

        Examples:
            >>> NULL_TRANSLATOR.pngettext("", "cat", "cats", 2)
            'cats'
        """
        form = self._plural_rule(n)
        translations = self._plural_strings(context, msgid)

        if translations:
            if form >= len(translations):
                self._plural_overflows += 1
                logger.debug(
                    f"Plural form {form} out of range for {msgid!r} "
                    f"({len(translations)} forms), using last form"
                )
                form = len(translations) - 1
            if translations[form]:
                return translations[form]

        if msgid_plural and n != 1:
            return msgid_plural
        return msgid

    def _plural_strings(self, context: str, msgid: str) -> tuple[str, ...]:
        record = self._messages.get((context, msgid))
        if record is None:
            return ()
        if record.msgid_plural:
            return record.msgstr_plural
        # Records without a plural form translate every count the same way
        if record.msgstr:
            return (record.msgstr,)
        return ()


NULL_TRANSLATOR = Translator(language="")


def find_catalog(localedir: str | Path, domain: str, language: str) -> Path | None:
    """
    Locate a catalog file for a domain and language.

    Searches ``<localedir>/<lang>/LC_MESSAGES/<domain><suffix>`` trying the
    full language (``pt_BR``) before the base language (``pt``), and the
    suffixes in CATALOG_SUFFIXES order.

    Returns:
        Path to the first existing catalog, or None
    """
    localedir = Path(localedir)
    for candidate in language_candidates(language):
        for suffix in CATALOG_SUFFIXES:
            path = localedir / candidate / "LC_MESSAGES" / f"{domain}{suffix}"
            if path.is_file():
                return path
    return None


def load_translator(localedir: str | Path, domain: str, language: str) -> Translator:
    """
    Load the catalog for a domain and language from a locale directory.

    Returns NULL_TRANSLATOR when no catalog file exists.

    Raises:
        DecodeError: If the catalog file is malformed
        RuleSyntaxError: If its Plural-Forms header is malformed
    """
    path = find_catalog(localedir, domain, language)
    if path is None:
        logger.debug(f"No catalog for domain={domain!r} language={language!r} in {localedir}")
        return NULL_TRANSLATOR

    return Translator.from_file(path, language=language)
