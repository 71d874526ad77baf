"""
Decoders that turn catalog bytes into message records.

Supported sources:
- GNU binary catalogs (.mo), via polib
- GNU text catalogs (.po), via polib
- JSON arrays of ``{"msgctxt", "msgid", "msgid_plural", "msgstr": [...]}``

Every decoder returns a DecodedCatalog and raises DecodeError on
malformed input. Decoders do no file-system access.
"""

from __future__ import annotations

import json
import logging
import struct
from dataclasses import dataclass, field
from typing import Any

import polib

from msgcatalog.catalog.errors import DecodeError

logger = logging.getLogger(__name__)

_JSON_STRING_FIELDS = ("msgctxt", "msgid", "msgid_plural")


@dataclass(frozen=True)
class MessageRecord:
    """One translatable unit, possibly with plural variants."""

    msgid: str
    msgstr: str = ""
    context: str = ""
    msgid_plural: str = ""
    msgstr_plural: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[str, str]:
        """Composite lookup key: (context, msgid)."""
        return (self.context, self.msgid)


@dataclass
class DecodedCatalog:
    """Records and plural metadata produced by a decoder."""

    records: list[MessageRecord] = field(default_factory=list)
    plural_forms: str = ""
    language: str = ""


def _plural_strings(msgstr_plural: dict[Any, str]) -> tuple[str, ...]:
    # polib keys plural translations by form index
    return tuple(msgstr_plural[index] for index in sorted(msgstr_plural, key=int))


def _record_from_entry(entry: polib._BaseEntry) -> MessageRecord:
    return MessageRecord(
        msgid=entry.msgid,
        msgstr=entry.msgstr or "",
        context=entry.msgctxt or "",
        msgid_plural=entry.msgid_plural or "",
        msgstr_plural=_plural_strings(entry.msgstr_plural or {}),
    )


def _metadata(catalog: polib._BaseFile) -> tuple[str, str]:
    metadata = catalog.metadata or {}
    return metadata.get("Plural-Forms", "").strip(), metadata.get("Language", "").strip()


def decode_mo(data: bytes) -> DecodedCatalog:
    """
    Decode a GNU .mo catalog.

    Args:
        data: Raw bytes of the .mo file

    Returns:
        DecodedCatalog with records, Plural-Forms header and Language

    Raises:
        DecodeError: If the bytes are not a valid .mo catalog
    """
    if not data:
        raise DecodeError("mo", "empty input")

    try:
        mo = polib.mofile(bytes(data))
    except (OSError, ValueError, struct.error) as e:
        raise DecodeError("mo", str(e)) from e

    records = [_record_from_entry(entry) for entry in mo if entry.msgid]
    plural_forms, language = _metadata(mo)
    logger.debug(f"Decoded {len(records)} messages from mo catalog")
    return DecodedCatalog(records=records, plural_forms=plural_forms, language=language)


def decode_po(data: bytes | str) -> DecodedCatalog:
    """
    Decode a GNU .po catalog.

    Obsolete and fuzzy entries are skipped, as msgfmt does.

    Args:
        data: Contents of the .po file, as bytes or text

    Returns:
        DecodedCatalog with records, Plural-Forms header and Language

    Raises:
        DecodeError: If the text cannot be decoded or parsed
    """
    if isinstance(data, bytes):
        encoding = polib.detect_encoding(data)
        try:
            text = data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise DecodeError("po", f"cannot decode as {encoding}: {e}") from e
    else:
        text = data

    if not text.strip():
        return DecodedCatalog()

    try:
        po = polib.pofile(text)
    except (OSError, ValueError) as e:
        raise DecodeError("po", str(e)) from e

    records = [
        _record_from_entry(entry)
        for entry in po
        if entry.msgid and not entry.obsolete and not entry.fuzzy
    ]
    plural_forms, language = _metadata(po)
    logger.debug(f"Decoded {len(records)} messages from po catalog")
    return DecodedCatalog(records=records, plural_forms=plural_forms, language=language)


def decode_json(data: bytes | str) -> DecodedCatalog:
    """
    Decode a JSON catalog.

    The input is an array of message objects. ``msgstr`` is a list of
    translated strings: its first element is the singular translation and
    the whole list is kept as the plural translations. JSON carries no
    plural metadata; callers supply the language separately. A null root or
    null field is read as empty.

    Raises:
        DecodeError: If the JSON is malformed or has an unexpected structure
    """
    try:
        messages = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError("json", str(e)) from e

    if messages is None:
        messages = []
    if not isinstance(messages, list):
        raise DecodeError("json", f"expected an array, got {type(messages).__name__}")

    records = []
    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            raise DecodeError("json", f"item {index} is not an object")

        fields = {}
        for name in _JSON_STRING_FIELDS:
            value = message.get(name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise DecodeError("json", f"item {index}: {name!r} must be a string")
            fields[name] = value

        translations = message.get("msgstr")
        if translations is None:
            translations = []
        if not isinstance(translations, list) or not all(
            isinstance(value, str) for value in translations
        ):
            raise DecodeError("json", f"item {index}: 'msgstr' must be an array of strings")

        records.append(
            MessageRecord(
                msgid=fields["msgid"],
                msgstr=translations[0] if translations else "",
                context=fields["msgctxt"],
                msgid_plural=fields["msgid_plural"],
                msgstr_plural=tuple(translations),
            )
        )

    logger.debug(f"Decoded {len(records)} messages from json catalog")
    return DecodedCatalog(records=records)
