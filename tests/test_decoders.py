"""
Tests for the catalog decoders.

Tests cover:
- Binary .mo catalogs (built with polib)
- Text .po catalogs
- JSON catalogs
- Malformed input handling
"""

import tempfile
import unittest
from pathlib import Path

import polib

SPANISH_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"
"Language: es\\n"
"Plural-Forms: nplurals=2; plural=(n != 1);\\n"

msgid "dog"
msgstr "perro"

msgctxt "menu"
msgid "Open"
msgstr "Abrir"

msgid "file"
msgid_plural "files"
msgstr[0] "archivo"
msgstr[1] "archivos"

#, fuzzy
msgid "cat"
msgstr "gato"

#~ msgid "old"
#~ msgstr "viejo"
"""


def build_mo_bytes(entries, metadata=None):
    """Build .mo file contents with polib."""
    po = polib.POFile()
    po.metadata = metadata or {
        "Content-Type": "text/plain; charset=UTF-8",
        "Language": "es",
        "Plural-Forms": "nplurals=2; plural=(n != 1);",
    }
    for entry in entries:
        po.append(entry)

    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "messages.mo"
        po.save_as_mofile(str(path))
        return path.read_bytes()


def spanish_mo_entries():
    return [
        polib.POEntry(msgid="dog", msgstr="perro"),
        polib.POEntry(msgctxt="menu", msgid="Open", msgstr="Abrir"),
        polib.POEntry(
            msgid="file",
            msgid_plural="files",
            msgstr_plural={0: "archivo", 1: "archivos"},
        ),
    ]


class TestMoDecoder(unittest.TestCase):
    """Tests for binary catalog decoding."""

    def test_decode_records(self):
        """Test records, contexts and plural strings are decoded."""
        from msgcatalog.catalog.decoders import decode_mo

        decoded = decode_mo(build_mo_bytes(spanish_mo_entries()))
        records = {record.key: record for record in decoded.records}

        self.assertEqual(records[("", "dog")].msgstr, "perro")
        self.assertEqual(records[("menu", "Open")].msgstr, "Abrir")
        self.assertEqual(records[("", "file")].msgid_plural, "files")
        self.assertEqual(records[("", "file")].msgstr_plural, ("archivo", "archivos"))

    def test_decode_metadata(self):
        """Test Plural-Forms and Language headers are extracted."""
        from msgcatalog.catalog.decoders import decode_mo

        decoded = decode_mo(build_mo_bytes(spanish_mo_entries()))

        self.assertEqual(decoded.plural_forms, "nplurals=2; plural=(n != 1);")
        self.assertEqual(decoded.language, "es")

    def test_header_entry_not_a_record(self):
        """Test the metadata entry is not returned as a message."""
        from msgcatalog.catalog.decoders import decode_mo

        decoded = decode_mo(build_mo_bytes(spanish_mo_entries()))

        self.assertNotIn("", [record.msgid for record in decoded.records])

    def test_invalid_magic_raises(self):
        """Test non-mo bytes raise DecodeError."""
        from msgcatalog.catalog.decoders import decode_mo
        from msgcatalog.catalog.errors import DecodeError

        with self.assertRaises(DecodeError) as context:
            decode_mo(b"\x00\x01\x02\x03 definitely not a catalog")

        self.assertEqual(context.exception.source_format, "mo")

    def test_empty_input_raises(self):
        """Test empty bytes raise DecodeError."""
        from msgcatalog.catalog.decoders import decode_mo
        from msgcatalog.catalog.errors import DecodeError

        with self.assertRaises(DecodeError):
            decode_mo(b"")


class TestPoDecoder(unittest.TestCase):
    """Tests for text catalog decoding."""

    def test_decode_text(self):
        """Test records are decoded from text."""
        from msgcatalog.catalog.decoders import decode_po

        decoded = decode_po(SPANISH_PO)
        records = {record.key: record for record in decoded.records}

        self.assertEqual(records[("", "dog")].msgstr, "perro")
        self.assertEqual(records[("menu", "Open")].msgstr, "Abrir")
        self.assertEqual(records[("", "file")].msgstr_plural, ("archivo", "archivos"))
        self.assertEqual(decoded.language, "es")
        self.assertEqual(decoded.plural_forms, "nplurals=2; plural=(n != 1);")

    def test_decode_bytes(self):
        """Test bytes are decoded using the declared charset."""
        from msgcatalog.catalog.decoders import decode_po

        decoded = decode_po(SPANISH_PO.encode("utf-8"))

        self.assertEqual(len(decoded.records), 3)

    def test_fuzzy_and_obsolete_skipped(self):
        """Test fuzzy and obsolete entries are not loaded."""
        from msgcatalog.catalog.decoders import decode_po

        decoded = decode_po(SPANISH_PO)
        msgids = {record.msgid for record in decoded.records}

        self.assertNotIn("cat", msgids)
        self.assertNotIn("old", msgids)

    def test_empty_text_is_empty_catalog(self):
        """Test an empty file decodes to no records."""
        from msgcatalog.catalog.decoders import decode_po

        decoded = decode_po("")

        self.assertEqual(decoded.records, [])
        self.assertEqual(decoded.plural_forms, "")

    def test_syntax_error_raises(self):
        """Test malformed po text raises DecodeError."""
        from msgcatalog.catalog.decoders import decode_po
        from msgcatalog.catalog.errors import DecodeError

        with self.assertRaises(DecodeError) as context:
            decode_po('msgid "dog"\nmsgstr "perro"\nthis is not po\n')

        self.assertEqual(context.exception.source_format, "po")


class TestJsonDecoder(unittest.TestCase):
    """Tests for JSON catalog decoding."""

    def test_decode_messages(self):
        """Test singular string is the first msgstr element."""
        from msgcatalog.catalog.decoders import decode_json

        decoded = decode_json(
            '[{"msgid": "dog", "msgstr": ["perro"]},'
            ' {"msgctxt": "menu", "msgid": "file", "msgid_plural": "files",'
            '  "msgstr": ["archivo", "archivos"]}]'
        )

        dog, file_record = decoded.records
        self.assertEqual(dog.msgstr, "perro")
        self.assertEqual(dog.msgstr_plural, ("perro",))
        self.assertEqual(file_record.context, "menu")
        self.assertEqual(file_record.msgstr, "archivo")
        self.assertEqual(file_record.msgstr_plural, ("archivo", "archivos"))

    def test_no_metadata(self):
        """Test JSON catalogs carry no plural metadata."""
        from msgcatalog.catalog.decoders import decode_json

        decoded = decode_json(b'[{"msgid": "dog", "msgstr": ["perro"]}]')

        self.assertEqual(decoded.plural_forms, "")
        self.assertEqual(decoded.language, "")

    def test_missing_msgstr_is_untranslated(self):
        """Test an absent msgstr gives empty translations."""
        from msgcatalog.catalog.decoders import decode_json

        decoded = decode_json('[{"msgid": "dog"}]')

        self.assertEqual(decoded.records[0].msgstr, "")
        self.assertEqual(decoded.records[0].msgstr_plural, ())

    def test_null_fields_are_empty(self):
        """Test null string fields and a null root read as empty."""
        from msgcatalog.catalog.decoders import decode_json

        decoded = decode_json(
            '[{"msgctxt": null, "msgid": "dog", "msgid_plural": null, "msgstr": null}]'
        )

        self.assertEqual(decoded.records[0].key, ("", "dog"))
        self.assertEqual(decoded.records[0].msgid_plural, "")
        self.assertEqual(decoded.records[0].msgstr_plural, ())
        self.assertEqual(decode_json("null").records, [])

    def test_malformed_json_raises(self):
        """Test invalid JSON raises DecodeError."""
        from msgcatalog.catalog.decoders import decode_json
        from msgcatalog.catalog.errors import DecodeError

        with self.assertRaises(DecodeError):
            decode_json("[{")

    def test_wrong_structure_raises(self):
        """Test unexpected JSON shapes raise DecodeError."""
        from msgcatalog.catalog.decoders import decode_json
        from msgcatalog.catalog.errors import DecodeError

        for payload in (
            '{"msgid": "dog"}',
            '["dog"]',
            '[{"msgid": 1}]',
            '[{"msgctxt": false, "msgid": "dog"}]',
            '"dog"',
            '[{"msgid": "dog", "msgstr": "perro"}]',
            '[{"msgid": "dog", "msgstr": [1]}]',
        ):
            with self.assertRaises(DecodeError, msg=payload):
                decode_json(payload)


if __name__ == "__main__":
    unittest.main()
