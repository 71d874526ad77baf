"""msgcatalog: gettext-style translation catalogs with plural-form selection."""

VERSION = "0.1.0"
