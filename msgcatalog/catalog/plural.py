"""
Plural-form selection for message catalogs.

A plural rule maps a count to the index of the translated string to use.
Rules come either from a catalog's ``Plural-Forms`` header or from a
language tag looked up in a fixed table.

Known gettext rule shapes are PluralShape members with a native selector;
any other header expression is compiled into an expression tree
(PluralShape.CUSTOM). Both kinds are plain values that can be compared,
printed and rendered back into a header.

Usage:
    rule = PluralRule.from_header("nplurals=2; plural=(n != 1);")
    rule(5)  # 1

    PluralRule.for_language("ru")(21)  # 0
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from msgcatalog.catalog.errors import RuleSyntaxError
from msgcatalog.catalog.expression import Node, compile_expression


class PluralShape(Enum):
    """Known gettext plural rule shapes as (nplurals, expression)."""

    ONLY_ONE = (1, "0")
    ONE_OTHER = (2, "n != 1")
    FRENCH = (2, "n > 1")
    LATVIAN = (3, "n%10==1 && n%100!=11 ? 0 : n != 0 ? 1 : 2")
    IRISH = (3, "n==1 ? 0 : n==2 ? 1 : 2")
    ROMANIAN = (3, "n==1 ? 0 : (n==0 || (n%100 > 0 && n%100 < 20)) ? 1 : 2")
    LITHUANIAN = (3, "n%10==1 && n%100!=11 ? 0 : n%10>=2 && (n%100<10 || n%100>=20) ? 1 : 2")
    RUSSIAN = (
        3,
        "n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2",
    )
    CZECH = (3, "(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2")
    POLISH = (3, "n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2")
    SLOVENIAN = (4, "n%100==1 ? 0 : n%100==2 ? 1 : n%100==3 || n%100==4 ? 2 : 3")
    ARABIC = (
        6,
        "n==0 ? 0 : n==1 ? 1 : n==2 ? 2 : n%100>=3 && n%100<=10 ? 3 : n%100>=11 ? 4 : 5",
    )
    CUSTOM = (0, "")

    def __init__(self, nplurals: int, expression: str):
        self.nplurals = nplurals
        self.expression = expression


def _russian(n: int) -> int:
    if n % 10 == 1 and n % 100 != 11:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 10 or n % 100 >= 20):
        return 1
    return 2


def _polish(n: int) -> int:
    if n == 1:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 10 or n % 100 >= 20):
        return 1
    return 2


def _lithuanian(n: int) -> int:
    if n % 10 == 1 and n % 100 != 11:
        return 0
    if n % 10 >= 2 and (n % 100 < 10 or n % 100 >= 20):
        return 1
    return 2


def _slovenian(n: int) -> int:
    n100 = n % 100
    if n100 == 1:
        return 0
    if n100 == 2:
        return 1
    if n100 in (3, 4):
        return 2
    return 3


def _arabic(n: int) -> int:
    n100 = n % 100
    if n <= 2:
        return n
    if 3 <= n100 <= 10:
        return 3
    if n100 >= 11:
        return 4
    return 5


_SHAPE_SELECTORS: dict[PluralShape, Callable[[int], int]] = {
    PluralShape.ONLY_ONE: lambda n: 0,
    PluralShape.ONE_OTHER: lambda n: int(n != 1),
    PluralShape.FRENCH: lambda n: int(n > 1),
    PluralShape.LATVIAN: lambda n: 0 if n % 10 == 1 and n % 100 != 11 else (1 if n != 0 else 2),
    PluralShape.IRISH: lambda n: 0 if n == 1 else (1 if n == 2 else 2),
    PluralShape.ROMANIAN: lambda n: 0 if n == 1 else (1 if n == 0 or 0 < n % 100 < 20 else 2),
    PluralShape.LITHUANIAN: _lithuanian,
    PluralShape.RUSSIAN: _russian,
    PluralShape.CZECH: lambda n: 0 if n == 1 else (1 if 2 <= n <= 4 else 2),
    PluralShape.POLISH: _polish,
    PluralShape.SLOVENIAN: _slovenian,
    PluralShape.ARABIC: _arabic,
}

# Plural shape per language, following the GNU gettext manual's table
LANGUAGE_PLURALS: dict[str, PluralShape] = {
    # No plural distinction
    **dict.fromkeys(
        ["ay", "bo", "dz", "id", "ja", "jbo", "ka", "km", "ko", "ky", "lo", "ms", "my",
         "sah", "su", "th", "tt", "ug", "vi", "wo", "zh"],
        PluralShape.ONLY_ONE,
    ),
    # Singular for one only
    **dict.fromkeys(
        ["af", "an", "ast", "az", "bg", "bn", "ca", "da", "de", "el", "en", "eo", "es",
         "et", "eu", "fi", "fo", "fur", "fy", "gl", "gu", "ha", "he", "hi", "hu", "hy",
         "ia", "it", "kk", "kn", "ku", "lb", "ml", "mn", "mr", "nb", "ne", "nl", "nn",
         "no", "or", "pa", "ps", "pt", "rm", "sco", "se", "si", "so", "sq", "sv", "sw",
         "ta", "te", "tk", "tr", "ur", "yo"],
        PluralShape.ONE_OTHER,
    ),
    # Singular for zero and one
    **dict.fromkeys(
        ["ach", "ak", "am", "br", "fa", "fil", "fr", "ln", "mg", "mi", "oc", "pt_BR",
         "tg", "ti", "tl", "uz", "wa"],
        PluralShape.FRENCH,
    ),
    "lv": PluralShape.LATVIAN,
    "ga": PluralShape.IRISH,
    "ro": PluralShape.ROMANIAN,
    "lt": PluralShape.LITHUANIAN,
    **dict.fromkeys(["be", "bs", "hr", "ru", "sr", "uk"], PluralShape.RUSSIAN),
    **dict.fromkeys(["cs", "sk"], PluralShape.CZECH),
    "pl": PluralShape.POLISH,
    "sl": PluralShape.SLOVENIAN,
    "ar": PluralShape.ARABIC,
}

_NPLURALS_RE = re.compile(r"nplurals\s*=\s*(\d+)")
_PLURAL_RE = re.compile(r"(?<![a-z])plural\s*=\s*([^;]*)")


def _strip_outer_parens(expression: str) -> str:
    while expression.startswith("(") and expression.endswith(")"):
        depth = 0
        for index, char in enumerate(expression):
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0 and index != len(expression) - 1:
                    return expression
        expression = expression[1:-1]
    return expression


def normalize_expression(expression: str) -> str:
    """Drop whitespace and redundant outer parentheses from an expression."""
    return _strip_outer_parens(re.sub(r"\s+", "", expression))


_KNOWN_EXPRESSIONS: dict[str, PluralShape] = {
    normalize_expression(shape.expression): shape
    for shape in PluralShape
    if shape is not PluralShape.CUSTOM
}


def normalize_language(tag: str) -> str:
    """
    Normalize a language tag to gettext's ``ll`` or ``ll_CC`` form.

    Handles ``pt-BR``, ``pt_br``, ``de_DE.UTF-8`` and ``sr_RS@latin``.
    """
    tag = tag.strip().replace("-", "_")
    tag = re.split(r"[.@]", tag, maxsplit=1)[0]
    if not tag:
        return ""
    language, _, region = tag.partition("_")
    language = language.lower()
    if not region:
        return language
    return f"{language}_{region.upper() if len(region) == 2 else region.title()}"


def language_candidates(tag: str) -> list[str]:
    """Return the normalized tag followed by its base language, most specific first."""
    normalized = normalize_language(tag)
    if not normalized:
        return []
    candidates = [normalized]
    base = normalized.partition("_")[0]
    if base != normalized:
        candidates.append(base)
    return candidates


@dataclass(frozen=True)
class PluralRule:
    """
    A plural-form selector bound to a catalog.

    Calling the rule with a count returns the plural form index. The rule is
    total: counts are taken modulo 2**32, so negative counts wrap to large
    unsigned values, and negative results from custom expressions are
    reported as form 0.
    """

    shape: PluralShape
    nplurals: int | None
    expression: str
    tree: Node | None = field(default=None, compare=False, repr=False)

    def __call__(self, n: int) -> int:
        n = int(n) & 0xFFFFFFFF
        if self.tree is not None:
            form = self.tree.evaluate(n)
        else:
            form = _SHAPE_SELECTORS[self.shape](n)
        return form if form > 0 else 0

    @property
    def header(self) -> str:
        """Render the rule as a Plural-Forms header value."""
        if self.nplurals is None:
            return f"plural={self.expression};"
        return f"nplurals={self.nplurals}; plural={self.expression};"

    @classmethod
    def from_shape(cls, shape: PluralShape) -> PluralRule:
        if shape is PluralShape.CUSTOM:
            raise ValueError("CUSTOM rules are built with PluralRule.from_header()")
        return cls(shape=shape, nplurals=shape.nplurals, expression=shape.expression)

    @classmethod
    def from_header(cls, header: str) -> PluralRule:
        """
        Build a rule from a Plural-Forms header or a bare expression.

        Args:
            header: e.g. ``nplurals=3; plural=(n==1 ? 0 : n==2 ? 1 : 2);``
                or just ``n != 1``

        Returns:
            A known-shape rule when the expression matches one, otherwise
            a compiled CUSTOM rule

        Raises:
            RuleSyntaxError: If the header or its expression is malformed
        """
        text = header.strip()
        nplurals: int | None = None
        expression = text

        plural_match = _PLURAL_RE.search(text)
        nplurals_match = _NPLURALS_RE.search(text)
        if plural_match or nplurals_match:
            if plural_match is None:
                raise RuleSyntaxError(header, "missing 'plural=' expression")
            if nplurals_match is None:
                raise RuleSyntaxError(header, "missing 'nplurals=' count")
            nplurals = int(nplurals_match.group(1))
            if nplurals < 1:
                raise RuleSyntaxError(header, "nplurals must be at least 1")
            expression = plural_match.group(1).strip()

        shape = _KNOWN_EXPRESSIONS.get(normalize_expression(expression))
        if shape is not None and nplurals in (None, shape.nplurals):
            return cls.from_shape(shape)

        tree = compile_expression(expression)
        return cls(
            shape=PluralShape.CUSTOM, nplurals=nplurals, expression=expression, tree=tree
        )

    @classmethod
    def for_language(cls, language: str) -> PluralRule:
        """
        Look up the rule for a language tag.

        Tries the full tag (``pt_BR``) before its base language (``pt``).
        Unknown or empty tags get a single-form rule; this never fails.
        """
        for candidate in language_candidates(language):
            shape = LANGUAGE_PLURALS.get(candidate)
            if shape is not None:
                return cls.from_shape(shape)
        return cls.from_shape(PluralShape.ONLY_ONE)


# Used by catalog lookups as the last-resort singular/plural boundary
ENGLISH = PluralRule.from_shape(PluralShape.ONE_OTHER)
