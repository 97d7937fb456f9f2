"""Area-name extraction from KML markup.

Produces the candidate set of area names proposed for deletion. The
markup is scanned as text rather than parsed into a tree so that a
document with a broken region (unclosed tag, stray ``&``, truncated
export) still yields every name outside that region.

Three independent passes run over the namespace-stripped text and their
results are unioned:

1. **Named elements** — ``<name>Ward 7</name>`` text content.
2. **Key-value data** — ``<SimpleData name="AREA">Ward 7</SimpleData>``
   text content. The value is the candidate; the ``name`` attribute is
   only the field label.
3. **Short descriptions** — ``<description>`` text shorter than
   ``DESCRIPTION_MAX_LENGTH`` characters with no ``<``. Long or HTML
   descriptions are ignored.

Every candidate is trimmed and empty strings are dropped. Captured text
is kept raw: entity references are not decoded and CDATA sections are not
unwrapped. Matching downstream is exact, so no case folding or
inner-whitespace collapsing happens here either.
"""

from __future__ import annotations

import logging
import re

from kml_reconcile.core.constants import DESCRIPTION_MAX_LENGTH

logger = logging.getLogger("kml_reconcile.activities.extract_area_names")

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# xmlns="..." and xmlns:gx='...' declarations
_NAMESPACE_DECL_RE = re.compile(r"""\s+xmlns(?::[\w.-]+)?\s*=\s*(?:"[^"]*"|'[^']*')""")

# <kml:name> → <name>, </kml:name> → </name>
_ELEMENT_PREFIX_RE = re.compile(r"<(/?)[A-Za-z_][\w.-]*:(?=[A-Za-z_])")

_NAME_RE = re.compile(r"<name(?:\s[^<>]*)?>([^<]+)</name\s*>", re.IGNORECASE)

_SIMPLE_DATA_RE = re.compile(
    r"""<SimpleData\s[^<>]*?\bname\s*=\s*(?:"[^"]+"|'[^']+')[^<>]*>([^<]+)</SimpleData\s*>""",
    re.IGNORECASE,
)

_DESCRIPTION_RE = re.compile(
    r"<description(?:\s[^<>]*)?>([^<]+)</description\s*>",
    re.IGNORECASE,
)

_MARKUP_DELIMITER = "<"


# ---------------------------------------------------------------------------
# Pre-processing
# ---------------------------------------------------------------------------


def strip_namespaces(markup: str) -> str:
    """Remove namespace declarations and element prefixes from *markup*."""
    cleaned = _NAMESPACE_DECL_RE.sub("", markup)
    return _ELEMENT_PREFIX_RE.sub(r"<\1", cleaned)


def _clean_text(raw: str) -> str:
    return raw.strip()


# ---------------------------------------------------------------------------
# Extraction passes
# ---------------------------------------------------------------------------


def _named_element_pass(markup: str) -> set[str]:
    names: set[str] = set()
    for match in _NAME_RE.finditer(markup):
        value = _clean_text(match.group(1))
        if value:
            names.add(value)
    return names


def _key_value_pass(markup: str) -> set[str]:
    values: set[str] = set()
    for match in _SIMPLE_DATA_RE.finditer(markup):
        value = _clean_text(match.group(1))
        if value:
            values.add(value)
    return values


def _short_description_pass(markup: str) -> set[str]:
    descriptions: set[str] = set()
    for match in _DESCRIPTION_RE.finditer(markup):
        value = _clean_text(match.group(1))
        if value and len(value) < DESCRIPTION_MAX_LENGTH and _MARKUP_DELIMITER not in value:
            descriptions.add(value)
    return descriptions


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_area_names(markup: str) -> frozenset[str]:
    """Extract the candidate set of area names from KML markup.

    Never raises. Input that cannot be scanned at all yields an empty
    set, which callers treat as "no identifiable area names".

    Args:
        markup: Annotation document text (need not be well-formed XML).

    Returns:
        Deduplicated, trimmed, non-empty area-name candidates.
    """
    try:
        cleaned = strip_namespaces(markup)
        names = _named_element_pass(cleaned)
        key_values = _key_value_pass(cleaned)
        descriptions = _short_description_pass(cleaned)
    except (TypeError, ValueError, re.error, RecursionError):
        logger.exception("Area-name extraction failed; treating markup as empty")
        return frozenset()

    candidates = frozenset(names | key_values | descriptions)
    logger.info(
        "Extracted area names | names=%d | simple_data=%d | descriptions=%d | unique=%d",
        len(names),
        len(key_values),
        len(descriptions),
        len(candidates),
    )
    return candidates
