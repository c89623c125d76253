"""Record fingerprinting.

A fingerprint is the SHA-256 of the record's semantic fields, canonicalized as
trimmed, upper-cased values joined with ``|`` in a fixed order. The join does
not escape embedded pipes, so two field tuples can share a canonical string
when a value contains ``|``. Changing the join would invalidate every
fingerprint already printed on paper or encoded in a QR code, so it stays.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from siarni.core.hashing import compute_text_digest

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
TRANSCRIPT_LIMIT = 1000

# ECMAScript WhiteSpace and LineTerminator code points, the set String.trim()
# strips. Unlike str.strip() it removes U+FEFF and keeps U+0085 and U+001C..U+001F.
TRIM_CHARACTERS = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)

# (attribute name, legacy camelCase key) in canonical order.
FINGERPRINT_FIELDS: tuple[tuple[str, str], ...] = (
    ("husband_name", "husbandName"),
    ("wife_name", "wifeName"),
    ("marriage_date", "marriageDate"),
    ("nomor_nb", "nomorNB"),
    ("nomor_akta", "nomorAkta"),
    ("kecamatan", "kecamatan"),
    ("nomor_bok", "nomorBok"),
    ("lokasi_simpan", "lokasiSimpan"),
    ("extracted_text", "extractedText"),
)


def _read_field(source: Any, name: str, legacy_name: str) -> Any:
    if isinstance(source, Mapping):
        value = source.get(name)
        if value is None:
            value = source.get(legacy_name)
        return value
    return getattr(source, name, None)


def _canonical_value(value: Any) -> str:
    return str(value or "").strip(TRIM_CHARACTERS).upper()


def _truncate_transcript(text: str) -> str:
    """Keep the first TRANSCRIPT_LIMIT UTF-16 code units of ``text``.

    Astral characters count as two units. A surrogate pair cut in half
    becomes U+FFFD, which is how the browser encoded it before hashing.
    """
    units = text.encode("utf-16-le", "surrogatepass")[: TRANSCRIPT_LIMIT * 2]
    return units.decode("utf-16-le", "replace")


def canonicalize(fields: Any) -> str:
    """Return the canonical payload hashed into a fingerprint.

    ``fields`` may be a record object or a mapping keyed by attribute names
    (``husband_name``) or by the legacy export keys (``husbandName``).
    """
    values: list[str] = []
    for name, legacy_name in FINGERPRINT_FIELDS:
        value = _read_field(fields, name, legacy_name)
        if name == "extracted_text" and value:
            value = _truncate_transcript(str(value))
        values.append(_canonical_value(value))
    return FIELD_SEPARATOR.join(values)


def compute_fingerprint(fields: Any) -> str:
    return compute_text_digest(canonicalize(fields), "sha256")


def verify_record_integrity(record: Any) -> bool:
    """Recompute the fingerprint of ``record`` and compare it to the stored one.

    Never raises: a record without a fingerprint, a mismatch, and a failure
    while recomputing are all reported as ``False``.
    """
    stored = _read_field(record, "fingerprint", "hash")
    if not stored:
        return False
    try:
        current = compute_fingerprint(record)
    except Exception:
        logger.exception("Fingerprint recomputation failed")
        return False
    return current == stored
