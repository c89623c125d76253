from __future__ import annotations

import argparse
from pathlib import Path

from siarni.application.services.archive_service import (
    DEFAULT_JUMLAH_LEMBAR,
    DEFAULT_MEDIA_SIMPAN,
    RecordDraft,
)


def add_record_field_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("record fields")
    group.add_argument("--husband", default="", help="Husband full name")
    group.add_argument("--wife", default="", help="Wife full name")
    group.add_argument("--date", default="", help="Marriage date (YYYY-MM-DD)")
    group.add_argument("--nb", default="", help="Document reference number (Nomor NB)")
    group.add_argument("--akta", default="", help="Certificate registration number (Nomor Akta)")
    group.add_argument("--kecamatan", default="", help="Administrative district")
    group.add_argument("--bok", default="", help="Storage-box identifier (Nomor Bok)")
    group.add_argument("--lokasi", default="", help="Physical storage location")
    text_group = group.add_mutually_exclusive_group()
    text_group.add_argument("--text", default="", help="Document transcript")
    text_group.add_argument("--text-file", type=Path, help="Read the document transcript from a file")


def draft_from_args(args: argparse.Namespace) -> RecordDraft:
    text = args.text
    if args.text_file is not None:
        text = args.text_file.expanduser().read_text(encoding="utf-8")
    return RecordDraft(
        husband_name=args.husband,
        wife_name=args.wife,
        marriage_date=args.date,
        nomor_nb=args.nb,
        nomor_akta=args.akta,
        kecamatan=args.kecamatan,
        nomor_bok=args.bok,
        lokasi_simpan=args.lokasi,
        extracted_text=text,
        media_simpan=getattr(args, "media_simpan", DEFAULT_MEDIA_SIMPAN),
        jumlah_lembar=getattr(args, "lembar", DEFAULT_JUMLAH_LEMBAR),
    )
