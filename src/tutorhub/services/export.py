"""CSV export of the leaderboard.

The file is written for Turkish Excel: semicolon separated, every field
quoted, CRLF line endings and a UTF-8 BOM so the encoding is detected.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tutorhub.services.leaderboard import LeaderboardEntry

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
UTF8_BOM = "\ufeff"
UNASSIGNED_TUTOR = "Atanmamış"

LEADERBOARD_HEADER = ("Sıra", "Kullanıcı Adı", "Ad Soyad", "Deneyim Puanı", "Öğretmen")


@dataclass(frozen=True, slots=True)
class CSVExport:
    filename: str
    content: bytes
    media_type: str = CSV_MEDIA_TYPE

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def leaderboard_filename(when: datetime) -> str:
    return f"liderlik-tablosu-{when:%d-%m-%Y}.csv"


def _row(entry: LeaderboardEntry) -> list[str]:
    full_name = f"{entry.first_name or ''} {entry.last_name or ''}".strip()
    tutor = UNASSIGNED_TUTOR
    if entry.tutor is not None:
        tutor = entry.tutor.name or entry.tutor.username
    return [str(entry.rank), entry.username, full_name, str(entry.experience), tutor]


def render_csv(header: Iterable[str], rows: Iterable[Iterable[str]]) -> bytes:
    """Render rows as BOM-prefixed, fully quoted, semicolon separated UTF-8."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=";", quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerow(header)
    writer.writerows(rows)
    return (UTF8_BOM + buf.getvalue()).encode("utf-8")


def export_leaderboard_csv(entries: Iterable[LeaderboardEntry], when: datetime) -> CSVExport:
    """Export ranked leaderboard entries."""
    return CSVExport(
        filename=leaderboard_filename(when),
        content=render_csv(LEADERBOARD_HEADER, (_row(e) for e in entries)),
    )
