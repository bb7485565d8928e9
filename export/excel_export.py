"""Excel-Export der Slot-Übersicht (openpyxl)."""

from pathlib import Path

from models.slot import SlotStatus
from booking.overview import SlotOverview
from config.defaults import day_name

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    SlotStatus.AVAILABLE.value:   "B3FFB3",
    SlotStatus.BOOKED.value:      "B3D4FF",
    SlotStatus.UNAVAILABLE.value: "E0E0E0",
    "header":                     "4472C4",
}

HEADERS = ["ID", "Tag", "Beginn", "Ende", "Minuten", "Phase", "Frist",
           "Status", "Team"]


class SlotExcelExporter:
    """Exportiert eine SlotOverview in ein Tabellenblatt je Review-Phase."""

    COL_WIDTHS = [6, 12, 8, 8, 9, 14, 18, 13, 22]
    ROW_HEADER_H = 22

    def __init__(self, overview: SlotOverview):
        self.overview = overview

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei: Übersichtsblatt + ein Blatt je Phase."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet(wb, "Übersicht", self.overview)
        stages = sorted({e.slot.review_stage for e in self.overview.entries})
        for stage in stages:
            self._sheet(wb, stage, self.overview.filter(review_stage=stage))

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet(self, wb, title: str, overview: SlotOverview) -> None:
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter

        # Excel erlaubt max. 31 Zeichen, keine Sonderzeichen wie / \ ? * [ ]
        safe_title = "".join(c for c in title if c not in "/\\?*[]:")[:31] or "Phase"
        ws = wb.create_sheet(safe_title)
        for col, width in enumerate(self.COL_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        border = self._thin_border()
        header_fill = self._fill(COLORS["header"])
        for col, text in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = header_fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        ws.freeze_panes = "A2"

        for row, e in enumerate(overview.entries, 2):
            values = [
                e.slot.id,
                day_name(e.slot.day),
                e.slot.start_time,
                e.slot.end_time,
                e.slot.duration_minutes,
                e.slot.review_stage,
                e.slot.booking_deadline.strftime("%d.%m.%Y %H:%M"),
                e.status.value,
                e.team_name or "",
            ]
            fill = self._fill(COLORS[e.status.value])
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = border
                if col == len(values) - 1:
                    cell.fill = fill
