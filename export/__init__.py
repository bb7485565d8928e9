"""Export-Modul: Excel (openpyxl) für die Slot-Übersicht."""

from export.excel_export import SlotExcelExporter

__all__ = ["SlotExcelExporter"]
