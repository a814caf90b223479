from __future__ import annotations
import pandas as pd
from io import BytesIO
from typing import Optional

from .aggregate import AttendanceAggregate

SUMMARY_SHEET = "Attendance Summary"
FILES_SHEET = "Files"
DUPLICATES_SHEET = "Duplicates"
DOWNLOAD_NAME = "attendance_summary.xlsx"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def summary_frame(aggregate: AttendanceAggregate) -> pd.DataFrame:
    # Колонка Email только если она где-то заполнена (вариант с email)
    rows = aggregate.to_rows()
    df = pd.DataFrame(rows, columns=["identity_key", "name", "email", "days_present"])
    out = pd.DataFrame({"Name": df["name"], "Email": df["email"], "Days Present": df["days_present"].astype(int)})
    if not (out["Email"].astype(str).str.strip() != "").any():
        out = out.drop(columns=["Email"])
    return out


def reports_frame(reports) -> pd.DataFrame:
    rows = [r.as_row() for r in reports]
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).rename(columns={
        "source": "File",
        "rows_read": "Rows",
        "header_found": "Header Found",
        "header_row": "Header Row",
        "accepted": "Accepted",
        "counted": "Counted",
        "duplicates": "Duplicates",
        "rejected": "Rejected",
    })


def duplicates_frame(duplicates) -> pd.DataFrame:
    if not duplicates:
        return pd.DataFrame()
    return pd.DataFrame(duplicates).rename(columns={
        "reason": "Reason",
        "source": "File",
        "identity_key": "Identity Key",
        "name": "Name",
        "role": "Role",
    })


def export_to_excel_bytes(
    summary_df: pd.DataFrame,
    *,
    reports_df: Optional[pd.DataFrame] = None,
    duplicates_df: Optional[pd.DataFrame] = None,
) -> bytes:
    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        summary_df.to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)

        if reports_df is not None and not reports_df.empty:
            reports_df.to_excel(writer, index=False, sheet_name=FILES_SHEET)

        if duplicates_df is not None and not duplicates_df.empty:
            duplicates_df.to_excel(writer, index=False, sheet_name=DUPLICATES_SHEET)

        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        def format_df_sheet(sheet_name: str, df: pd.DataFrame, widths: Optional[dict] = None, default_width: int = 15):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            widths = widths or {}
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
            for col, name in enumerate(df.columns):
                ws.write(0, col, name, fmt_header)
                ws.set_column(col, col, widths.get(name, max(default_width, len(str(name)) + 4)))

        # ширины как в исходном отчёте: Name 30, Days Present 15
        format_df_sheet(SUMMARY_SHEET, summary_df, widths={"Name": 30, "Email": 32, "Days Present": 15})

        if reports_df is not None and not reports_df.empty:
            format_df_sheet(FILES_SHEET, reports_df, widths={"File": 40})

        if duplicates_df is not None and not duplicates_df.empty:
            format_df_sheet(DUPLICATES_SHEET, duplicates_df, widths={"File": 40, "Identity Key": 32, "Name": 30})

    return bio.getvalue()
