"""
HTML builders for the device history report e-mail.
"""

from __future__ import annotations

from html import escape

from . import schemas

CELL_STYLE = "padding:8px;border-bottom:1px solid #e5e7eb;"
HEADER_STYLE = "padding:10px;border-bottom:1px solid #e5e7eb;"
COLUMNS = ("#", "Person", "Level", "Fill Time", "Level Time")


def _cell(value: object) -> str:
    text = "" if value is None else str(value).strip()
    return f'<td style="{CELL_STYLE}">{escape(text or "-")}</td>'


def history_rows(items: list[schemas.HistoryItem]) -> str:
    rows = []
    for idx, item in enumerate(items, start=1):
        cells = "".join(
            [
                _cell(idx),
                _cell(item.person),
                _cell(item.level),
                _cell(item.fill_time),
                _cell(item.level_time),
            ]
        )
        rows.append(f"<tr>{cells}</tr>")
    return "\n".join(rows)


def history_report_html(items: list[schemas.HistoryItem], *, generated_at: str, product_name: str) -> str:
    headers = "".join(f'<th style="{HEADER_STYLE}">{escape(col)}</th>' for col in COLUMNS)
    return (
        '<div style="font-family:ui-sans-serif,system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;color:#0b1220;">\n'
        '  <h2 style="margin:0 0 4px 0;">Device History Report</h2>\n'
        f'  <div style="color:#64748b;margin-bottom:16px;">{escape(product_name)}</div>\n'
        '  <table style="border-collapse:collapse;width:100%;font-size:14px;">\n'
        f'    <thead><tr style="text-align:left;background:#f8fafc;">{headers}</tr></thead>\n'
        f"    <tbody>{history_rows(items)}</tbody>\n"
        "  </table>\n"
        f'  <div style="margin-top:16px;color:#64748b;">Report generated at {escape(generated_at)}</div>\n'
        "</div>\n"
    )
