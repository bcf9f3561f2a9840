"""ReportLab PDF builder for landscape 16:9 project dashboard reports."""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    Image,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from openproject_dashboard.core.chart_generator import (
    generate_burndown_chart,
    generate_workload_chart,
)
from openproject_dashboard.core.data_models import (
    DashboardReport,
    ProjectDashboard,
    ReportConfig,
    TaskRecord,
)
from openproject_dashboard.core.dates import format_date, format_date_range
from openproject_dashboard.core.metrics import NO_PARENT
from openproject_dashboard.core.task_status import (
    classify_task,
    status_color,
    status_display_name,
)

logger = logging.getLogger(__name__)

_MONTHS_FULL = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def _fmt_long_date(d: date) -> str:
    """``"June 15, 2024"`` regardless of system locale."""
    return f"{_MONTHS_FULL[d.month - 1]} {d.day:02d}, {d.year}"


# Page dimensions: landscape 16:9
PAGE_W = 406 * mm  # ~1152 pt
PAGE_H = 228.4 * mm  # ~648 pt
MARGIN = 18 * mm

# ---------------------------------------------------------------------------
# Colour palettes
# ---------------------------------------------------------------------------

_LIGHT_PALETTE = {
    "accent": colors.HexColor("#004099"),
    "text": colors.HexColor("#172B4D"),
    "muted": colors.HexColor("#6B778C"),
    "bg": colors.white,
    "surface": colors.HexColor("#F4F5F7"),
    "success": colors.HexColor("#36B37E"),
    "info": colors.HexColor("#0065FF"),
    "warning": colors.HexColor("#FFAB00"),
    "danger": colors.HexColor("#DE350B"),
    "row_alt": colors.HexColor("#F8F9FA"),
    "grid": colors.HexColor("#DFE1E6"),
    "header_text": colors.white,
}

_DARK_PALETTE = {
    "accent": colors.HexColor("#2979FF"),
    "text": colors.HexColor("#E0E0E0"),
    "muted": colors.HexColor("#90A4AE"),
    "bg": colors.HexColor("#1E1E1E"),
    "surface": colors.HexColor("#263238"),
    "success": colors.HexColor("#66BB6A"),
    "info": colors.HexColor("#42A5F5"),
    "warning": colors.HexColor("#FFA726"),
    "danger": colors.HexColor("#EF5350"),
    "row_alt": colors.HexColor("#252525"),
    "grid": colors.HexColor("#37474F"),
    "header_text": colors.white,
}


def generate_pdf(report: DashboardReport) -> bytes:
    """Build the full PDF report and return it as bytes."""
    dark = report.config.dark_mode
    pal = _DARK_PALETTE if dark else _LIGHT_PALETTE
    dashboard = report.dashboard

    logger.info(
        "Generating PDF for %s: %d task(s), dark_mode=%s",
        dashboard.project.name, len(dashboard.tasks), dark,
    )

    buf = io.BytesIO()
    doc = _create_doc(buf, pal)
    styles = _build_styles(pal)

    story: list[Any] = []

    _add_title_page(story, report.config, dashboard, styles)

    story.append(PageBreak())
    _add_summary_page(story, dashboard, styles, pal)

    story.append(PageBreak())
    _add_charts_page(story, dashboard, styles, dark)

    if dashboard.groups:
        story.append(PageBreak())
        _add_user_story_tables(story, dashboard, styles, pal, report.config.report_date)

    doc.build(story)
    result = buf.getvalue()
    logger.info("PDF built: %d bytes", len(result))
    return result


# -- document setup -----------------------------------------------------------


def _create_doc(buf: io.BytesIO, pal: dict[str, Any]) -> BaseDocTemplate:
    doc = BaseDocTemplate(
        buf,
        pagesize=(PAGE_W, PAGE_H),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
    )
    frame = Frame(MARGIN, MARGIN, PAGE_W - 2 * MARGIN, PAGE_H - 2 * MARGIN, id="main")

    def _on_page(canvas: Any, doc: Any) -> None:
        canvas.saveState()
        canvas.setFillColor(pal["bg"])
        canvas.rect(0, 0, PAGE_W, PAGE_H, fill=1, stroke=0)
        canvas.restoreState()

    doc.addPageTemplates([PageTemplate(id="default", frames=[frame], onPage=_on_page)])
    return doc


def _build_styles(pal: dict[str, Any]) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base["Title"],
            fontSize=36, leading=44, textColor=pal["text"], alignment=TA_CENTER,
        ),
        "subtitle": ParagraphStyle(
            "Subtitle", parent=base["Normal"],
            fontSize=18, leading=24, textColor=pal["muted"], alignment=TA_CENTER,
        ),
        "heading": ParagraphStyle(
            "SectionHeading", parent=base["Heading1"],
            fontSize=22, leading=28, textColor=pal["text"], spaceAfter=8,
        ),
        "subheading": ParagraphStyle(
            "SubHeading", parent=base["Normal"],
            fontSize=14, leading=18, textColor=pal["text"], spaceBefore=6, spaceAfter=4,
        ),
        "body": ParagraphStyle(
            "Body", parent=base["Normal"],
            fontSize=12, leading=16, textColor=pal["text"],
        ),
        "small": ParagraphStyle(
            "Small", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["muted"],
        ),
        "cell": ParagraphStyle(
            "Cell", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["text"],
        ),
        "cell_right": ParagraphStyle(
            "CellRight", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["text"], alignment=TA_RIGHT,
        ),
        "cell_header": ParagraphStyle(
            "CellHeader", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["header_text"],
        ),
        "confidential": ParagraphStyle(
            "Confidential", parent=base["Normal"],
            fontSize=9, leading=12, textColor=pal["danger"], alignment=TA_CENTER,
        ),
        "metric_label": ParagraphStyle(
            "MetricLabel", parent=base["Normal"],
            fontSize=10, leading=14, textColor=pal["muted"],
        ),
        "metric_value": ParagraphStyle(
            "MetricValue", parent=base["Normal"],
            fontSize=12, leading=16, textColor=pal["text"],
        ),
    }


def _hex(colour: Any) -> str:
    return colour.hexval() if hasattr(colour, "hexval") else str(colour)


# -- Page 1: Title -----------------------------------------------------------


def _add_title_page(
    story: list[Any], config: ReportConfig, dashboard: ProjectDashboard,
    styles: dict[str, ParagraphStyle],
) -> None:
    story.append(Spacer(1, 60 * mm))
    story.append(Paragraph(escape(config.title), styles["title"]))
    story.append(Spacer(1, 8 * mm))
    story.append(Paragraph(escape(dashboard.project.name), styles["subtitle"]))

    version = dashboard.selected_version
    if version is not None:
        story.append(Spacer(1, 4 * mm))
        story.append(Paragraph(
            f"{escape(version.name)} ({format_date_range(version.start_date, version.end_date)})",
            styles["subtitle"],
        ))

    story.append(Spacer(1, 4 * mm))
    story.append(Paragraph(_fmt_long_date(config.report_date), styles["subtitle"]))

    if config.author:
        story.append(Spacer(1, 3 * mm))
        story.append(Paragraph(f"Prepared by {escape(config.author)}", styles["subtitle"]))

    if config.confidential and config.company_name:
        story.append(Spacer(1, 30 * mm))
        notice = (
            f"CONFIDENTIAL — This document is the property of {escape(config.company_name)} "
            "and is intended solely for the use of the intended recipient(s). "
            "Unauthorized distribution is prohibited."
        )
        story.append(Paragraph(notice, styles["confidential"]))


# -- Page 2: Summary ---------------------------------------------------------


def _add_summary_page(
    story: list[Any], dashboard: ProjectDashboard,
    styles: dict[str, ParagraphStyle], pal: dict[str, Any],
) -> None:
    story.append(Paragraph("Project Summary", styles["heading"]))

    verdict = dashboard.verdict
    if verdict is not None:
        colour = _hex(pal.get(verdict.severity, pal["muted"]))
        story.append(Paragraph(
            f'Status: <font color="{colour}"><b>{escape(verdict.message)}</b></font>',
            styles["body"],
        ))
    story.append(Paragraph(
        f"Progress: {_progress_bar(dashboard.progress, pal)}", styles["body"],
    ))
    story.append(Spacer(1, 6 * mm))

    s = dashboard.summary
    rows = [
        ("Total tasks", s.total, pal["accent"]),
        ("Pending", s.pending, pal["warning"]),
        ("In progress", s.in_progress, pal["info"]),
        ("Completed", s.completed, pal["success"]),
        ("Overdue", s.overdue, pal["danger"]),
    ]
    table_rows: list[list[Any]] = [[
        Paragraph("<b>Status</b>", styles["cell_header"]),
        Paragraph("<b>Tasks</b>", styles["cell_header"]),
    ]]
    for label, count, colour in rows:
        table_rows.append([
            Paragraph(f'<font color="{_hex(colour)}">●</font> {label}', styles["cell"]),
            Paragraph(str(count), styles["cell_right"]),
        ])

    tbl = Table(table_rows, colWidths=[80 * mm, 30 * mm], hAlign="LEFT")
    tbl.setStyle(TableStyle(_table_style(len(table_rows), pal)))
    story.append(tbl)


def _progress_bar(pct: float, pal: dict[str, Any]) -> str:
    """Return a coloured text representation of a progress bar."""
    if pct >= 75:
        colour = pal["success"]
    elif pct >= 25:
        colour = pal["warning"]
    else:
        colour = pal["danger"]
    bar_len = max(0, min(20, int(pct / 5)))
    bar = "█" * bar_len + "░" * (20 - bar_len)
    return f'<font color="{_hex(colour)}" size="10">{bar}</font> <b>{pct:.0f}%</b>'


# -- Page 3: Charts ----------------------------------------------------------


def _add_charts_page(
    story: list[Any], dashboard: ProjectDashboard,
    styles: dict[str, ParagraphStyle], dark: bool,
) -> None:
    story.append(Paragraph("Burndown &amp; Workload", styles["heading"]))
    story.append(Spacer(1, 4 * mm))

    avail_w = PAGE_W - 2 * MARGIN
    col_w = avail_w * 0.49
    gap = avail_w * 0.02

    cells: list[Any] = []
    for png, empty_text in (
        (generate_burndown_chart(dashboard.burndown, dpi=150, dark=dark),
         "Not enough data to build the burndown chart"),
        (generate_workload_chart(dashboard.workload, dpi=150, dark=dark),
         "No workload data available"),
    ):
        if png:
            cells.append(Image(io.BytesIO(png), width=col_w, height=col_w / 2, kind="proportional"))
        else:
            cells.append(Paragraph(f"<i>{empty_text}</i>", styles["small"]))
    cells.insert(1, "")

    layout = Table([cells], colWidths=[col_w, gap, col_w])
    layout.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story.append(layout)


# -- Page 4+: Tasks by user story ---------------------------------------------


def _add_user_story_tables(
    story: list[Any], dashboard: ProjectDashboard,
    styles: dict[str, ParagraphStyle], pal: dict[str, Any], today: date,
) -> None:
    story.append(Paragraph("Tasks by User Story", styles["heading"]))

    avail_w = PAGE_W - 2 * MARGIN
    col_widths = [
        avail_w * 0.08,  # ID
        avail_w * 0.40,  # Subject
        avail_w * 0.16,  # Assignee
        avail_w * 0.12,  # Due
        avail_w * 0.08,  # Done
        avail_w * 0.06,  # SP
        avail_w * 0.10,  # Status
    ]
    headers = ["ID", "Subject", "Assignee", "Due", "Done", "SP", "Status"]

    for key, tasks in dashboard.groups.items():
        story.append(Paragraph(escape(_group_label(key, tasks)), styles["subheading"]))
        rows: list[list[Any]] = [
            [Paragraph(f"<b>{h}</b>", styles["cell_header"]) for h in headers]
        ]
        for task in tasks:
            status = classify_task(task, today)
            colour = _hex(pal.get(status_color(status), pal["muted"]))
            rows.append([
                Paragraph(f"#{escape(task.id)}", styles["cell"]),
                Paragraph(escape(task.subject), styles["cell"]),
                Paragraph(
                    escape(task.assignee.name or "") if task.assignee else "Unassigned",
                    styles["cell"],
                ),
                Paragraph(format_date(task.due_date), styles["cell"]),
                Paragraph(f"{task.percent_done or 0:.0f}%", styles["cell_right"]),
                Paragraph(f"{task.story_points or 0:.0f}", styles["cell_right"]),
                Paragraph(
                    f'<font color="{colour}">{status_display_name(status)}</font>',
                    styles["cell"],
                ),
            ])
        tbl = Table(rows, colWidths=col_widths, repeatRows=1)
        tbl.setStyle(TableStyle(_table_style(len(rows), pal)))
        story.append(tbl)
        story.append(Spacer(1, 4 * mm))


def _group_label(key: str, tasks: list[TaskRecord]) -> str:
    if key == NO_PARENT:
        return "No user story"
    name = next((t.parent.name for t in tasks if t.parent and t.parent.name), None)
    return f"#{key} {name}" if name else f"#{key}"


def _table_style(row_count: int, pal: dict[str, Any]) -> list[Any]:
    cmds: list[Any] = [
        ("BACKGROUND", (0, 0), (-1, 0), pal["accent"]),
        ("TEXTCOLOR", (0, 0), (-1, 0), pal["header_text"]),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("TOPPADDING", (0, 0), (-1, 0), 6),
        ("GRID", (0, 0), (-1, -1), 0.25, pal["grid"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 1), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 4),
    ]
    # Alternating row colours
    for i in range(2, row_count, 2):
        cmds.append(("BACKGROUND", (0, i), (-1, i), pal["row_alt"]))
    return cmds
