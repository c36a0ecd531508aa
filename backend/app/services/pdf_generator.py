"""
PDF Generator Service for EcoPermit Administration.

Generates the assessment summary report for a permit application:
- Application details and fee
- Initial (registry) assessment
- Compliance (technical) assessment
- Audit trail
"""

import io
from datetime import datetime
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)
from reportlab.lib.enums import TA_CENTER

from app.services.status_display import status_label

RULE_COLOR = colors.HexColor('#e0e0e0')
INK = colors.HexColor('#1b4332')


class PDFGenerator:
    """Generates assessment summary PDFs."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Add custom paragraph styles (names must not clash with the sample sheet)."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=22,
            spaceAfter=12,
            alignment=TA_CENTER,
            textColor=INK,
        ))
        self.styles.add(ParagraphStyle(
            name='ReportSubtitle',
            parent=self.styles['Normal'],
            fontSize=12,
            spaceAfter=20,
            alignment=TA_CENTER,
            textColor=colors.HexColor('#666666'),
        ))
        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontSize=13,
            spaceBefore=16,
            spaceAfter=8,
            textColor=INK,
        ))
        self.styles.add(ParagraphStyle(
            name='CellText',
            parent=self.styles['Normal'],
            fontSize=9,
            leading=11,
        ))
        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.HexColor('#888888'),
            alignment=TA_CENTER,
            spaceBefore=20,
        ))

    def generate_assessment_summary(self, report: Dict[str, Any]) -> bytes:
        """
        Generate the assessment summary for one application.

        Args:
            report: dict with "application", "initial_assessment",
                "compliance_assessment" (dicts or None) and "audit_trail" (list)

        Returns:
            PDF bytes
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title="Assessment Summary",
        )

        application = report["application"]
        story = []

        story.append(Paragraph("EcoPermit Administration", self.styles['ReportTitle']))
        story.append(Paragraph(
            f"Assessment Summary - {self._text(application.get('application_number') or 'Unnumbered')}",
            self.styles['ReportSubtitle'],
        ))

        self._section(story, "APPLICATION")
        story.append(self._field_table([
            ["Title:", application.get("title")],
            ["Entity:", application.get("entity_name")],
            ["Permit Type:", application.get("permit_type")],
            ["Activity Level:", application.get("activity_level")],
            ["Status:", status_label(application.get("status"))],
            ["Submitted:", self._format_datetime(application.get("application_date"))],
            ["Fee:", self._format_money(application.get("fee_amount_cents"))],
        ]))

        self._section(story, "INITIAL ASSESSMENT")
        initial = report.get("initial_assessment")
        if initial:
            story.append(self._field_table([
                ["Status:", status_label(initial.get("assessment_status"))],
                ["Outcome:", initial.get("assessment_outcome")],
                ["Assessed:", self._format_datetime(initial.get("assessment_date"))],
                ["Notes:", initial.get("assessment_notes")],
                ["Feedback:", initial.get("feedback_provided")],
            ]))
        else:
            story.append(Paragraph("Not yet assessed.", self.styles['Normal']))

        self._section(story, "COMPLIANCE ASSESSMENT")
        compliance = report.get("compliance_assessment")
        if compliance:
            score = compliance.get("compliance_score")
            story.append(self._field_table([
                ["Status:", status_label(compliance.get("assessment_status"))],
                ["Score:", f"{score} / 100" if score is not None else None],
                ["Recommendations:", compliance.get("recommendations")],
                ["Violations:", self._format_list(compliance.get("violations_found"))],
                ["Next Review:", self._format_datetime(compliance.get("next_review_date"))],
                ["Notes:", compliance.get("assessment_notes")],
            ]))
        else:
            story.append(Paragraph("Technical assessment not started.", self.styles['Normal']))

        self._section(story, "AUDIT TRAIL")
        entries = report.get("audit_trail") or []
        if entries:
            rows = [["When", "Officer", "Action", "Change"]]
            for entry in entries:
                change = " -> ".join(
                    v for v in (entry.get("previous_status"), entry.get("new_status")) if v
                )
                rows.append([
                    self._format_datetime(entry.get("created_at")),
                    Paragraph(self._text(entry.get("officer_name") or "System"), self.styles['CellText']),
                    status_label(entry.get("action_type")),
                    Paragraph(self._text(change or "-"), self.styles['CellText']),
                ])
            table = Table(rows, colWidths=[1.4*inch, 1.6*inch, 1.4*inch, 2.3*inch], repeatRows=1)
            table.setStyle(TableStyle([
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 8),
                ('BACKGROUND', (0, 0), (-1, 0), INK),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('GRID', (0, 0), (-1, -1), 0.5, RULE_COLOR),
                ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f6f8f7')]),
            ]))
            story.append(table)
        else:
            story.append(Paragraph("No audit entries.", self.styles['Normal']))

        story.append(Spacer(1, 0.4*inch))
        story.append(HRFlowable(width="100%", thickness=1, color=RULE_COLOR))
        story.append(Paragraph(
            f"Generated on {datetime.utcnow().strftime('%Y-%m-%d %H:%M UTC')}",
            self.styles['Footer'],
        ))

        doc.build(story)
        buffer.seek(0)
        return buffer.read()

    def _section(self, story: List[Any], title: str) -> None:
        story.append(Paragraph(title, self.styles['SectionHeader']))
        story.append(HRFlowable(width="100%", thickness=1, color=RULE_COLOR))

    def _field_table(self, rows: List[List[Any]]) -> Table:
        data = [
            [label, Paragraph(self._text(value if value not in (None, "") else "N/A"), self.styles['CellText'])]
            for label, value in rows
        ]
        table = Table(data, colWidths=[1.6*inch, 5.1*inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TEXTCOLOR', (0, 0), (0, -1), colors.HexColor('#666666')),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        return table

    def _text(self, value: Any) -> str:
        # Paragraph parses a mini markup language
        return escape(str(value))

    def _format_datetime(self, dt: Any) -> str:
        """Format datetime for display."""
        if dt is None:
            return "N/A"
        if isinstance(dt, str):
            return dt[:16].replace("T", " ")
        if hasattr(dt, 'strftime'):
            return dt.strftime("%Y-%m-%d %H:%M")
        return str(dt)

    def _format_money(self, cents: Optional[int]) -> str:
        if cents is None:
            return "Not calculated"
        return f"K{cents / 100:,.2f}"

    def _format_list(self, items: Any) -> Optional[str]:
        if not items:
            return "None recorded"
        return "; ".join(str(i.get("description", i)) if isinstance(i, dict) else str(i) for i in items)


def get_pdf_generator() -> PDFGenerator:
    """Get PDF generator instance."""
    return PDFGenerator()
