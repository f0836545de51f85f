"""
Rate calendar PDF export.

One table per month: date, live rate, suggested rate, active rate,
override, sell rate, occupancy, pickup and source.
"""

from collections import OrderedDict
from datetime import date
from io import BytesIO

from dateutil.relativedelta import relativedelta
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, PageBreak


HEADER = ['Date', 'Day', 'Live', 'Suggested', 'Active', 'Override', 'Sell', 'Occ %', 'Pickup', 'Source']

HEADER_BG = colors.HexColor('#1e3a5f')
FROZEN_BG = colors.HexColor('#e5e7eb')
PENDING_BG = colors.HexColor('#fef3c7')
MANUAL_BG = colors.HexColor('#dbeafe')


def group_rows_by_month(rows):
    """
    Group calendar rows by month, including empty months in between.

    Returns:
        OrderedDict of first-of-month date → list of rows
    """
    if not rows:
        return OrderedDict()

    dates = [date.fromisoformat(row['date']) for row in rows]
    month = min(dates).replace(day=1)
    last = max(dates).replace(day=1)

    groups = OrderedDict()
    while month <= last:
        groups[month] = []
        month += relativedelta(months=1)

    for row, stay_date in zip(rows, dates):
        groups[stay_date.replace(day=1)].append(row)
    return groups


class CalendarPDFExporter:
    """
    Usage:
        exporter = CalendarPDFExporter(prop)
        buffer = exporter.render(workspace.rows())
    """

    def __init__(self, prop):
        self.prop = prop
        self.currency = prop.get_currency_symbol()

    def _money(self, value):
        return f"{self.currency}{value}" if value is not None else '-'

    def _build_month_table(self, rows):
        data = [HEADER]
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_BG),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('ALIGN', (2, 0), (-2, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ]

        for index, row in enumerate(rows, start=1):
            data.append([
                row['date'],
                row['day_of_week'],
                self._money(row['live_rate']),
                self._money(row['suggested_rate']),
                self._money(row['rate']),
                self._money(row.get('override')),
                self._money(row.get('sell_rate')),
                row['occupancy'][:5],
                str(row['pickup']),
                row['source'],
            ])
            if row['is_frozen']:
                style.append(('BACKGROUND', (0, index), (-1, index), FROZEN_BG))
            elif row.get('override_state') == 'pending':
                style.append(('BACKGROUND', (0, index), (-1, index), PENDING_BG))
            elif row['source'] == 'Manual':
                style.append(('BACKGROUND', (0, index), (-1, index), MANUAL_BG))

        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle(style))
        return table

    def render(self, rows):
        """Generate the PDF document and return it as a BytesIO."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            rightMargin=15*mm,
            leftMargin=15*mm,
            topMargin=15*mm,
            bottomMargin=15*mm
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'CustomTitle',
            parent=styles['Heading1'],
            fontSize=18,
            spaceAfter=6,
            textColor=HEADER_BG
        )
        subtitle_style = ParagraphStyle(
            'CustomSubtitle',
            parent=styles['Normal'],
            fontSize=10,
            textColor=colors.grey,
            spaceAfter=12
        )

        story = [
            Paragraph(f"Rate Calendar - {self.prop.name}", title_style),
            Paragraph(
                f"{self.prop.organization.name} | Generated: {timezone.now().strftime('%B %d, %Y at %H:%M')}",
                subtitle_style
            ),
            Spacer(1, 6*mm),
        ]

        groups = group_rows_by_month(rows)
        if not groups:
            story.append(Paragraph("No calendar data loaded.", styles['Normal']))

        first = True
        for month, month_rows in groups.items():
            if not month_rows:
                continue
            if not first:
                story.append(PageBreak())
            first = False
            story.append(Paragraph(month.strftime('%B %Y'), styles['Heading2']))
            story.append(self._build_month_table(month_rows))

        doc.build(story)
        buffer.seek(0)
        return buffer
