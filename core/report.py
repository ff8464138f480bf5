import io
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.graphics import renderSVG
from reportlab.graphics.charts.piecharts import Pie
from reportlab.graphics.shapes import Drawing, String
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from core.storage import StoredPatient
from core.utils import PALETTE, RISK_LABELS

CHART_COLORS = ["#3D9FFF", "#E0EFFF"]

TABLE_STYLE = TableStyle([
    ('BACKGROUND', (0,0), (-1,0), colors.HexColor('#eeeeee')),
    ('GRID', (0,0), (-1,-1), 0.25, colors.grey),
    ('FONTNAME', (0,0), (-1,0), 'Helvetica-Bold'),
    ('VALIGN', (0,0), (-1,-1), 'TOP'),
    ('ROWBACKGROUNDS', (0,1), (-1,-1), [colors.white, colors.HexColor('#fafafa')]),
])


def risk_chart(score: float, size: int = 120) -> Drawing:
    """Pie of the risk score against the remainder of 100."""
    d = Drawing(size, size)
    slices = [(v, c) for v, c in zip((score, 100 - score), CHART_COLORS) if v > 0]
    pie = Pie()
    pie.x = pie.y = 10
    pie.width = pie.height = size - 20
    pie.data = [v for v, _ in slices]
    for i, (_, c) in enumerate(slices):
        pie.slices[i].fillColor = colors.HexColor(c)
        pie.slices[i].strokeColor = colors.white
    d.add(pie)
    d.add(String(size / 2, 0, f"Score {int(score)}/100", textAnchor="middle", fontSize=8))
    return d


def risk_chart_svg(score: float, size: int = 160) -> str:
    """The same pie as inline SVG markup, for the results page."""
    svg = renderSVG.drawToString(risk_chart(score, size))
    return svg[svg.index("<svg"):]


def _assessed_on(ts: str) -> str:
    try:
        return datetime.fromisoformat(ts).strftime("%B %d, %Y %H:%M")
    except ValueError:
        return ts


def _table(header: list[str], rows: list[list[str]], widths: list[int], style) -> Table:
    body = [[Paragraph(escape(str(c)), style) for c in r] for r in rows]
    tbl = Table([header] + body, hAlign='LEFT', colWidths=widths)
    tbl.setStyle(TABLE_STYLE)
    return tbl


def build_pdf(stored: StoredPatient, rows: list[list[str]], summary: list[list[str]] | None = None) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title="Thyroid Risk Report")
    styles = getSampleStyleSheet()
    story = []
    info = stored.record.personal_info

    story.append(Paragraph("<b>Thyroid Cancer Risk Assessment</b>", styles["Title"]))
    pinfo = (
        f"<b>Patient:</b> {escape(info.full_name) or '—'} &nbsp;&nbsp; "
        f"<b>Gender:</b> {info.gender.capitalize()} &nbsp;&nbsp; "
        f"<b>Age:</b> {info.age} &nbsp;&nbsp; "
        f"<b>Assessed:</b> {_assessed_on(stored.timestamp)}"
    )
    story.append(Paragraph(pinfo, styles["Normal"]))
    story.append(Spacer(1, 8))

    tier = stored.tier
    story.append(Paragraph(
        f"<b>Risk Level:</b> <font color='{PALETTE.get(tier, PALETTE['info'])}'>{RISK_LABELS.get(tier, tier)}</font>",
        styles["Heading2"],
    ))
    story.append(risk_chart(stored.score))
    story.append(Spacer(1, 8))

    if rows:
        story.append(_table(["Metric", "Value", "Interpretation"], rows, [130, 100, 260], styles["BodyText"]))

    if summary:
        story.append(Spacer(1, 10))
        story.append(Paragraph("<b>Patient Data Summary</b>", styles["Heading3"]))
        story.append(_table(["Field", "Value"], summary, [200, 290], styles["BodyText"]))

    story.append(Spacer(1, 10))
    story.append(Paragraph(
        "<b>Disclaimer:</b> Screening &amp; education only; not medical advice.",
        styles['Italic']
    ))

    doc.build(story)
    return buf.getvalue()
