"""
Export module — generates PDF, Word (.docx), and CSV reports
from an AnalysisResult without any external API or AI.
"""

import io
import csv
from datetime import datetime

from analyzer import AnalysisResult, display_score


# ─────────────────────────────────────────────────────────────────────────────
# Shared helpers
# ─────────────────────────────────────────────────────────────────────────────

RISK_COLOR = {
    "Low":    ( 16, 185, 129),   # emerald
    "Medium": (245, 158,  11),   # amber
    "High":   (220,  38,  38),   # red
}

PRIMARY = (124,  58, 237)
DARK    = ( 15,  23,  42)
GREY    = (100, 100, 100)
LGREY   = (220, 220, 220)

DISCLAIMER = ("This report is for informational purposes only and does not constitute legal advice. "
              "For important agreements, consult a qualified legal professional.")

def _now() -> str:
    return datetime.now().strftime("%B %d, %Y at %H:%M")

def _score_label(result: AnalysisResult) -> str:
    return f"{result.risk_level} Risk  ({display_score(result.risk_score)}/100)"

def _esc(text: str) -> str:
    """Escape text for ReportLab's mini-markup."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


# ─────────────────────────────────────────────────────────────────────────────
# PDF report  (ReportLab)
# ─────────────────────────────────────────────────────────────────────────────

def export_pdf(result: AnalysisResult, question: str = "", answer: str = "") -> bytes:
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
    from reportlab.lib.units import mm
    from reportlab.lib import colors
    from reportlab.platypus import (
        SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
        HRFlowable, KeepTogether
    )

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        leftMargin=20*mm, rightMargin=20*mm,
        topMargin=18*mm, bottomMargin=18*mm,
        title="LegalEase Analysis Report"
    )
    W, _ = A4
    cw = W - 40*mm

    def rgb(t): return colors.Color(*[v/255 for v in t])

    rc      = rgb(RISK_COLOR[result.risk_level])
    prim_c  = rgb(PRIMARY)
    dark_c  = rgb(DARK)
    grey_c  = rgb(GREY)
    lgrey_c = rgb(LGREY)

    base = getSampleStyleSheet()

    def sty(name, parent="Normal", **kw):
        return ParagraphStyle(name, parent=base[parent], **kw)

    s_title = sty("title", fontSize=20, leading=26, textColor=dark_c, spaceAfter=4, fontName="Helvetica-Bold")
    s_h2    = sty("h2",    fontSize=13, leading=18, textColor=dark_c, spaceBefore=14, spaceAfter=6, fontName="Helvetica-Bold")
    s_body  = sty("body",  fontSize=9,  leading=14, textColor=dark_c, spaceAfter=4)
    s_small = sty("small", fontSize=8,  leading=12, textColor=grey_c, spaceAfter=2)

    def section(title):
        story.append(Paragraph(title, s_h2))
        story.append(HRFlowable(width="100%", thickness=0.5, color=lgrey_c, spaceAfter=8))

    story = []

    # ── Header ──────────────────────────────────────────────────────────────
    header_tbl = Table([[
        Paragraph("LegalEase Analysis Report", s_title),
        Paragraph(f"Generated {_now()}", s_small),
    ]], colWidths=[cw*0.72, cw*0.28])
    header_tbl.setStyle(TableStyle([
        ("VALIGN",        (0,0), (-1,-1), "BOTTOM"),
        ("ALIGN",         (1,0), (1,0),   "RIGHT"),
        ("BOTTOMPADDING", (0,0), (-1,-1), 8),
    ]))
    story.append(header_tbl)
    story.append(HRFlowable(width="100%", thickness=2, color=prim_c, spaceAfter=12))

    # ── Summary ─────────────────────────────────────────────────────────────
    section("Summary")
    story.append(Paragraph(_esc(result.summary) or "No summary available.", s_body))
    if result.highlights:
        story.append(Paragraph("<b>Flagged terms:</b> " + ", ".join(_esc(h) for h in result.highlights), s_small))
    story.append(Spacer(1, 6))

    # ── Risk banner ─────────────────────────────────────────────────────────
    risk_tbl = Table([[
        Paragraph(f"<b>{result.risk_level} Risk</b>", sty("rk", fontSize=14, textColor=rc, fontName="Helvetica-Bold")),
        Paragraph(f"<b>{display_score(result.risk_score)}/100</b>", sty("rs", fontSize=14, textColor=rc, fontName="Helvetica-Bold", alignment=2)),
    ]], colWidths=[cw*0.6, cw*0.4])
    risk_tbl.setStyle(TableStyle([
        ("BOX",           (0,0), (-1,-1), 1.5, rc),
        ("VALIGN",        (0,0), (-1,-1), "MIDDLE"),
        ("LEFTPADDING",   (0,0), (-1,-1), 10),
        ("RIGHTPADDING",  (0,0), (-1,-1), 10),
        ("TOPPADDING",    (0,0), (-1,-1), 10),
        ("BOTTOMPADDING", (0,0), (-1,-1), 10),
    ]))
    story.append(KeepTogether([risk_tbl]))
    story.append(Spacer(1, 8))

    if result.risks:
        for risk in result.risks:
            story.append(Paragraph(f"!&nbsp;&nbsp;{_esc(risk)}", s_body))
    else:
        story.append(Paragraph("No specific risk warnings detected.", s_small))

    # ── Advice ──────────────────────────────────────────────────────────────
    section("Review &amp; Advice")
    for i, tip in enumerate(result.advice, 1):
        t = Table([[
            Paragraph(f"<b>{i}</b>", sty(f"n{i}", fontSize=9, textColor=prim_c, fontName="Helvetica-Bold", alignment=1)),
            Paragraph(_esc(tip), s_body),
        ]], colWidths=[10*mm, cw - 10*mm])
        t.setStyle(TableStyle([
            ("VALIGN",        (0,0), (-1,-1), "TOP"),
            ("TOPPADDING",    (0,0), (-1,-1), 4),
            ("BOTTOMPADDING", (0,0), (-1,-1), 4),
            ("LINEBELOW",     (0,0), (-1,0),  0.3, lgrey_c),
        ]))
        story.append(t)

    # ── Q&A ─────────────────────────────────────────────────────────────────
    if question.strip() and answer:
        section("Your Question")
        story.append(Paragraph(f"<b>Q:</b> {_esc(question)}", s_body))
        story.append(Paragraph(f"<b>A:</b> {_esc(answer)}", s_body))

    # ── Footer ──────────────────────────────────────────────────────────────
    story.append(Spacer(1, 16))
    story.append(HRFlowable(width="100%", thickness=0.5, color=lgrey_c))
    story.append(Paragraph(DISCLAIMER, sty("foot", fontSize=7, leading=10, textColor=grey_c)))

    doc.build(story)
    return buf.getvalue()


# ─────────────────────────────────────────────────────────────────────────────
# Word (.docx) export
# ─────────────────────────────────────────────────────────────────────────────

def export_word(result: AnalysisResult, question: str = "", answer: str = "") -> bytes:
    from docx import Document
    from docx.shared import Pt, RGBColor, Cm

    doc = Document()

    for section in doc.sections:
        section.top_margin    = Cm(2)
        section.bottom_margin = Cm(2)
        section.left_margin   = Cm(2.5)
        section.right_margin  = Cm(2.5)

    def add_para(text="", bold=False, italic=False, color=None, size=10):
        p = doc.add_paragraph()
        run = p.add_run(text)
        run.bold, run.italic = bold, italic
        run.font.size = Pt(size)
        if color: run.font.color.rgb = RGBColor(*color)
        return p

    title = doc.add_heading("LegalEase Analysis Report", 0)
    title.runs[0].font.color.rgb = RGBColor(*DARK)
    add_para(f"Generated: {_now()}", color=GREY, size=9)

    # ── Summary ──────────────────────────────────────────────────────────────
    doc.add_heading("Summary", 1)
    add_para(result.summary or "No summary available.", size=10)
    if result.highlights:
        add_para("Flagged terms: " + ", ".join(result.highlights), italic=True, color=GREY, size=9)

    # ── Risk ─────────────────────────────────────────────────────────────────
    doc.add_heading("Risk Assessment", 1)
    add_para(_score_label(result), bold=True, color=RISK_COLOR[result.risk_level], size=14)
    for risk in result.risks:
        p = doc.add_paragraph(style="List Bullet")
        p.add_run(risk).font.size = Pt(9)
    if not result.risks:
        add_para("No specific risk warnings detected.", color=GREY, size=9)

    # ── Advice ───────────────────────────────────────────────────────────────
    doc.add_heading("Review & Advice", 1)
    for tip in result.advice:
        p = doc.add_paragraph(style="List Number")
        p.add_run(tip).font.size = Pt(9)

    # ── Q&A ──────────────────────────────────────────────────────────────────
    if question.strip() and answer:
        doc.add_heading("Your Question", 1)
        add_para(f"Q: {question}", bold=True, size=9)
        add_para(f"A: {answer}", size=9)

    add_para(DISCLAIMER, italic=True, color=GREY, size=8)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


# ─────────────────────────────────────────────────────────────────────────────
# CSV export
# ─────────────────────────────────────────────────────────────────────────────

def export_csv(result: AnalysisResult, question: str = "", answer: str = "") -> bytes:
    buf = io.StringIO()
    w = csv.writer(buf)

    w.writerow(["SECTION", "FIELD", "VALUE"])
    w.writerow(["Summary", "Risk Level", result.risk_level])
    w.writerow(["Summary", "Risk Score", round(result.risk_score, 1)])
    w.writerow(["Summary", "Summary",    result.summary])
    w.writerow(["Summary", "Highlights", " | ".join(result.highlights)])

    for i, risk in enumerate(result.risks, 1):
        w.writerow(["Risks", i, risk])
    for i, tip in enumerate(result.advice, 1):
        w.writerow(["Advice", i, tip])

    if question.strip() and answer:
        w.writerow(["Question", "Q", question])
        w.writerow(["Question", "A", answer])

    return buf.getvalue().encode("utf-8-sig")  # BOM for Excel compatibility
