"""DOCX export for a published newsletter."""

from __future__ import annotations

from pathlib import Path

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt

from .models import Document
from .render import split_lines


def _set_title_styles(doc) -> None:
    """
    Apply minimal styling without embedding custom themes.
    Uses Calibri for the title for readability.
    """
    title_style = doc.styles["Title"]
    title_font = title_style.font
    title_font.name = "Calibri"
    title_font.size = Pt(24)

    try:
        title_style._element.rPr.rFonts.set(qn("w:eastAsia"), "Calibri")
    except AttributeError:
        pass


def build_docx(document: Document, output_path: Path) -> None:
    """Render the newsletter into a single DOCX file."""
    doc = DocxDocument()
    _set_title_styles(doc)

    title = doc.add_heading(document.title, 0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    dated = doc.add_paragraph(document.generated_date)
    dated.alignment = WD_ALIGN_PARAGRAPH.CENTER

    intro = doc.add_paragraph()
    intro.add_run(document.intro).italic = True

    for idx, section in enumerate(document.sections, start=1):
        doc.add_heading(f"{idx:02d}. {section.heading}", level=1)
        doc.add_paragraph(section.content)
        for brief in section.articles:
            doc.add_heading(brief.title, level=2)
            doc.add_paragraph(f"Source: {brief.source} | {brief.url}")
            doc.add_paragraph(brief.synopsis)
            doc.add_paragraph().add_run("Strategic Insights for Accenture").bold = True
            for line in split_lines(brief.strategic_insights):
                doc.add_paragraph(line, style="List Bullet")

    doc.add_heading("Closing Strategic Outlook", level=1)
    doc.add_paragraph(document.conclusion)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(output_path)
