from docx import Document

from mea_talent_brief.docx_builder import build_docx


def test_build_docx_renders_sections_and_insights(tmp_path, sample_document):
    output_path = tmp_path / "out" / "newsletter.docx"

    build_docx(sample_document, output_path)

    doc = Document(output_path)
    texts = [p.text.strip() for p in doc.paragraphs if (p.text or "").strip()]

    assert texts[0] == "MEA Talent Intelligence"
    assert "October 2026" in texts
    assert "01. Workforce Shifts" in texts
    assert "02. Leadership" in texts
    assert "KSA expands Nitaqat quotas" in texts
    assert "Audit Saudi national ratios per unit." in texts
    assert "Closing Strategic Outlook" in texts
    assert texts[-1] == "Expect continued regulatory pressure into Q1."


def test_build_docx_styles_insight_lines_as_bullets(tmp_path, sample_document):
    output_path = tmp_path / "newsletter.docx"

    build_docx(sample_document, output_path)

    doc = Document(output_path)
    bullets = [p.text for p in doc.paragraphs if p.style.name == "List Bullet"]
    assert bullets == [
        "Audit Saudi national ratios per unit.",
        "Accelerate graduate hiring in Riyadh.",
        "Brief clients on compliance timelines.",
    ]
    intro = next(p for p in doc.paragraphs if p.text.startswith("Regional hiring"))
    assert intro.runs[0].italic is True
