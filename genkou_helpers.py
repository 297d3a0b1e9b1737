"""
Helper methods for genkou yoshi preview table configuration
"""
from docx.enum.table import WD_ROW_HEIGHT_RULE
from docx.enum.text import WD_PARAGRAPH_ALIGNMENT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt


def configure_genkou_table(table, cell_width, cell_height):
    """
    Configure table to look like genkou yoshi manuscript paper
    """
    tbl = table._tbl
    tblPr = tbl.tblPr

    # Fixed layout keeps every square the same size
    tblLayout = OxmlElement('w:tblLayout')
    tblLayout.set(qn('w:type'), 'fixed')
    tblPr.append(tblLayout)

    # Grid borders, manuscript paper is traditionally ruled in red
    tblBorders = OxmlElement('w:tblBorders')
    for border_name in ['top', 'left', 'bottom', 'right', 'insideH', 'insideV']:
        border = OxmlElement(f'w:{border_name}')
        border.set(qn('w:val'), 'single')
        border.set(qn('w:sz'), '4')
        border.set(qn('w:color'), 'C0504D')
        tblBorders.append(border)
    tblPr.append(tblBorders)

    for col in table.columns:
        col.width = cell_width
        for cell in col.cells:
            cell.width = cell_width

    for row in table.rows:
        row.height = cell_height
        row.height_rule = WD_ROW_HEIGHT_RULE.EXACTLY


def configure_genkou_cell(cell, text, font_size_points, font_name, vertical=True):
    """
    Configure a single square; text may hold more than one character
    when half-width pairs or hanging punctuation share the square
    """
    cell.text = ''

    tcPr = cell._tc.get_or_add_tcPr()

    vAlign = OxmlElement('w:vAlign')
    vAlign.set(qn('w:val'), 'center')
    tcPr.append(vAlign)

    if vertical:
        textDirection = OxmlElement('w:textDirection')
        textDirection.set(qn('w:val'), 'tbRl')
        tcPr.append(textDirection)

    tcMar = OxmlElement('w:tcMar')
    for margin in ['top', 'left', 'bottom', 'right']:
        mar = OxmlElement(f'w:{margin}')
        mar.set(qn('w:w'), '0')
        mar.set(qn('w:type'), 'dxa')
        tcMar.append(mar)
    tcPr.append(tcMar)

    if text and text.strip():
        paragraph = cell.paragraphs[0]
        paragraph.alignment = WD_PARAGRAPH_ALIGNMENT.CENTER
        paragraph.paragraph_format.space_before = Pt(0)
        paragraph.paragraph_format.space_after = Pt(0)

        run = paragraph.add_run(text)
        run.font.name = font_name
        run.font.size = Pt(font_size_points)

        # East Asian font slot, otherwise Word falls back for kana and kanji
        rPr = run._r.get_or_add_rPr()
        rFonts = rPr.find(qn('w:rFonts'))
        if rFonts is None:
            rFonts = OxmlElement('w:rFonts')
            rPr.append(rFonts)
        rFonts.set(qn('w:eastAsia'), font_name)
