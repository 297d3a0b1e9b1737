"""
DOCX preview of a counted document laid out on manuscript paper
Each sheet is one bordered table; vertical sheets read right to left
"""

import logging
from typing import Dict, List, Optional, Any

from docx import Document
from docx.enum.section import WD_ORIENTATION
from docx.shared import Mm

from counter import ManuscriptCounter, REASON_EMPTY_BREAK
from genkou_helpers import configure_genkou_table, configure_genkou_cell
from sizes import ManuscriptFormatSelector


class ManuscriptPreviewBuilder:
    """Builds a manuscript paper DOCX from a debug-mode count report"""

    def __init__(self, page_format: Optional[Dict] = None, font_name='Noto Serif JP', vertical=True):
        self.page_format = page_format or ManuscriptFormatSelector.default_format()
        self.cells_per_line = self.page_format['grid']['rows']
        self.lines_per_page = self.page_format['grid']['columns']
        self.font_name = font_name
        self.vertical = vertical
        self.doc = Document()
        self.setup_page_layout()

    def setup_page_layout(self):
        """Landscape sheet with the format's margins"""
        section = self.doc.sections[0]
        section.orientation = WD_ORIENTATION.LANDSCAPE
        section.page_width = Mm(self.page_format['width'])
        section.page_height = Mm(self.page_format['height'])

        margins = self.page_format['margins']
        section.top_margin = Mm(margins['top'])
        section.bottom_margin = Mm(margins['bottom'])
        section.left_margin = Mm(margins['inner'])
        section.right_margin = Mm(margins['outer'])

    def report_to_rows(self, report: Dict[str, Any]) -> List[str]:
        """
        Flatten the paragraph traces into manuscript lines, one blank
        line between paragraphs. The result has total_lines entries.
        """
        if report.get('debug_info') is None:
            raise ValueError("Preview needs a report counted with debug=True")

        rows = []
        for index, paragraph in enumerate(report['debug_info']):
            if index > 0:
                rows.append('')
            texts = [line['text'] for line in paragraph['lines']
                     if line['reason'] != REASON_EMPTY_BREAK]
            # A trailing break leaves an open, empty line without a trace entry
            texts.extend([''] * (paragraph['line_count'] - len(texts)))
            rows.extend(texts)
        return rows

    def layout_line(self, text: str) -> List[str]:
        """
        Distribute one line's characters over the squares of a line by
        their counted weight, so two half-widths share a square
        """
        cells = [''] * self.cells_per_line
        cursor = 0.0
        for char in text:
            # Kinsoku overflow hangs in the last square
            square = min(int(cursor), self.cells_per_line - 1)
            cells[square] += char
            cursor += ManuscriptCounter.get_char_width(char)
        return cells

    def paginate(self, rows: List[str]) -> List[List[str]]:
        return [rows[start:start + self.lines_per_page]
                for start in range(0, len(rows), self.lines_per_page)]

    def build(self, report: Dict[str, Any]):
        """Add one table per manuscript sheet to the document"""
        pages = self.paginate(self.report_to_rows(report))

        margins = self.page_format['margins']
        text_width = self.page_format['width'] - margins['inner'] - margins['outer']
        text_height = self.page_format['height'] - margins['top'] - margins['bottom']
        if self.vertical:
            cell_width = Mm(text_width / self.lines_per_page)
            cell_height = Mm(text_height / self.cells_per_line)
        else:
            cell_width = Mm(text_width / self.cells_per_line)
            cell_height = Mm(text_height / self.lines_per_page)
        font_size_points = max(6, min(14, cell_width.pt * 0.7, cell_height.pt * 0.7))

        for page_index, page_rows in enumerate(pages):
            if page_index > 0:
                self.doc.add_page_break()
            self._add_sheet(page_rows, cell_width, cell_height, font_size_points)

        logging.info(f"Preview laid out {len(pages)} sheet(s)")
        return self.doc

    def _add_sheet(self, page_rows, cell_width, cell_height, font_size_points):
        if self.vertical:
            table = self.doc.add_table(rows=self.cells_per_line, cols=self.lines_per_page)
        else:
            table = self.doc.add_table(rows=self.lines_per_page, cols=self.cells_per_line)
        configure_genkou_table(table, cell_width, cell_height)

        padded = page_rows + [''] * (self.lines_per_page - len(page_rows))
        for line_index, text in enumerate(padded):
            for square_index, square in enumerate(self.layout_line(text)):
                if self.vertical:
                    # First line is the rightmost column
                    cell = table.cell(square_index, self.lines_per_page - 1 - line_index)
                else:
                    cell = table.cell(line_index, square_index)
                configure_genkou_cell(cell, square, font_size_points, self.font_name, self.vertical)
        return table

    def save(self, output_path):
        try:
            self.doc.save(output_path)
        except OSError as e:
            logging.error(f"Failed to save preview: {e}")
            raise
