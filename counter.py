"""
Manuscript counter - Genkou Yoshi cell, line and sheet counting
Wraps text onto 20-cell manuscript lines following kinsoku shori rules
and aggregates per-paragraph results into document statistics
"""

import re
import math
import logging
from typing import Dict, List, Optional, Any


# Reason tags recorded in the per-line debug trace
REASON_LINE_BREAK = 'line break'
REASON_EMPTY_BREAK = 'suppressed empty break'
REASON_FULL_LINE = '{width}-cell break'
REASON_FULL_LINE_KINSOKU = '{width}-cell + line-start exception: {char}'
REASON_LINE_START = 'line-start exception: {char}'
REASON_LINE_END = 'line-end exception'
REASON_OVERFLOW = 'exceeds {width} cells'
REASON_FINAL_LINE = 'final line'


class ManuscriptCounter:
    """Counts manuscript paper cells, lines and sheets for Japanese text"""

    # Characters that must never begin a line
    GYOUTOU_KINSOKU = frozenset([
        '、', '。',
        '）', '」', '』', '】'
    ])

    # Characters that must never end a line
    GYOUMATSU_KINSOKU = frozenset([
        '（', '「', '『', '【'
    ])

    HALF_WIDTH_RANGES = (
        (0x20, 0x7E),      # Printable ASCII
        (0xFF61, 0xFF9F),  # Half-width katakana
    )

    DEFAULT_CELLS_PER_LINE = 20
    DEFAULT_LINES_PER_PAGE = 20

    _line_ending_pattern = re.compile(r'\r\n?')
    _paragraph_pattern = re.compile(r'\n\n+')

    # Applied in order; later patterns must not see artifacts of earlier ones
    _markdown_rules = (
        (re.compile(r'^#{1,6}\s+', re.M), ''),
        (re.compile(r'(\*\*|__)(.*?)\1'), r'\2'),
        (re.compile(r'(\*|_)(.*?)\1'), r'\2'),
        (re.compile(r'(?<!!)\[([^\]]+)\]\([^)]+\)'), r'\1'),
        (re.compile(r'!\[([^\]]*)\]\([^)]+\)'), ''),
        (re.compile(r'```[\s\S]*?```'), ''),
        (re.compile(r'`([^`]+)`'), r'\1'),
        (re.compile(r'^[*\-+]\s+', re.M), ''),
        (re.compile(r'^[0-9]+\.\s+', re.M), ''),
        (re.compile(r'^>\s+', re.M), ''),
        (re.compile(r'^(\*{3,}|-{3,}|_{3,})$', re.M), ''),
        (re.compile(r'<[^>]+>'), ''),
    )

    def __init__(self, page_format=None):
        self.cells_per_line = self.DEFAULT_CELLS_PER_LINE
        self.lines_per_page = self.DEFAULT_LINES_PER_PAGE
        cells_per_page = None

        # Manuscript sheets store cells per line as grid rows.
        # Zero dimensions (the unfilled custom placeholder) keep the defaults.
        if page_format and 'grid' in page_format:
            self.cells_per_line = page_format['grid'].get('rows') or self.cells_per_line
            self.lines_per_page = page_format['grid'].get('columns') or self.lines_per_page
            cells_per_page = page_format.get('characters_per_page')

        self.cells_per_page = cells_per_page or self.cells_per_line * self.lines_per_page

    @classmethod
    def get_char_width(cls, char: str) -> float:
        """Cell weight of a single character: 0.5 for half-width, 1.0 otherwise"""
        code = ord(char[0])
        for low, high in cls.HALF_WIDTH_RANGES:
            if low <= code <= high:
                return 0.5
        return 1.0

    @classmethod
    def is_line_start_forbidden(cls, char):
        return char in cls.GYOUTOU_KINSOKU

    @classmethod
    def is_line_end_forbidden(cls, char):
        return char in cls.GYOUMATSU_KINSOKU

    @classmethod
    def remove_markdown_syntax(cls, text: str) -> str:
        """
        Strip common markdown markup before counting.
        Best-effort textual cleanup, nested or malformed markup may survive.
        """
        cleaned = text
        for pattern, replacement in cls._markdown_rules:
            cleaned = pattern.sub(replacement, cleaned)
        return cleaned

    def empty_report(self, debug=False) -> Dict[str, Any]:
        return {
            'total_cells': 0,
            'characters': 0.0,
            'total_lines': 0,
            'paragraphs': 0,
            'manuscripts': 0.0,
            'manuscript_pages': 0,
            'manuscript_lines': 0,
            'empty_paragraphs': 0,
            'debug_info': [] if debug else None,
        }

    def count_manuscript_cells(self, text: str, debug: bool = False) -> Dict[str, Any]:
        """
        Count a whole document.

        Paragraphs are separated by blank lines; every gap between two
        non-empty paragraphs is charged as one full blank manuscript line.
        """
        if not text or not text.strip():
            return self.empty_report(debug)

        text = self._line_ending_pattern.sub('\n', text)
        clean_text = self.remove_markdown_syntax(text)

        total_cells = 0
        total_chars = 0.0
        total_lines = 0
        paragraph_count = 0
        all_debug_info = [] if debug else None

        for paragraph in self._paragraph_pattern.split(clean_text):
            if not paragraph.strip():
                continue

            paragraph_count += 1
            result = self.count_paragraph_cells(paragraph, debug)
            total_cells += result['cells']
            total_chars += result['characters']
            total_lines += result['lines']

            logging.debug(f"Paragraph {paragraph_count}: {result['lines']} lines, "
                          f"{result['characters']} characters, {result['cells']} cells")

            if debug:
                all_debug_info.append({
                    'paragraph_num': paragraph_count,
                    'line_count': result['lines'],
                    'lines': result['debug_info'],
                })

        empty_lines = max(paragraph_count - 1, 0)
        total_lines += empty_lines
        total_cells += empty_lines * self.cells_per_line

        return {
            'total_cells': total_cells,
            'characters': total_chars,
            'total_lines': total_lines,
            'paragraphs': paragraph_count,
            'manuscripts': total_cells / self.cells_per_page,
            'manuscript_pages': total_lines // self.lines_per_page,
            'manuscript_lines': total_lines % self.lines_per_page,
            'empty_paragraphs': empty_lines,
            'debug_info': all_debug_info,
        }

    def count_paragraph_cells(self, paragraph: str, debug: bool = False) -> Dict[str, Any]:
        """
        Wrap one paragraph onto manuscript lines.

        A line closes when it reaches the line width. A line-start forbidden
        character is pulled onto the full line instead of opening the next
        one, and a line-end forbidden character that does not fit is carried
        over to begin the next line.
        """
        width_limit = self.cells_per_line
        chars = list(paragraph)
        char_total = len(chars)

        current_line = 0.0
        current_text = ''
        lines = 1
        total_chars = 0.0
        trace: List[Dict[str, Any]] = []

        def record(reason, text, char_count):
            if debug:
                trace.append({
                    'line_num': lines,
                    'text': text,
                    'char_count': char_count,
                    'reason': reason,
                })

        i = 0
        while i < char_total:
            char = chars[i]

            if char == '\n':
                # A break with nothing placed on the line does not open a new one
                if current_line > 0:
                    record(REASON_LINE_BREAK, current_text, current_line)
                    lines += 1
                    current_line = 0.0
                    current_text = ''
                else:
                    record(REASON_EMPTY_BREAK, current_text, 0)
                i += 1
                continue

            char_width = self.get_char_width(char)
            total_chars += char_width

            if current_line + char_width == width_limit:
                current_line += char_width
                current_text += char

                next_index = i + 1
                if next_index < char_total and self.is_line_start_forbidden(chars[next_index]):
                    # Hang the forbidden character on this line
                    i = next_index
                    next_char = chars[i]
                    next_width = self.get_char_width(next_char)
                    total_chars += next_width
                    current_line += next_width
                    current_text += next_char
                    record(REASON_FULL_LINE_KINSOKU.format(width=width_limit, char=next_char),
                           current_text, current_line)
                else:
                    record(REASON_FULL_LINE.format(width=width_limit), current_text, current_line)

                current_text = ''
                if i + 1 < char_total:
                    lines += 1
                    current_line = 0.0

            elif current_line + char_width > width_limit:
                if self.is_line_start_forbidden(char):
                    current_line += char_width
                    current_text += char
                    record(REASON_LINE_START.format(char=char), current_text, current_line)
                    current_text = ''
                    if i + 1 < char_total:
                        lines += 1
                        current_line = 0.0
                else:
                    if self.is_line_end_forbidden(char):
                        record(REASON_LINE_END, current_text, current_line)
                    else:
                        record(REASON_OVERFLOW.format(width=width_limit), current_text, current_line)
                    lines += 1
                    current_line = char_width
                    current_text = char

            else:
                current_line += char_width
                current_text += char

            i += 1

        if current_text and current_line > 0:
            record(REASON_FINAL_LINE, current_text, current_line)

        return {
            'cells': math.ceil(total_chars + lines),
            'characters': total_chars,
            'lines': lines,
            'debug_info': trace if debug else None,
        }


def count_document(text: str, debug: bool = False, page_format: Optional[Dict] = None) -> Dict[str, Any]:
    """Count manuscript statistics for a document"""
    return ManuscriptCounter(page_format=page_format).count_manuscript_cells(text, debug)
