#!/usr/bin/env python3
# ░▄▀▄░▀█▀░█▄█▒██▀▒█▀▄░▀█▀▒▄▀▄░█▒░▒██▀░▄▀▀
# ░▀▄▀░▒█▒▒█▒█░█▄▄░█▀▄░▒█▒░█▀█▒█▄▄░█▄▄▒▄██
"""
Genkō Yōshi Manuscript Counter - Count Japanese text in manuscript paper sheets
Reports characters, cells, lines and sheets following kinsoku shori rules
Includes per-line trace, JSON export and a manuscript paper DOCX preview
"""

import argparse
import logging
import json
import sys
from typing import Dict, Optional, Any
from pathlib import Path

import chardet
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from counter import ManuscriptCounter
from preview import ManuscriptPreviewBuilder
from sizes import ManuscriptFormatSelector

logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')


def format_number(value):
    """Render counts without a trailing .0 for whole numbers"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_manuscript_count(report: Dict[str, Any]) -> str:
    """Sheets and remaining lines, e.g. 3枚と5行"""
    if report['manuscript_pages'] == 0:
        return f"{report['manuscript_lines']}行"
    elif report['manuscript_lines'] == 0:
        return f"{report['manuscript_pages']}枚"
    return f"{report['manuscript_pages']}枚と{report['manuscript_lines']}行"


def format_status_text(full: Dict[str, Any], selection: Optional[Dict[str, Any]] = None) -> str:
    """One-line summary for a status bar"""
    full_text = f"{format_number(full['characters'])}文字 ({format_manuscript_count(full)})"
    if selection is None:
        return full_text
    selection_text = f"{format_number(selection['characters'])}文字 ({format_manuscript_count(selection)})"
    return f"選択: {selection_text} | 全体: {full_text}"


def _summary_lines(report):
    return [
        f"文字数: {format_number(report['characters'])}",
        f"マス数: {report['total_cells']}",
        f"段落数: {report['paragraphs']}",
        f"行数: {report['total_lines']}",
        f"原稿用紙: {format_manuscript_count(report)}",
    ]


def format_tooltip_text(full: Dict[str, Any], selection: Optional[Dict[str, Any]] = None) -> str:
    """Multi-line breakdown, sectioned when a selection is present"""
    if selection is None:
        return '\n'.join(_summary_lines(full))
    return '\n'.join(['[選択範囲]'] + _summary_lines(selection) + ['', '[全体]'] + _summary_lines(full))


def format_count_details(report: Dict[str, Any]) -> str:
    """Plain-text detail view with the per-line trace of every paragraph"""
    parts = [
        '=== カウント詳細 ===\n\n',
        f"総文字数: {format_number(report['characters'])}\n",
        f"総行数: {report['total_lines']}\n",
        f"総マス数: {report['total_cells']}\n",
        f"段落数: {report['paragraphs']}\n",
        f"空行数: {report['empty_paragraphs']}\n",
        f"原稿用紙: {format_manuscript_count(report)}\n\n",
        '=== 各行の詳細 ===\n\n',
    ]

    for paragraph in report.get('debug_info') or []:
        parts.append(f"【段落 {paragraph['paragraph_num']}】（{paragraph['line_count']}行）\n")
        for line in paragraph['lines']:
            parts.append(f"行{line['line_num']} ({format_number(line['char_count'])}文字): {line['text']}\n")
            parts.append(f"  → {line['reason']}\n")
        parts.append('\n')

    return ''.join(parts)


def select_lines(text: str, line_range: str) -> str:
    """
    Extract a 1-based inclusive START:END line range, either bound may be
    omitted. Raises ValueError for malformed or inverted ranges.
    """
    start_str, sep, end_str = line_range.partition(':')
    if not sep:
        raise ValueError(f"Line range must look like START:END, got '{line_range}'")

    lines = text.split('\n')
    start = int(start_str) if start_str.strip() else 1
    end = int(end_str) if end_str.strip() else len(lines)
    if start < 1 or end < start:
        raise ValueError(f"Invalid line range '{line_range}'")

    return '\n'.join(lines[start - 1:end])


def load_text(input_path: Path) -> str:
    """Read a text file, detecting its encoding with chardet"""
    with open(input_path, 'rb') as f:
        raw_data = f.read()
    encoding_result = chardet.detect(raw_data)
    detected_encoding = encoding_result['encoding'] if encoding_result['confidence'] > 0.7 else 'utf-8'
    try:
        return raw_data.decode(detected_encoding)
    except (UnicodeDecodeError, LookupError):
        logging.warning(f"Could not decode {input_path} as {detected_encoding}, falling back to UTF-8")
        return raw_data.decode('utf-8', errors='ignore')


def render_report(console: Console, report: Dict[str, Any], selection: Optional[Dict[str, Any]] = None):
    """Display the summary as a table, with a selection column when given"""
    summary_table = Table(title="原稿用紙カウント")
    summary_table.add_column("Metric", style="cyan")
    if selection is not None:
        summary_table.add_column("選択", style="magenta", justify="right")
    summary_table.add_column("全体", style="green", justify="right")

    rows = [
        ("文字数", lambda r: format_number(r['characters'])),
        ("マス数", lambda r: str(r['total_cells'])),
        ("段落数", lambda r: str(r['paragraphs'])),
        ("行数", lambda r: str(r['total_lines'])),
        ("空行数", lambda r: str(r['empty_paragraphs'])),
        ("原稿用紙", format_manuscript_count),
        ("枚数換算", lambda r: f"{r['manuscripts']:.2f}"),
    ]
    for label, getter in rows:
        values = [getter(selection)] if selection is not None else []
        values.append(getter(report))
        summary_table.add_row(label, *values)

    console.print(summary_table)


def render_debug_trace(console: Console, report: Dict[str, Any]):
    """Display the per-line trace, one table per paragraph"""
    for paragraph in report.get('debug_info') or []:
        trace_table = Table(title=f"【段落 {paragraph['paragraph_num']}】（{paragraph['line_count']}行）")
        trace_table.add_column("行", style="cyan", justify="right")
        trace_table.add_column("文字", style="magenta", justify="right")
        trace_table.add_column("内容", style="white")
        trace_table.add_column("理由", style="yellow")

        for line in paragraph['lines']:
            trace_table.add_row(
                str(line['line_num']),
                format_number(line['char_count']),
                escape(line['text']),
                escape(line['reason'])
            )

        console.print(trace_table)


def resolve_page_format(format_name, console):
    """Look up a sheet format; 'ask' opens the interactive selector"""
    if format_name is None:
        return ManuscriptFormatSelector.default_format()
    if format_name.lower() in ('ask', 'custom'):
        return ManuscriptFormatSelector(console=console).select_format()
    return ManuscriptFormatSelector.get_format(format_name)


def main(argv=None, console=None):
    """Command line entry point"""
    parser = argparse.ArgumentParser(description="Japanese Genkou Yoshi Manuscript Counter")
    parser.add_argument("input", nargs="?", help="Input text or markdown file, '-' for stdin")
    parser.add_argument("--format", default=None,
                        help="Sheet format (default genkou_yoshi_20x20, 'ask' to choose interactively)")
    parser.add_argument("--list-formats", action="store_true", help="Show available sheet formats")
    parser.add_argument("--lines", help="Also count a 1-based line range START:END as a selection")
    parser.add_argument("--debug", action="store_true", help="Show the per-line wrapping trace")
    parser.add_argument("--details", action="store_true",
                        help="Print the plain-text breakdown and per-line details")
    parser.add_argument("--json", help="Export the count report as JSON to file")
    parser.add_argument("--docx", help="Write a manuscript paper DOCX preview")
    parser.add_argument("--horizontal", action="store_true", help="Lay the preview out in horizontal rows")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    console = console or Console(color_system="auto")

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.list_formats:
        ManuscriptFormatSelector(console=console).show_formats()
        return

    console.print("[bold yellow]Japanese Genkou Yoshi Manuscript Counter[/bold yellow]")
    console.print()

    if not args.input:
        console.print("[bold red]No input file specified.[/bold red]")
        sys.exit(1)

    page_format = resolve_page_format(args.format, console)
    if page_format is None:
        console.print(f"[bold red]Error: Unknown sheet format '{escape(args.format)}'.[/bold red]")
        sys.exit(1)

    if args.input == '-':
        text = sys.stdin.read()
    else:
        input_path = Path(args.input)
        if not input_path.exists():
            console.print(f"[bold red]Error: Input file '{escape(str(input_path))}' not found.[/bold red]")
            sys.exit(1)
        try:
            text = load_text(input_path)
        except OSError as e:
            console.print(f"[bold red]Error reading file: {escape(str(e))}[/bold red]")
            sys.exit(1)

    if not text.strip():
        console.print("[bold red]Error: Input file is empty.[/bold red]")
        sys.exit(1)

    counter = ManuscriptCounter(page_format=page_format)
    with_trace = bool(args.debug or args.details or args.docx)
    report = counter.count_manuscript_cells(text, debug=with_trace)

    selection = None
    if args.lines:
        try:
            selected_text = select_lines(text, args.lines)
        except ValueError as e:
            console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
            sys.exit(1)
        selection = counter.count_manuscript_cells(selected_text)

    render_report(console, report, selection)
    console.print(escape(format_status_text(report, selection)))

    if args.debug:
        console.print()
        render_debug_trace(console, report)

    if args.details:
        console.print()
        console.print(format_tooltip_text(report, selection), markup=False, highlight=False)
        console.print()
        console.print(format_count_details(report), markup=False, highlight=False)

    if args.json:
        exported = dict(report)
        if not args.debug:
            exported['debug_info'] = None
        if selection is not None:
            exported['selection'] = selection
        with open(args.json, 'w', encoding='utf-8') as f:
            json.dump(exported, f, ensure_ascii=False, indent=2)
        console.print(f"[bold green]✓ Report JSON saved:[/bold green] {escape(args.json)}")

    if args.docx:
        builder = ManuscriptPreviewBuilder(page_format=page_format, vertical=not args.horizontal)
        builder.build(report)
        builder.save(args.docx)
        console.print(f"[bold green]✓ DOCX preview saved:[/bold green] {escape(args.docx)}")


if __name__ == "__main__":
    main()
