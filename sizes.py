"""
Interactive manuscript sheet selector for the Genkō Yōshi counter
Based on standard Japanese manuscript paper formats
Grid rows are the cells per line, grid columns the lines per sheet
"""
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table
from rich import box


class ManuscriptFormatSelector:
    """Manuscript sheet selector with pre-computed grids and fast lookups"""

    SHEET_FORMATS = {
        'genkou_yoshi_20x20': {
            'name': 'Genkou Yoshi 20×20',
            'width': 364,
            'height': 257,
            'grid': {'columns': 20, 'rows': 20},
            'characters_per_page': 400,
            'margins': {'top': 25, 'bottom': 25, 'inner': 20, 'outer': 20},
            'description': 'Standard 400-character manuscript sheet (B4)',
            'character_size': 9
        },
        'genkou_yoshi_20x10': {
            'name': 'Genkou Yoshi 20×10',
            'width': 257,
            'height': 182,
            'grid': {'columns': 10, 'rows': 20},
            'characters_per_page': 200,
            'margins': {'top': 20, 'bottom': 20, 'inner': 15, 'outer': 15},
            'description': 'Half sheet, 200 characters (B5 "pera")',
            'character_size': 7
        },
        'custom': {
            'name': 'Custom',
            'width': 0,
            'height': 0,
            'grid': {'columns': 0, 'rows': 0},
            'characters_per_page': 0,
            'margins': {'top': 0, 'bottom': 0, 'inner': 0, 'outer': 0},
            'description': 'Custom user-defined sheet',
            'character_size': 0
        }
    }

    DEFAULT_FORMAT = 'genkou_yoshi_20x20'

    COMMON_FORMATS = [
        SHEET_FORMATS['genkou_yoshi_20x20'],
        SHEET_FORMATS['genkou_yoshi_20x10'],
        SHEET_FORMATS['custom'],
    ]

    # Case-insensitive lookup
    _FORMAT_LOOKUP = {name.lower(): fmt for name, fmt in SHEET_FORMATS.items()}

    def __init__(self, console=None):
        self.console = console or Console()

    @classmethod
    def get_format(cls, format_name):
        """Case-insensitive format lookup, None for unknown names"""
        return cls._FORMAT_LOOKUP.get(format_name.lower())

    @classmethod
    def default_format(cls):
        return cls.SHEET_FORMATS[cls.DEFAULT_FORMAT]

    @staticmethod
    def calculate_grid_dimensions(cells_per_line, lines_per_page, page_width, page_height, margins):
        """
        Fit a cells_per_line × lines_per_page grid into the printable area
        and derive the square size in millimetres
        """
        text_width = page_width - margins['inner'] - margins['outer']
        text_height = page_height - margins['top'] - margins['bottom']

        # Vertical sheets run lines across the width and cells down the height
        character_size = max(1, int(min(text_width / lines_per_page, text_height / cells_per_line)))

        return {
            'columns': lines_per_page,
            'rows': cells_per_line,
            'characters_per_page': cells_per_line * lines_per_page,
            'character_size': character_size
        }

    def show_formats(self):
        """Render the sheet format table"""
        table = Table(title="Manuscript Sheet Formats", box=box.ROUNDED, expand=False)

        table.add_column("#", style="cyan", width=3, justify="right")
        table.add_column("Key", style="green", width=20)
        table.add_column("Size", style="blue", width=12, justify="center")
        table.add_column("Grid", style="magenta", width=16, justify="center")
        table.add_column("Description", style="yellow")

        keys = {id(fmt): key for key, fmt in self.SHEET_FORMATS.items()}
        for i, fmt in enumerate(self.COMMON_FORMATS, 1):
            if fmt["name"] == "Custom":
                size_info = grid_info = "Custom"
            else:
                size_info = f"{fmt['width']}×{fmt['height']}mm"
                grid_info = (f"{fmt['grid']['rows']}×{fmt['grid']['columns']} "
                             f"({fmt['characters_per_page']})")

            table.add_row(
                str(i),
                keys[id(fmt)],
                size_info,
                grid_info,
                fmt["description"]
            )

        self.console.print(table)

    def select_format(self):
        """Prompt for a sheet format, building a custom one on request"""
        self.show_formats()
        self.console.print("\n[bold cyan]Select a sheet format:[/bold cyan]")

        valid_choices = [str(i) for i in range(1, len(self.COMMON_FORMATS) + 1)]

        choice = Prompt.ask(
            "Enter selection",
            choices=valid_choices,
            default="1",
            console=self.console
        )

        selected = self.COMMON_FORMATS[int(choice) - 1].copy()

        if selected["name"] == "Custom":
            self.console.print("\n[bold cyan]Custom Sheet Grid:[/bold cyan]")

            cells_per_line = max(1, int(Prompt.ask("Cells per line", default="20", console=self.console)))
            lines_per_page = max(1, int(Prompt.ask("Lines per sheet", default="20", console=self.console)))
            width = int(Prompt.ask("Width (mm)", default="364", console=self.console))
            height = int(Prompt.ask("Height (mm)", default="257", console=self.console))

            margins = {'top': 20, 'bottom': 20, 'inner': 15, 'outer': 15}
            grid = self.calculate_grid_dimensions(cells_per_line, lines_per_page, width, height, margins)

            custom_format = {
                "name": "Custom",
                "width": width,
                "height": height,
                "grid": {'columns': grid['columns'], 'rows': grid['rows']},
                "characters_per_page": grid['characters_per_page'],
                "margins": margins,
                "description": f"Custom {cells_per_line}×{lines_per_page} sheet",
                "character_size": grid['character_size']
            }

            self.console.print(f"\n[bold green]✓ Custom sheet created:[/bold green] {width}×{height}mm")
            self.console.print(f"[bold green]✓ Grid:[/bold green] {cells_per_line}×{lines_per_page} "
                               f"({grid['characters_per_page']} characters/sheet)")

            return custom_format

        self.console.print(f"\n[bold green]✓ Selected:[/bold green] {selected['name']}")
        self.console.print(f"[bold green]✓ Grid:[/bold green] {selected['grid']['rows']}×{selected['grid']['columns']} "
                           f"({selected['characters_per_page']} characters/sheet)")

        return selected
