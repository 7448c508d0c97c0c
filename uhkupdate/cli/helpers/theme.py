"""Theme for consistent Rich styling across CLI commands."""

from rich.console import Console
from rich.table import Table
from rich.theme import Theme


class Colors:
    """Color palette for CLI output."""

    SUCCESS = "bold green"
    ERROR = "bold red"
    WARNING = "bold yellow"
    INFO = "bold blue"

    PRIMARY = "cyan"
    SECONDARY = "blue"
    ACCENT = "magenta"
    MUTED = "dim"

    HEADER = "bold cyan"


class Icons:
    """Icons for message types, with text fallbacks."""

    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    BULLET = "•"
    ARROW = "→"
    KEYBOARD = "⌨️"
    FLASH = "⚡"

    _TEXT_FALLBACKS = {
        "SUCCESS": "[OK]",
        "ERROR": "[ERROR]",
        "WARNING": "[WARN]",
        "INFO": "[INFO]",
        "BULLET": "-",
        "ARROW": "->",
        "KEYBOARD": "",
        "FLASH": "",
    }

    @classmethod
    def get_icon(cls, icon_name: str, icon_mode: str = "emoji") -> str:
        """Get an icon for ``icon_mode`` ("emoji" or "text")."""
        if icon_mode == "emoji":
            return getattr(cls, icon_name, "")
        return cls._TEXT_FALLBACKS.get(icon_name, f"[{icon_name}]")

    @classmethod
    def format_with_icon(
        cls, icon_name: str, text: str, icon_mode: str = "emoji"
    ) -> str:
        icon = cls.get_icon(icon_name, icon_mode)
        if icon:
            return f"{icon} {text}"
        return text


UHK_THEME = Theme(
    {
        "success": Colors.SUCCESS,
        "error": Colors.ERROR,
        "warning": Colors.WARNING,
        "info": Colors.INFO,
        "primary": Colors.PRIMARY,
        "secondary": Colors.SECONDARY,
        "accent": Colors.ACCENT,
        "muted": Colors.MUTED,
        "header": Colors.HEADER,
    }
)


class ThemedConsole:
    """Console wrapper with the CLI theme applied."""

    def __init__(self, icon_mode: str = "emoji", stderr: bool = False) -> None:
        self.console = Console(theme=UHK_THEME, stderr=stderr)
        self.icon_mode = icon_mode

    def print_success(self, message: str) -> None:
        self.console.print(
            Icons.format_with_icon("SUCCESS", message, self.icon_mode),
            style="success",
            markup=False,
        )

    def print_error(self, message: str) -> None:
        self.console.print(
            Icons.format_with_icon("ERROR", message, self.icon_mode),
            style="error",
            markup=False,
        )

    def print_warning(self, message: str) -> None:
        self.console.print(
            Icons.format_with_icon("WARNING", message, self.icon_mode),
            style="warning",
            markup=False,
        )

    def print_info(self, message: str) -> None:
        self.console.print(
            Icons.format_with_icon("INFO", message, self.icon_mode),
            style="info",
            markup=False,
        )

    def print_list_item(self, message: str, indent: int = 1) -> None:
        spacing = "  " * indent
        bullet = Icons.get_icon("BULLET", self.icon_mode)
        self.console.print(
            f"{spacing}{bullet} {message}", style="primary", markup=False
        )


class TableStyles:
    """Predefined table layouts."""

    @staticmethod
    def create_basic_table(
        title: str = "", icon: str = "", icon_mode: str = "emoji"
    ) -> Table:
        full_title = Icons.format_with_icon(icon, title, icon_mode) if icon else title
        return Table(
            title=full_title,
            show_header=True,
            header_style=Colors.HEADER,
            border_style=Colors.SECONDARY,
        )

    @staticmethod
    def create_device_table(icon_mode: str = "emoji") -> Table:
        """Create table for attached keyboards."""
        table = TableStyles.create_basic_table("Keyboards", "KEYBOARD", icon_mode)
        table.add_column("Variant", style=Colors.PRIMARY, no_wrap=True)
        table.add_column("Model", style=Colors.ACCENT)
        table.add_column("Mode", style="bold")
        table.add_column("Serial", style=Colors.MUTED)
        return table

    @staticmethod
    def create_plan_table(icon_mode: str = "emoji") -> Table:
        """Create table for the steps of an update plan."""
        table = TableStyles.create_basic_table("Update plan", "FLASH", icon_mode)
        table.add_column("#", style=Colors.MUTED, justify="right")
        table.add_column("Step", style=Colors.PRIMARY, no_wrap=True)
        table.add_column("Argument", style=Colors.ACCENT)
        return table


def get_themed_console(icon_mode: str = "emoji", stderr: bool = False) -> ThemedConsole:
    """Get a themed console instance."""
    return ThemedConsole(icon_mode=icon_mode, stderr=stderr)
