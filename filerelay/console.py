from contextlib import contextmanager
from typing import Iterator, List, Optional, Union

from rich.console import Console
from rich.theme import Theme

from filerelay.core.consts import COLORS

custom_theme = Theme(
    {
        "info": COLORS.INFO,
        "warning": COLORS.WARNING,
        "error": COLORS.ERROR,
        "success": COLORS.SUCCESS,
        "progress": COLORS.PROGRESS,
        "link": "underline cyan",
    }
)

console = Console(theme=custom_theme)


class UI:
    """Salida de la CLI. Los mensajes del bot van por Telegram, no por aquí."""

    PREFIXES = {
        "info": "[info]i[/]",
        "success": "[success]>[/]",
        "warning": "[warning]![/]",
        "error": "[error]X[/]",
    }

    @classmethod
    def _print(cls, kind: str, message: str, **kwargs):
        console.print(f"{cls.PREFIXES[kind]} {message}", **kwargs)

    @classmethod
    def info(cls, message: str, **kwargs):
        cls._print("info", message, **kwargs)

    @classmethod
    def success(cls, message: str, **kwargs):
        cls._print("success", message, **kwargs)

    @classmethod
    def warn(cls, message: str, **kwargs):
        cls._print("warning", message, **kwargs)

    @classmethod
    def error(cls, message: str, **kwargs):
        cls._print("error", message, **kwargs)

    @staticmethod
    def link(label: str, url: str):
        console.print(f"   {label}: [link]{url}[/]")

    @staticmethod
    def tip(message: str, commands: Optional[Union[List[str], str]] = None):
        """Muestra una sugerencia al usuario. Opcionalmente formatea un comando."""
        console.print(f"[dim cyan] Tip:[/] {message}")

        if isinstance(commands, str):
            commands = [commands]
        for command in commands or []:
            console.print(f"   [bold yellow]> {command}[/]")

    @classmethod
    @contextmanager
    def loading(cls, message: str) -> Iterator[None]:
        with console.status(f"[bold green]{message}"):
            yield
