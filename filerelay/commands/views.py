from typing import Iterable, Optional

from rich.markup import escape
from rich.table import Table

from filerelay.console import console
from filerelay.core.consts import COLORS
from filerelay.core.setting import Settings
from filerelay.store.models import FileRecord
from filerelay.utils import mark_sensitive


class DisplayFiles:
    @staticmethod
    def show_files_table(records: Iterable[FileRecord], title: Optional[str] = None):
        table = Table(
            title=title or "Archivos guardados",
            show_header=True,
            header_style=COLORS.TABLE_TITLE,
        )
        table.add_column("Usuario", justify="right")
        table.add_column("Nombre")
        table.add_column("Tamaño", justify="right")
        table.add_column("Tipo")
        table.add_column("Mensaje", justify="right")
        table.add_column("Lote", style="dim")
        table.add_column("Enlace")

        count = 0
        for record in records:
            count += 1
            table.add_row(
                str(record.account.user_id),
                escape(record.file_name),
                record.file_size,
                record.file_type,
                str(record.archive_message_id),
                record.batch_id or "-",
                record.link,
            )

        if count == 0:
            console.print("[dim]No hay archivos registrados.[/dim]")
            return
        console.print(table)


class DisplayConfig:
    @staticmethod
    def show_config_table(settings: Settings):
        table = Table(
            title="Configuración", show_header=True, header_style=COLORS.TABLE_TITLE
        )
        table.add_column("Opción (Key)")
        table.add_column("Valor Actual")
        table.add_column("Descripción")

        for field_name, value in settings.model_dump().items():
            info = Settings.get_info(field_name)
            if info is None:
                continue

            if value is None:
                display_val = "[dim]-[/dim]"
            elif info.is_sensitive:
                display_val = mark_sensitive(str(value))
            else:
                display_val = escape(str(value))

            is_default = value == info.default_value
            value_style = "dim white" if is_default else "bold green"

            table.add_row(
                field_name.upper(),
                f"[{value_style}]{display_val}[/{value_style}]",
                escape(info.description or ""),
            )

        console.print(table)
