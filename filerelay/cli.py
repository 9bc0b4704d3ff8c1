import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from filerelay import __version__
from filerelay.commands.views import DisplayConfig, DisplayFiles
from filerelay.console import UI
from filerelay.core.consts import CLI_BIN
from filerelay.core.setting import Settings, get_settings
from filerelay.logging_config import setup_logging
from filerelay.store.database import DatabaseSession
from filerelay.store.models import FileRecord, UserAccount

app = typer.Typer(help="Bot de Telegram que guarda archivos y entrega enlaces para recuperarlos.")

EnvFileOption = typer.Option(
    None, "--env-file", "-e", exists=True, dir_okay=False, help="Archivo .env a cargar."
)


def load_settings(env_file: Optional[Path]) -> Settings:
    try:
        return get_settings(env_file)
    except ValidationError as e:
        # Los errores entre campos no tienen `loc`; se muestra su mensaje.
        problems = ", ".join(
            str(err["loc"][0]).upper() if err["loc"] else err["msg"] for err in e.errors()
        )
        UI.error(f"Configuración incompleta o inválida: {problems}")
        UI.tip("Defínelas como variables de entorno o en un archivo .env.", f"{CLI_BIN} config")
        raise typer.Exit(code=1)


@app.command("run")
def run(
    env_file: Optional[Path] = EnvFileOption,
    debug: bool = typer.Option(False, "--debug", help="Muestra los logs de nivel DEBUG."),
):
    """Inicia el bot y la vista web."""
    from filerelay.server import serve

    settings = load_settings(env_file)
    setup_logging(settings, debug=debug)

    UI.info(f"filerelay {__version__} como @{settings.bot_username}")
    UI.link("Vista web", f"http://{settings.host}:{settings.port}")

    with DatabaseSession(settings.database_url):
        try:
            asyncio.run(serve(settings))
        except KeyboardInterrupt:
            pass
    UI.success("Bot detenido.")


@app.command("files")
def list_files(
    env_file: Optional[Path] = EnvFileOption,
    user_id: Optional[int] = typer.Option(None, "--user", "-u", help="Filtra por usuario."),
    batch_id: Optional[str] = typer.Option(None, "--batch", "-b", help="Filtra por lote."),
):
    """Lista los archivos registrados."""
    settings = load_settings(env_file)

    with DatabaseSession(settings.database_url):
        query = FileRecord.select(FileRecord, UserAccount).join(UserAccount)
        if user_id is not None:
            query = query.where(UserAccount.user_id == user_id)
        if batch_id is not None:
            query = query.where(FileRecord.batch_id == batch_id)

        DisplayFiles.show_files_table(query.order_by(UserAccount.id, FileRecord.id))


@app.command("config")
def show_config(env_file: Optional[Path] = EnvFileOption):
    """Muestra la configuración efectiva (los valores sensibles se enmascaran)."""
    settings = load_settings(env_file)
    DisplayConfig.show_config_table(settings)


@app.command("broadcast")
def broadcast(
    from_chat: str = typer.Argument(..., help="Chat donde está el mensaje (ID o @usuario)."),
    message_id: int = typer.Argument(..., help="ID del mensaje a difundir."),
    env_file: Optional[Path] = EnvFileOption,
):
    """Reenvía un mensaje a todos los usuarios del bot."""
    from filerelay.services.broadcast import BroadcastService
    from filerelay.telegram import BotSession
    from filerelay.utils import normalize_chat_id

    settings = load_settings(env_file)
    setup_logging(settings, level=logging.WARNING)
    source_chat = normalize_chat_id(from_chat)

    async def _run():
        async with BotSession.from_settings(settings) as client:
            return await BroadcastService(client).broadcast(source_chat, message_id)

    with DatabaseSession(settings.database_url):
        with UI.loading("Difundiendo mensaje..."):
            report = asyncio.run(_run())

    UI.success(f"Entregado a {report.delivered} de {report.total} usuarios.")
    if report.failed:
        UI.warn(f"{report.failed} envíos fallaron, revisa el log: {settings.log_path}")


def run_script():
    app()
