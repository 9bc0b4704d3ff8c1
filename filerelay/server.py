import logging

import uvicorn

from filerelay.core.setting import Settings
from filerelay.handlers import RelayBot
from filerelay.services.batches import BatchSessionStore
from filerelay.telegram import BotSession
from filerelay.web.app import create_app

logger = logging.getLogger(__name__)


async def serve(settings: Settings):
    """
    Corre el bot y la vista web en el mismo loop hasta recibir SIGINT/SIGTERM.

    La base de datos debe estar abierta (ver `DatabaseSession`).
    """
    session = BotSession.from_settings(settings)
    client = session.build()

    sessions = BatchSessionStore(settings.batch_restart_policy)
    RelayBot.from_settings(client, settings, sessions).register(client)

    config = uvicorn.Config(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_level="warning",
    )
    web = uvicorn.Server(config)

    async with session:
        logger.info(f"Vista web en http://{settings.host}:{settings.port}")
        await web.serve()

    logger.info("Bot detenido")
