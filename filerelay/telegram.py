from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from filerelay.core.consts import APP_NAME

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore

    from filerelay.core.setting import Settings


logger = logging.getLogger(__name__)


class BotSession:
    def __init__(
        self,
        session_name: str,
        api_id: int,
        api_hash: str,
        bot_token: str,
        workdir: Union[Path, str] = ".",
    ):
        self.client: Optional[Client] = None
        self.name = session_name
        self.api_id = api_id
        self.api_hash = api_hash
        self.bot_token = bot_token
        self.workdir = workdir

    def build(self) -> Client:
        """Crea el cliente sin conectarlo, para poder registrar handlers antes de iniciar."""
        if self.client is not None:
            return self.client

        from pyrogram import Client  # type: ignore

        self.client = Client(
            name=self.name,  # type: ignore
            api_id=self.api_id,  # type: ignore
            api_hash=self.api_hash,  # type: ignore
            bot_token=self.bot_token,  # type: ignore
            workdir=str(self.workdir),  # type: ignore
        )
        return self.client

    async def start(self) -> Client:
        """Inicia la conexión manualmente."""
        client = self.build()
        if client.is_connected:
            return client

        logger.info(f"Iniciando bot de Telegram: {self.name}")

        from pyrogram.errors import AccessTokenInvalid, ApiIdInvalid

        try:
            await client.start()  # type: ignore
            me = await client.get_me()
            logger.info(f"Bot iniciado correctamente: {me.first_name} (@{me.username})")
            return client
        except AccessTokenInvalid as e:
            logger.debug("Error: token del bot inválido.")
            raise e
        except ApiIdInvalid as e:
            logger.debug("Error: API ID o Hash inválidos.")
            raise e
        except Exception as e:
            logger.debug(f"Error: inesperado: {e}")
            raise e

    async def stop(self):
        """Detiene la conexión manualmente."""
        if self.client and self.client.is_connected:
            logger.info("Cerrando sesión de Telegram...")
            try:
                await self.client.stop()  # type: ignore
            except Exception as e:
                logger.warning(f"Error al cerrar cliente (ignorable): {e}")
        self.client = None

    async def __aenter__(self) -> Client:
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    @classmethod
    def from_settings(cls, settings: "Settings", workdir: Union[Path, str] = ".") -> "BotSession":
        """
        Construye una `BotSession` con las credenciales de la configuración.

        Examples:
            >>> async with BotSession.from_settings(settings) as client:
            ...     await client.get_me()
        """
        return cls(
            session_name=APP_NAME,
            api_id=settings.api_id,
            api_hash=settings.api_hash,
            bot_token=settings.bot_token,
            workdir=workdir,
        )
