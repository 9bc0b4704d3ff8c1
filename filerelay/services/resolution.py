from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List, Optional, Tuple

from filerelay.core.consts import Texts
from filerelay.core.enums import Resolution
from filerelay.services.links import LinkCodec
from filerelay.store.models import FileRecord

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore

logger = logging.getLogger(__name__)

# Entero con signo de 64 bits, en ASCII (str.isdigit acepta "²").
MESSAGE_ID_PATTERN = re.compile(r"-?[0-9]{1,19}")
MAX_MESSAGE_ID = 2**63 - 1


def parse_message_id(token: str) -> Optional[int]:
    """Devuelve el token como `archive_message_id`, o None si no puede serlo."""
    if not MESSAGE_ID_PATTERN.fullmatch(token):
        return None
    value = int(token)
    if not -MAX_MESSAGE_ID - 1 <= value <= MAX_MESSAGE_ID:
        return None
    return value


def find_records(token: str) -> Tuple[Resolution, List[FileRecord]]:
    """
    Traduce un token a los archivos que representa. Solo lectura.

    Primero se intenta como `batch_id`; solo si no hay lote con ese id se
    interpreta como `archive_message_id`. Un token nunca resuelve a ambos.
    """
    if not token:
        return Resolution.WELCOME, []

    batch = FileRecord.find_batch(token)
    if batch:
        return Resolution.BATCH, batch

    message_id = parse_message_id(token)
    if message_id is not None:
        record = FileRecord.find_by_archive_message_id(message_id)
        if record is not None:
            return Resolution.SINGLE, [record]

    return Resolution.NOT_FOUND, []


class LinkResolutionService:
    """Atiende `/start <token>`: reenvía al usuario los archivos del enlace."""

    def __init__(
        self,
        client: "Client",
        codec: LinkCodec,
        welcome_photo_url: Optional[str] = None,
    ):
        self.client = client
        self.codec = codec
        self.welcome_photo_url = welcome_photo_url

    async def resolve(self, chat_id: int, start_parameter: Optional[str]) -> Resolution:
        token = self.codec.decode(start_parameter)
        if token:
            logger.info(f"/start recibido con parámetro: {token}")

        resolution, records = find_records(token)

        if resolution == Resolution.WELCOME:
            await self.send_welcome(chat_id)
        elif resolution == Resolution.NOT_FOUND:
            await self._send_text(chat_id, Texts.FILE_NOT_FOUND)
        else:
            for record in records:
                await self.replay(chat_id, record)

        return resolution

    async def replay(self, chat_id: int, record: FileRecord) -> bool:
        """Reenvía un archivo con el método que corresponde a su tipo."""
        kind = record.kind
        if kind is None:
            logger.warning(f"Tipo de archivo desconocido '{record.file_type}' en {record.id}")
            await self._send_text(chat_id, Texts.FILE_TYPE_UNKNOWN)
            return False

        send = getattr(self.client, kind.send_method)
        try:
            await send(chat_id, record.provider_file_id)
        except Exception as e:
            logger.error(f"Error enviando {record.file_name} a {chat_id}: {e}")
            return False

        logger.debug(f"Archivo enviado: {record.file_name} -> {chat_id}")
        return True

    async def send_welcome(self, chat_id: int):
        from pyrogram.enums import ParseMode

        try:
            if self.welcome_photo_url:
                await self.client.send_photo(
                    chat_id,
                    self.welcome_photo_url,
                    caption=Texts.WELCOME,
                    parse_mode=ParseMode.HTML,
                )
            else:
                await self.client.send_message(
                    chat_id, Texts.WELCOME, parse_mode=ParseMode.HTML
                )
        except Exception as e:
            logger.error(f"Error enviando la bienvenida a {chat_id}: {e}")

    async def _send_text(self, chat_id: int, text: str):
        try:
            await self.client.send_message(chat_id, text)
        except Exception as e:
            logger.error(f"No se pudo enviar mensaje a {chat_id}: {e}")
