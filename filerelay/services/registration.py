from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Union

import peewee

from filerelay.core.consts import Texts
from filerelay.core.schemas import Attachment, BatchSession
from filerelay.services.batches import BatchAlreadyActive, BatchSessionStore
from filerelay.services.links import LinkCodec
from filerelay.services.media import classify
from filerelay.store.database import db_proxy
from filerelay.store.models import FileRecord, UserAccount

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore
    from pyrogram.types import Message

logger = logging.getLogger(__name__)


class FileRegistrationService:
    """
    Archiva los adjuntos que llegan al bot y los registra en el índice.

    El orden es: reenviar al canal de archivo, guardar el registro, avisar al
    usuario. Si el reenvío falla no se guarda nada; si falla el guardado, el
    mensaje queda en el canal sin registro (se audita a mano).
    """

    def __init__(
        self,
        client: "Client",
        archive_channel_id: Union[int, str],
        codec: LinkCodec,
        sessions: BatchSessionStore,
    ):
        self.client = client
        self.archive_channel_id = archive_channel_id
        self.codec = codec
        self.sessions = sessions

    async def register(self, message: "Message", user_id: int) -> Optional[FileRecord]:
        """Registra el adjunto de `message`. Devuelve None si no hay adjunto o si algo falló."""
        attachment = classify(message)
        if attachment is None:
            return None

        chat_id = message.chat.id
        async with self.sessions.locked(user_id):
            archive_message_id = await self._archive(message)
            if archive_message_id is None:
                await self._notify(chat_id, Texts.SAVE_FAILED)
                return None

            record = self._store(user_id, attachment, archive_message_id)
            if record is None:
                await self._notify(chat_id, Texts.SAVE_FAILED)
                return None

            in_batch = self.sessions.add(user_id, record)

        if in_batch:
            await self._notify(chat_id, Texts.FILE_ADDED_TO_BATCH.format(name=record.file_name))
        else:
            await self._notify(chat_id, Texts.FILE_SAVED.format(link=record.link))
        return record

    async def _archive(self, message: "Message") -> Optional[int]:
        try:
            forwarded = await self.client.forward_messages(
                self.archive_channel_id, message.chat.id, message.id
            )
        except Exception as e:
            logger.error(f"Error reenviando el mensaje {message.id} al canal de archivo: {e}")
            return None

        if isinstance(forwarded, list):
            forwarded = forwarded[0]
        return forwarded.id

    def _store(
        self, user_id: int, attachment: Attachment, archive_message_id: int
    ) -> Optional[FileRecord]:
        try:
            record = UserAccount.add_file(
                user_id,
                file_name=attachment.file_name,
                file_size=attachment.file_size,
                provider_file_id=attachment.provider_file_id,
                archive_message_id=archive_message_id,
                file_type=attachment.file_type.value,
                link=self.codec.encode(archive_message_id),
            )
        except peewee.PeeweeException as e:
            logger.error(
                f"Archivo archivado en el mensaje {archive_message_id} pero no registrado: {e}"
            )
            return None

        logger.info(
            f"Archivo registrado: {record.file_name} ({record.file_size}) -> {archive_message_id}"
        )
        return record

    async def start_batch(self, chat_id: int, user_id: int) -> Optional[BatchSession]:
        async with self.sessions.locked(user_id):
            try:
                session = self.sessions.start(user_id)
            except BatchAlreadyActive as e:
                logger.info(str(e))
                await self._notify(chat_id, Texts.BATCH_ALREADY_ACTIVE)
                return None

        await self._notify(chat_id, Texts.BATCH_STARTED)
        return session

    async def end_batch(self, chat_id: int, user_id: int) -> Optional[List[FileRecord]]:
        """Cierra el lote del usuario y marca sus archivos con el `batch_id`."""
        async with self.sessions.locked(user_id):
            session = self.sessions.end(user_id)
            if session is None:
                await self._notify(chat_id, Texts.BATCH_EMPTY)
                return None

            link = self.codec.encode(session.batch_id)
            try:
                with db_proxy.atomic():
                    UserAccount.get_or_create_account(user_id)
                    FileRecord.attach_to_batch(session.files, session.batch_id, link)
            except peewee.PeeweeException as e:
                logger.error(f"Error guardando el lote {session.batch_id}: {e}")
                self.sessions.restore(session)
                await self._notify(chat_id, Texts.SAVE_FAILED)
                return None

            for record in session.files:
                record.batch_id = session.batch_id
                record.link = link

        logger.info(f"Lote {session.batch_id} guardado con {len(session.files)} archivos")
        await self._notify(chat_id, Texts.BATCH_SAVED.format(link=link))
        return session.files

    async def _notify(self, chat_id: int, text: str):
        try:
            await self.client.send_message(chat_id, text)
        except Exception as e:
            logger.error(f"No se pudo enviar mensaje a {chat_id}: {e}")
