from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Union

from filerelay.core.consts import MEMBER_STATUSES, Texts

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore

logger = logging.getLogger(__name__)


class SubscriptionGate:
    """Exige que el usuario pertenezca a un canal antes de usar el bot.

    Si la consulta de membresía falla por cualquier motivo se niega el acceso.
    Sin canal configurado, el acceso es libre.
    """

    def __init__(
        self,
        client: "Client",
        channel_id: Optional[Union[int, str]],
        join_url: Optional[str] = None,
    ):
        self.client = client
        self.channel_id = channel_id
        self.join_url = join_url

    @property
    def enabled(self) -> bool:
        return self.channel_id is not None

    async def is_member(self, user_id: int) -> bool:
        if not self.enabled:
            return True

        from pyrogram.errors import RPCError, UserNotParticipant

        try:
            member = await self.client.get_chat_member(self.channel_id, user_id)  # type: ignore
        except UserNotParticipant:
            return False
        except RPCError as e:
            logger.warning(f"Error verificando membresía de {user_id} en {self.channel_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Error inesperado verificando membresía de {user_id}: {e}")
            return False

        status = getattr(member.status, "value", member.status)
        return str(status).lower() in MEMBER_STATUSES

    async def enforce(self, chat_id: int, user_id: int) -> bool:
        """True si el usuario puede continuar. Si no, le envía el aviso con el botón de unión."""
        if await self.is_member(user_id):
            return True

        logger.info(f"Acceso denegado a {user_id}: no pertenece a {self.channel_id}")
        await self._send_join_prompt(chat_id)
        return False

    async def _send_join_prompt(self, chat_id: int):
        from pyrogram.enums import ParseMode
        from pyrogram.types import InlineKeyboardButton, InlineKeyboardMarkup

        reply_markup = None
        if self.join_url:
            reply_markup = InlineKeyboardMarkup(
                [[InlineKeyboardButton(Texts.JOIN_BUTTON, url=self.join_url)]]
            )

        try:
            await self.client.send_message(
                chat_id,
                Texts.JOIN_REQUIRED,
                parse_mode=ParseMode.HTML,
                reply_markup=reply_markup,
            )
        except Exception as e:
            logger.error(f"No se pudo enviar el aviso de suscripción a {chat_id}: {e}")
