from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union

from pydantic import BaseModel

from filerelay.store.models import UserAccount

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore

logger = logging.getLogger(__name__)


class BroadcastReport(BaseModel):
    delivered: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.delivered + self.failed


class BroadcastService:
    """Reenvía un mensaje a todos los usuarios registrados."""

    def __init__(self, client: "Client"):
        self.client = client

    async def broadcast(self, from_chat_id: Union[int, str], message_id: int) -> BroadcastReport:
        report = BroadcastReport()
        user_ids = [a.user_id for a in UserAccount.select(UserAccount.user_id).order_by(UserAccount.id)]

        for user_id in user_ids:
            try:
                await self.client.forward_messages(user_id, from_chat_id, message_id)
                report.delivered += 1
            except Exception as e:
                # Un usuario que bloqueó al bot no debe detener la difusión.
                logger.error(f"No se pudo enviar la difusión a {user_id}: {e}")
                report.failed += 1

        logger.info(f"Difusión terminada: {report.delivered}/{report.total} entregados")
        return report
