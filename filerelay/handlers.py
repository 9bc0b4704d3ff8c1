from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from filerelay.core.consts import Commands, Texts
from filerelay.services.batches import BatchSessionStore
from filerelay.services.gate import SubscriptionGate
from filerelay.services.links import LinkCodec
from filerelay.services.registration import FileRegistrationService
from filerelay.services.resolution import LinkResolutionService

if TYPE_CHECKING:
    from pyrogram import Client  # type: ignore
    from pyrogram.types import Message

    from filerelay.core.setting import Settings

logger = logging.getLogger(__name__)

Handler = Callable[["RelayBot", "Client", "Message"], Awaitable[None]]

ALL_COMMANDS = [Commands.START, Commands.HELP, Commands.START_BATCH, Commands.END_BATCH]


def sender_id(message: "Message") -> int:
    return message.from_user.id if message.from_user else message.chat.id


def gated(handler: Handler) -> Handler:
    """Aplica la verificación de suscripción y aísla los errores del evento."""

    @functools.wraps(handler)
    async def wrapper(self: "RelayBot", client: "Client", message: "Message"):
        try:
            if not await self.gate.enforce(message.chat.id, sender_id(message)):
                return
            await handler(self, client, message)
        except Exception as e:
            logger.exception(f"Error procesando el mensaje {message.id} de {message.chat.id}: {e}")

    return wrapper


class RelayBot:
    """Conecta los comandos de Telegram con los servicios del bot."""

    def __init__(
        self,
        gate: SubscriptionGate,
        registration: FileRegistrationService,
        resolution: LinkResolutionService,
    ):
        self.gate = gate
        self.registration = registration
        self.resolution = resolution

    @classmethod
    def from_settings(
        cls,
        client: "Client",
        settings: "Settings",
        sessions: BatchSessionStore | None = None,
    ) -> "RelayBot":
        codec = LinkCodec(settings.bot_username)
        sessions = sessions or BatchSessionStore(settings.batch_restart_policy)
        return cls(
            gate=SubscriptionGate(client, settings.required_channel_id, settings.join_url),
            registration=FileRegistrationService(
                client, settings.archive_channel_id, codec, sessions
            ),
            resolution=LinkResolutionService(client, codec, settings.welcome_photo_url),
        )

    @gated
    async def on_start(self, client: "Client", message: "Message"):
        command = message.command or []
        param = command[1] if len(command) > 1 else ""
        await self.resolution.resolve(message.chat.id, param)

    @gated
    async def on_help(self, client: "Client", message: "Message"):
        from pyrogram.enums import ParseMode

        await client.send_message(message.chat.id, Texts.HELP, parse_mode=ParseMode.HTML)

    @gated
    async def on_start_batch(self, client: "Client", message: "Message"):
        await self.registration.start_batch(message.chat.id, sender_id(message))

    @gated
    async def on_end_batch(self, client: "Client", message: "Message"):
        await self.registration.end_batch(message.chat.id, sender_id(message))

    @gated
    async def on_media(self, client: "Client", message: "Message"):
        await self.registration.register(message, sender_id(message))

    @gated
    async def on_other(self, client: "Client", message: "Message"):
        # Solo pasa por la verificación de suscripción.
        logger.debug(f"Mensaje sin adjunto de {sender_id(message)} ignorado")

    def register(self, client: "Client"):
        from pyrogram import filters
        from pyrogram.handlers import MessageHandler

        media = filters.document | filters.photo | filters.video | filters.audio
        private = filters.private

        client.add_handler(MessageHandler(self.on_start, filters.command(Commands.START) & private))
        client.add_handler(MessageHandler(self.on_help, filters.command(Commands.HELP) & private))
        client.add_handler(
            MessageHandler(self.on_start_batch, filters.command(Commands.START_BATCH) & private)
        )
        client.add_handler(
            MessageHandler(self.on_end_batch, filters.command(Commands.END_BATCH) & private)
        )
        client.add_handler(MessageHandler(self.on_media, private & media))
        client.add_handler(
            MessageHandler(self.on_other, private & ~media & ~filters.command(ALL_COMMANDS))
        )
        logger.info("Handlers registrados")
