from typing import Optional, Union

from filerelay.core.consts import DEEP_LINK_TEMPLATE


class LinkCodec:
    """Construye y lee los enlaces `?start=` del bot.

    El token es un `batch_id` o el `archive_message_id` en texto; el codec no
    los distingue, eso lo decide la resolución.
    """

    def __init__(self, bot_username: str):
        self.bot_username = bot_username.lstrip("@")

    def encode(self, token: Union[str, int]) -> str:
        return DEEP_LINK_TEMPLATE.format(username=self.bot_username, token=token)

    @staticmethod
    def decode(start_parameter: Optional[str]) -> str:
        # Telegram ya entrega el parámetro sin escapar.
        return (start_parameter or "").strip()
