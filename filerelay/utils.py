import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: Optional[int]) -> str:
    """Convierte bytes a una cadena legible en base 1024.

    Se elige la mayor unidad `i` con `1024**i <= size` y se redondea al entero
    más cercano (0.5 hacia arriba).

    Examples:
        >>> format_file_size(0)
        '0 Byte'
        >>> format_file_size(1023)
        '1023 Bytes'
        >>> format_file_size(1048576)
        '1 MB'
    """
    if not size:
        return "0 Byte"
    if size < 0:
        raise ValueError(f"Tamaño negativo: {size}")

    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1

    value = size / 1024**index
    return f"{int(value + 0.5)} {SIZE_UNITS[index]}"


def normalize_chat_id(value: Union[str, int, None]) -> Union[str, int, None]:
    """Acepta "-100123", -100123 o "@canal" y devuelve int o "@canal". Vacío -> None."""
    if value is None or isinstance(value, int):
        return value

    value = str(value).strip()
    if not value:
        return None
    if value.lstrip("-").isdigit():
        return int(value)

    if value.startswith("https://t.me/"):
        value = value.removeprefix("https://t.me/")

    if not value.startswith("@"):
        value = f"@{value}"
    return value


def mark_sensitive(value: Union[int, str]) -> str:
    if not isinstance(value, (str, int)):
        raise ValueError(
            "mark_sensitive solo admite valores de tipo str o int para enmascarar."
        )

    value = str(value)
    if len(value) <= 6:
        display_val = "•" * len(value)
    else:
        display_val = value[:3] + "•" * (len(value) - 6) + value[-3:]

    return display_val
