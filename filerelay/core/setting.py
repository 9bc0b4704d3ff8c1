from pathlib import Path
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from filerelay.core.enums import BatchRestartPolicy
from filerelay.utils import normalize_chat_id

ChatID = Annotated[
    Union[int, str],
    BeforeValidator(normalize_chat_id),
]

# Cadena vacía en el entorno equivale a "sin canal".
OptionalChatID = Annotated[
    Optional[Union[int, str]],
    BeforeValidator(normalize_chat_id),
]


class InfoField(BaseModel):
    field_name: str
    description: Optional[str]
    default_value: Any
    is_sensitive: bool


class Settings(BaseSettings):
    bot_token: str = Field(
        description="Token del bot entregado por @BotFather.",
        json_schema_extra={"is_sensitive": True},
    )
    api_id: int = Field(
        description="Telegram API ID (my.telegram.org)",
        json_schema_extra={"is_sensitive": False},
    )
    api_hash: str = Field(
        description="Telegram API hash",
        json_schema_extra={"is_sensitive": True},
    )
    bot_username: str = Field(
        description="Usuario público del bot, sin '@'. Se usa para construir los enlaces.",
        json_schema_extra={"is_sensitive": False},
    )
    archive_channel_id: ChatID = Field(
        description="Canal donde se reenvían los archivos. Sus message_id son los tokens de enlace.",
        json_schema_extra={"is_sensitive": False},
    )
    required_channel_id: OptionalChatID = Field(
        default=None,
        description="Canal al que el usuario debe pertenecer. Vacío desactiva la verificación.",
        json_schema_extra={"is_sensitive": False},
    )
    required_channel_url: Optional[str] = Field(
        default=None,
        description="Enlace del botón 'Join our channel'. Si está vacío se deriva de REQUIRED_CHANNEL_ID.",
        json_schema_extra={"is_sensitive": False},
    )
    database_url: str = Field(
        default="sqlite:///filerelay.db",
        description="URL de conexión de peewee (sqlite:///, postgresql://, mysql://).",
        json_schema_extra={"is_sensitive": True},
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interfaz donde escucha la vista web.",
        json_schema_extra={"is_sensitive": False},
    )
    port: int = Field(
        default=3000,
        description="Puerto HTTP de la vista web.",
        json_schema_extra={"is_sensitive": False},
    )
    batch_restart_policy: BatchRestartPolicy = Field(
        default=BatchRestartPolicy.DISCARD,
        description="Qué hacer con /startbatch si ya hay un lote activo: 'discard' o 'reject'.",
        json_schema_extra={"is_sensitive": False},
    )
    welcome_photo_url: Optional[str] = Field(
        default=None,
        description="Imagen opcional que acompaña el mensaje de bienvenida.",
        json_schema_extra={"is_sensitive": False},
    )
    log_path: Path = Field(
        default=Path("filerelay.log"),
        description="Ruta del archivo de log.",
        json_schema_extra={"is_sensitive": False},
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("bot_username")
    @classmethod
    def strip_at(cls, value: str) -> str:
        return value.strip().lstrip("@")

    @model_validator(mode="after")
    def require_join_url(self) -> "Settings":
        # Un ID numérico no permite armar el enlace del botón "Join our channel".
        if self.required_channel_id is not None and self.join_url is None:
            raise ValueError(
                "REQUIRED_CHANNEL_URL es obligatorio cuando REQUIRED_CHANNEL_ID es numérico."
            )
        return self

    @property
    def join_url(self) -> Optional[str]:
        """URL del canal requerido para el botón de suscripción."""
        if self.required_channel_url:
            return self.required_channel_url
        if isinstance(self.required_channel_id, str):
            return f"https://t.me/{self.required_channel_id.lstrip('@')}"
        return None

    @classmethod
    def get_info(cls, field_name: str) -> Optional[InfoField]:
        """Extrae la informacion de un campo de Settings."""
        field: FieldInfo | None = cls.model_fields.get(field_name.lower())

        assert (
            field is not None
        ), f"El campo '{field_name}' no existe en la configuración."

        if not isinstance(field.json_schema_extra, dict):
            return None

        if field.is_required():
            default_value = "Required"
        else:
            default_value = field.default

        return InfoField(
            field_name=field_name,
            description=field.description or "Sin descripción",
            default_value=default_value,
            is_sensitive=bool(field.json_schema_extra.get("is_sensitive", False)),
        )


def get_settings(env_file: Optional[Path] = None) -> Settings:
    """Carga la configuración desde el entorno y, si se indica, desde `env_file`."""
    if env_file is None:
        return Settings()  # type: ignore[call-arg]
    return Settings(_env_file=env_file)  # type: ignore[call-arg]
