import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, cast

import peewee

from filerelay.core.enums import FileType
from filerelay.store.database import db_proxy

if TYPE_CHECKING:
    from filerelay.core.schemas import FileRecordSchema

logger = logging.getLogger(__name__)


class BaseModel(peewee.Model):
    created_at = cast(datetime, peewee.DateTimeField(default=datetime.now))
    updated_at = peewee.DateTimeField(default=datetime.now)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.now()
        return super().save(*args, **kwargs)

    class Meta:
        database = db_proxy


class UserAccount(BaseModel):
    """Un usuario de Telegram que ha guardado archivos en el bot."""

    id: int
    files: peewee.ModelSelect  # type: ignore

    user_id = cast(int, peewee.BigIntegerField(unique=True))

    @staticmethod
    def find_by_user_id(user_id: int) -> Optional["UserAccount"]:
        return UserAccount.get_or_none(UserAccount.user_id == user_id)

    @staticmethod
    def get_or_create_account(user_id: int) -> Tuple["UserAccount", bool]:
        account, created = UserAccount.get_or_create(user_id=user_id)
        if created:
            logger.info(f"Nueva cuenta registrada: {user_id}")
        return account, created

    @staticmethod
    def add_file(user_id: int, **fields) -> "FileRecord":
        """Agrega un FileRecord a la cuenta de `user_id`, creándola si no existe."""
        with db_proxy.atomic():
            account, _ = UserAccount.get_or_create_account(user_id)
            record = FileRecord.create(account=account, **fields)
            account.save(only=[UserAccount.updated_at])
        return record

    @staticmethod
    def find_by_file_field(field: str, value) -> List["UserAccount"]:
        """Cuentas que tienen al menos un archivo con `field == value`.

        Args:
            field: nombre de la columna de FileRecord (`batch_id`, `archive_message_id`, ...).
            value: valor buscado.

        Raises:
            ValueError: Si `field` no es una columna de FileRecord.
        """
        column = FileRecord._meta.fields.get(field)  # type: ignore[attr-defined]
        if column is None:
            raise ValueError(f"FileRecord no tiene el campo '{field}'.")

        query = (
            UserAccount.select()
            .join(FileRecord)
            .where(column == value)
            .distinct()
            .order_by(UserAccount.id)
        )
        return list(query)

    def ordered_files(self) -> List["FileRecord"]:
        return list(self.files.order_by(FileRecord.id))


class FileRecord(BaseModel):
    """Un adjunto archivado en el canal y listo para reenviarse."""

    id: int
    account_id: int

    account = cast(
        UserAccount, peewee.ForeignKeyField(UserAccount, backref="files", on_delete="CASCADE")
    )
    file_name = cast(str, peewee.CharField())
    file_size = cast(str, peewee.CharField())
    provider_file_id = cast(str, peewee.CharField())
    archive_message_id = cast(int, peewee.BigIntegerField(unique=True))
    batch_id = cast(Optional[str], peewee.CharField(null=True, index=True))
    link = cast(str, peewee.CharField())
    # Se guarda como texto: un valor desconocido no debe romper la lectura.
    file_type = cast(str, peewee.CharField(max_length=16))

    @property
    def kind(self) -> Optional[FileType]:
        return FileType.parse(self.file_type)

    @staticmethod
    def find_by_archive_message_id(message_id: int) -> Optional["FileRecord"]:
        return (
            FileRecord.select()
            .where(FileRecord.archive_message_id == message_id)
            .order_by(FileRecord.id)
            .first()
        )

    @staticmethod
    def find_batch(batch_id: str) -> List["FileRecord"]:
        """Archivos del lote, agrupados por cuenta y en el orden en que se guardaron."""
        records: List[FileRecord] = []
        for account in UserAccount.find_by_file_field("batch_id", batch_id):
            records.extend(
                account.files.where(FileRecord.batch_id == batch_id).order_by(
                    FileRecord.id
                )
            )
        return records

    @staticmethod
    def attach_to_batch(records: Iterable["FileRecord"], batch_id: str, link: str) -> int:
        ids = [r.id for r in records]
        if not ids:
            return 0
        with db_proxy.atomic():
            return (
                FileRecord.update(batch_id=batch_id, link=link, updated_at=datetime.now())
                .where(FileRecord.id.in_(ids))
                .execute()
            )

    def to_schema(self) -> "FileRecordSchema":
        from filerelay.core.schemas import FileRecordSchema

        return FileRecordSchema(
            file_name=self.file_name,
            file_size=self.file_size,
            provider_file_id=self.provider_file_id,
            archive_message_id=self.archive_message_id,
            batch_id=self.batch_id,
            link=self.link,
            file_type=self.file_type,
        )


def all_files() -> List[FileRecord]:
    """Lista aplanada de los archivos de todas las cuentas."""
    return list(
        FileRecord.select(FileRecord, UserAccount)
        .join(UserAccount)
        .order_by(UserAccount.id, FileRecord.id)
    )
