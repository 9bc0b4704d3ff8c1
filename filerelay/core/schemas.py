from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from filerelay.core.enums import FileType
from filerelay.store.models import FileRecord


class FileRecordSchema(BaseModel):
    """Representación pública de un FileRecord (API web y CLI)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: str
    file_size: str
    provider_file_id: str
    archive_message_id: int
    batch_id: Optional[str] = None
    link: str
    file_type: str


class Attachment(BaseModel):
    """Adjunto ya clasificado, antes de archivarse."""

    file_type: FileType
    provider_file_id: str
    file_name: str
    file_size: str


class BatchSession(BaseModel):
    """Lote en curso de un usuario. Vive solo en memoria."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    batch_id: str
    user_id: int
    files: List[FileRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files
