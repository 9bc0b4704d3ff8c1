from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from filerelay.core.enums import FileType
from filerelay.core.schemas import Attachment
from filerelay.utils import format_file_size

if TYPE_CHECKING:
    from pyrogram.types import Message


def _largest_photo_variant(photo: Any) -> Any:
    """Elige la variante de mayor resolución.

    pyrogram ya pone la más grande en `message.photo` y las menores en `thumbs`,
    pero no se asume el orden.
    """
    variants = [photo, *(getattr(photo, "thumbs", None) or [])]
    return max(
        variants,
        key=lambda v: ((v.width or 0) * (v.height or 0), v.file_size or 0),
    )


def _from_document(message: "Message") -> Attachment:
    doc = message.document
    return Attachment(
        file_type=FileType.DOCUMENT,
        provider_file_id=doc.file_id,
        file_name=doc.file_name or FileType.DOCUMENT.value,
        file_size=format_file_size(doc.file_size),
    )


def _from_photo(message: "Message") -> Attachment:
    largest = _largest_photo_variant(message.photo)
    return Attachment(
        file_type=FileType.PHOTO,
        provider_file_id=largest.file_id,
        file_name=FileType.PHOTO.value,
        file_size=format_file_size(largest.file_size),
    )


def _from_video(message: "Message") -> Attachment:
    video = message.video
    return Attachment(
        file_type=FileType.VIDEO,
        provider_file_id=video.file_id,
        file_name=video.file_name or FileType.VIDEO.value,
        file_size=format_file_size(video.file_size),
    )


def _from_audio(message: "Message") -> Attachment:
    audio = message.audio
    return Attachment(
        file_type=FileType.AUDIO,
        provider_file_id=audio.file_id,
        file_name=audio.file_name or FileType.AUDIO.value,
        file_size=format_file_size(audio.file_size),
    )


EXTRACTORS: Dict[FileType, Callable[["Message"], Attachment]] = {
    FileType.DOCUMENT: _from_document,
    FileType.PHOTO: _from_photo,
    FileType.VIDEO: _from_video,
    FileType.AUDIO: _from_audio,
}


def classify(message: "Message") -> Optional[Attachment]:
    """Devuelve el adjunto del mensaje o None si no trae uno soportado."""
    for file_type, extractor in EXTRACTORS.items():
        if getattr(message, file_type.value, None):
            return extractor(message)
    return None
