from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fileflow.events.exceptions import InvalidEventError

LIGHT_TIER_MAX_BYTES = 5_000_000


class FileStatus(str, Enum):
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self in (FileStatus.COMPLETED, FileStatus.ERROR)


class ProcessingTier(str, Enum):
    LIGHT = "LIGHT"
    HEAVY = "HEAVY"


def derive_processing_tier(file_size: int) -> ProcessingTier:
    """Classify a file by size. The threshold itself is still LIGHT."""
    if file_size < 0:
        raise ValueError(f"file_size must be non-negative, got {file_size}")
    if file_size > LIGHT_TIER_MAX_BYTES:
        return ProcessingTier.HEAVY
    return ProcessingTier.LIGHT


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FileRecord:
    """Metadata and lifecycle status of one uploaded file.

    ``file_size`` and ``processing_tier`` are optional because records arrive
    from change events that may carry missing or malformed values; the
    dispatcher treats those as classification errors.
    """

    file_id: str
    upload_date: datetime
    user_id: str
    file_name: str
    file_type: str
    status: FileStatus
    file_size: int | None = None
    processing_tier: ProcessingTier | None = None
    updated_at: datetime | None = None

    @classmethod
    def new_upload(
        cls,
        *,
        file_id: str,
        user_id: str,
        file_name: str,
        file_type: str,
        file_size: int,
        upload_date: datetime | None = None,
    ) -> "FileRecord":
        """Build the initial UPLOADED record the upload path stores."""
        now = utcnow()
        return cls(
            file_id=file_id,
            upload_date=upload_date or now,
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            status=FileStatus.UPLOADED,
            file_size=file_size,
            processing_tier=derive_processing_tier(file_size),
            updated_at=now,
        )

    def with_status(self, status: FileStatus, updated_at: datetime | None = None) -> "FileRecord":
        return replace(self, status=status, updated_at=updated_at or utcnow())

    def to_image(self) -> dict[str, Any]:
        """Serialize to the camelCase mapping carried by change events."""
        return {
            "fileId": self.file_id,
            "uploadDate": self.upload_date.isoformat(),
            "userId": self.user_id,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "status": self.status.value,
            "processingTier": (
                self.processing_tier.value if self.processing_tier is not None else None
            ),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_image(cls, image: dict[str, Any]) -> "FileRecord":
        """Parse a change-event image.

        Identity and status must be valid. Size and tier are parsed leniently:
        anything unusable becomes ``None``.

        Raises:
            InvalidEventError: if identity or status are missing or malformed.
        """
        file_id = image.get("fileId")
        if not isinstance(file_id, str) or not file_id:
            raise InvalidEventError(f"Image has no usable fileId: {image!r}")

        try:
            status = FileStatus(image.get("status"))
        except ValueError as exc:
            raise InvalidEventError(
                f"File {file_id} has unknown status {image.get('status')!r}"
            ) from exc

        tier_value = image.get("processingTier", image.get("processingRequired"))
        try:
            tier = ProcessingTier(tier_value) if tier_value is not None else None
        except ValueError:
            tier = None

        return cls(
            file_id=file_id,
            upload_date=_parse_timestamp(file_id, "uploadDate", image.get("uploadDate")),
            user_id=str(image.get("userId") or ""),
            file_name=str(image.get("fileName") or ""),
            file_type=str(image.get("fileType") or ""),
            status=status,
            file_size=_parse_size(image.get("fileSize")),
            processing_tier=tier,
            updated_at=(
                _parse_timestamp(file_id, "updatedAt", image["updatedAt"])
                if image.get("updatedAt")
                else None
            ),
        )


def _parse_timestamp(file_id: str, key: str, value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise InvalidEventError(f"File {file_id} has no usable {key}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise InvalidEventError(f"File {file_id} has malformed {key} {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_size(value: object) -> int | None:
    # bool is an int subclass; a boolean size is malformed, not 0/1 bytes.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None
