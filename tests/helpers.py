from datetime import datetime, timezone

from fileflow.files.models import FileRecord, FileStatus, derive_processing_tier

UPLOAD_DATE = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_record(
    file_id: str = "file-1",
    file_size: int = 1000,
    status: FileStatus = FileStatus.UPLOADED,
    upload_date: datetime = UPLOAD_DATE,
) -> FileRecord:
    return FileRecord(
        file_id=file_id,
        upload_date=upload_date,
        user_id="user-1",
        file_name="report.pdf",
        file_type="application/pdf",
        status=status,
        file_size=file_size,
        processing_tier=derive_processing_tier(file_size),
        updated_at=upload_date,
    )
