"""Storage collaborators: submission rows and uploaded file content"""
import os
import re
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from fastapi.concurrency import run_in_threadpool
from supabase import Client

from forms_api.config import get_settings
from forms_api.database import get_supabase_admin
from forms_api.utils.retry import retry_supabase_query

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class SubmissionStore:
    """Inserts submission rows through the Supabase client"""

    def __init__(self, client: Client, max_retries: int = 3):
        self.client = client
        self.max_retries = max_retries

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it as stored

        Args:
            table: Target table name
            row: Column values; id and created_at are filled by the database

        Returns:
            The inserted row, including its generated id
        """
        result = await run_in_threadpool(
            retry_supabase_query,
            lambda: self.client.table(table).insert(row).execute(),
            self.max_retries,
        )
        stored = result.data[0] if result.data else row
        logger.info(f"Inserted submission {stored.get('id')} into {table}")
        return stored


def progress_percent(loaded: int, total: int) -> int:
    """Completion as an integer percentage, 100 for empty payloads"""
    if total <= 0:
        return 100
    return round(loaded / total * 100)


@dataclass(frozen=True)
class StoredFile:
    filename: str
    public_path: str
    location: Path
    size: int


class ContentStore:
    """
    Writes uploaded files to a directory served under ``url_prefix``

    Stored names are the sanitized original base name plus a millisecond
    timestamp, keeping the original extension. Files are created
    exclusively; a name that already exists gets a numeric suffix.
    """

    def __init__(
        self,
        root: Union[str, Path],
        url_prefix: str = "/uploads",
        chunk_size: int = 64 * 1024,
        clock: Callable[[], float] = time.time,
    ):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.chunk_size = chunk_size
        self.clock = clock

    def generate_name(self, original_name: str) -> str:
        basename = os.path.basename(original_name.replace("\\", "/"))
        stem, extension = os.path.splitext(basename)
        extension = re.sub(r"[^a-zA-Z0-9.]", "", extension)
        sanitized = re.sub(r"[^a-zA-Z0-9]", "_", stem).lower() or "file"
        timestamp = int(self.clock() * 1000)
        return f"{sanitized}_{timestamp}{extension}"

    def save(
        self,
        original_name: str,
        content: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> StoredFile:
        """Write content under a freshly generated name and return where it went"""
        self.root.mkdir(parents=True, exist_ok=True)
        filename = self.generate_name(original_name)
        stem, extension = os.path.splitext(filename)

        suffix = 0
        while True:
            location = self.root / filename
            try:
                handle = open(location, "xb")
            except FileExistsError:
                suffix += 1
                filename = f"{stem}_{suffix}{extension}"
                continue
            break

        total = len(content)
        with handle:
            written = 0
            for start in range(0, total, self.chunk_size):
                chunk = content[start:start + self.chunk_size]
                handle.write(chunk)
                written += len(chunk)
                if on_progress:
                    on_progress(progress_percent(written, total))
        if total == 0 and on_progress:
            on_progress(100)

        logger.info(f"Stored upload {original_name!r} as {filename} ({total} bytes)")
        return StoredFile(
            filename=filename,
            public_path=f"{self.url_prefix}/{filename}",
            location=location,
            size=total,
        )


def get_store() -> SubmissionStore:
    """FastAPI dependency for the submission row store"""
    settings = get_settings()
    return SubmissionStore(get_supabase_admin(), max_retries=settings.db_max_retries)


def get_content_store() -> ContentStore:
    """FastAPI dependency for the uploaded file store"""
    settings = get_settings()
    return ContentStore(settings.upload_dir, settings.upload_url_prefix)
