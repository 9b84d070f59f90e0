from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .models import FileItem, FileResult, FileType

EXTENSIONS = {
    FileType.TEXT: ".txt",
    FileType.BINARY: ".bin",
    FileType.IMAGE: ".img",
}

EMPTY_FILE_SIZE = 256


def default_files(now: Callable[[], datetime] = datetime.now) -> Tuple[FileItem, ...]:
    stamp = now()
    return (
        FileItem(
            file_id=1,
            name="readme.txt",
            file_type=FileType.TEXT,
            size=1024,
            content="Welcome to Mini OS Simulator!\n\nThis is a sample text file.",
            created_at=stamp,
            modified_at=stamp,
        ),
        FileItem(
            file_id=2,
            name="config.bin",
            file_type=FileType.BINARY,
            size=2048,
            content="0101010101010101...",
            created_at=stamp,
            modified_at=stamp,
        ),
    )


def create_file(
    files: Sequence[FileItem],
    name: str,
    file_type: Union[str, FileType] = FileType.TEXT,
    content: str = "",
    now: Callable[[], datetime] = datetime.now,
) -> FileResult:
    """
    Add a file to the directory. Names are unique ignoring case; a name
    without an extension gets the default one for its type.
    """
    files = tuple(files)
    file_type = FileType(getattr(file_type, "value", file_type))
    name = (name or "").strip()

    if not name:
        return FileResult(files=files, success=False, message="File name is required")
    if "." not in name:
        name = f"{name}{EXTENSIONS[file_type]}"
    if find_file(files, name) is not None:
        return FileResult(files=files, success=False, message="A file with this name already exists")

    stamp = now()
    file_id = max((f.file_id for f in files), default=0) + 1
    item = FileItem(
        file_id=file_id,
        name=name,
        file_type=file_type,
        size=len(content.encode("utf-8")) or EMPTY_FILE_SIZE,
        content=content or f"[Empty {file_type.value} file]",
        created_at=stamp,
        modified_at=stamp,
    )
    return FileResult(files=files + (item,), success=True, message=f'File "{name}" created', file_id=file_id)


def delete_file(files: Sequence[FileItem], file_id: int) -> FileResult:
    files = tuple(files)
    for f in files:
        if f.file_id == file_id:
            remaining = tuple(other for other in files if other.file_id != file_id)
            return FileResult(files=remaining, success=True, message=f'File "{f.name}" deleted', file_id=file_id)
    return FileResult(files=files, success=False, message=f"File {file_id} not found")


def find_file(files: Sequence[FileItem], name: str) -> Optional[FileItem]:
    wanted = name.strip().lower()
    for f in files:
        if f.name.lower() == wanted:
            return f
    return None


def search_files(files: Sequence[FileItem], query: str) -> List[FileItem]:
    query = query.lower()
    return [f for f in files if query in f.name.lower()]


def total_size(files: Sequence[FileItem]) -> int:
    return sum(f.size for f in files)


def clear_files(files: Sequence[FileItem]) -> FileResult:
    count = len(files)
    return FileResult(files=(), success=True, message=f"{count} files removed")
