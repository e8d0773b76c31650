"""
Services for the Files API

Validate incoming requests, dispatch them to the storage gateway, and
turn validation failures and backend errors into 400 responses.
"""

import os

from fastapi import HTTPException, UploadFile, status

from api.files.models import FilePublic, FileRecord
from api.files.storage import StorageGateway
from core.config import StorageConfig
from core.logger import logger
from core.utils import base_file_name, read_stream

FILE_NAME_NOT_PROVIDED = "FileName not provided"
FILE_DOES_NOT_EXIST = "File Doesn't exist"


def _bad_request(detail) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _upload_length(file: UploadFile) -> int:
    """Size of the uploaded file, measured from the spooled file if unknown"""
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    length = file.file.tell()
    file.file.seek(0)
    return length


def validate_upload(file: UploadFile | None, storage_config: StorageConfig) -> dict[str, list[str]]:
    """
    Run every upload check and collect the failures, keyed by failure name.
    An empty dict means the file is acceptable.
    """
    errors: dict[str, list[str]] = {}

    if file is None:
        errors.setdefault("NoFile", []).append("file not uploaded")
        # size and type cannot be checked without a file
        return errors

    if _upload_length(file) > storage_config.max_file_size_allowed:
        errors.setdefault("FileSizeTooBig", []).append(
            "File size is bigger than maximum allowed file size "
            f"{storage_config.max_file_size_allowed}"
        )

    if file.content_type not in storage_config.supported_types:
        errors.setdefault("InvalidFileType", []).append(
            "Input file type is not supported"
        )

    return errors


def upload_file(
    gateway: StorageGateway,
    storage_config: StorageConfig,
    file: UploadFile | None,
) -> str:
    """
    Validate and store an uploaded file.

    Returns:
        The absolute location of the stored object
    """
    errors = validate_upload(file, storage_config)
    if errors:
        raise _bad_request(errors)

    try:
        file.file.seek(0)
        content = read_stream(file.file)
        record = FileRecord(
            file_name=base_file_name(file.filename or ""),
            content_type=file.content_type,
            file_length=len(content),
            content=content,
        )
        return gateway.upload(record)
    except Exception as exc:
        error_message = f"failed to upload file : {file.filename} "
        logger.exception(error_message)
        raise _bad_request(error_message) from exc


def download_file(gateway: StorageGateway, file_name: str) -> FileRecord:
    """Fetch a stored file with its content and content type"""
    if not file_name:
        raise _bad_request(FILE_NAME_NOT_PROVIDED)

    try:
        if not gateway.exists(file_name):
            record = None
        else:
            record = gateway.download(file_name)
    except Exception as exc:
        error_message = f"Error downloading file:  {file_name}"
        logger.exception(error_message)
        raise _bad_request(error_message) from exc

    if record is None:
        raise _bad_request(FILE_DOES_NOT_EXIST)
    return record


def list_files(gateway: StorageGateway) -> list[FilePublic]:
    """Every file in the container, without pagination"""
    try:
        return [FilePublic.model_validate(record) for record in gateway.list()]
    except Exception as exc:
        error_message = "Error getting file list"
        logger.exception("Message: %s", error_message)
        raise _bad_request(error_message) from exc


def delete_file(gateway: StorageGateway, file_name: str) -> str:
    """Delete a stored file, returning a confirmation message"""
    if not file_name:
        raise _bad_request(FILE_NAME_NOT_PROVIDED)

    try:
        exists = gateway.exists(file_name)
        deleted = exists and gateway.delete(file_name)
    except Exception as exc:
        error_message = f"failed to delete file : {file_name} "
        logger.exception(error_message)
        raise _bad_request(error_message) from exc

    if not exists:
        raise _bad_request(FILE_DOES_NOT_EXIST)
    if not deleted:
        raise _bad_request(f"Unable to delete file : {file_name}")
    return f"File : {file_name} Deleted successfully"


def reorder_files(gateway: StorageGateway, file_names: list[str]) -> bool:
    """
    Forward a requested ordering to the gateway.

    A non-empty list is rejected with "File list is empty". This
    mirrors the behaviour clients already depend on and is pinned by
    tests in both directions until the intended rule is confirmed.
    """
    if file_names:
        raise _bad_request("File list is empty")

    try:
        records = [FileRecord(file_name=name) for name in file_names]
        return gateway.reorder(records)
    except Exception as exc:
        error_message = "unable to re-Order files"
        logger.exception(error_message)
        raise _bad_request(error_message) from exc
