"""
Routes/endpoints for the Files API

HTTP    URI                              Action
----    ---                              ------
GET     /api/file/list                   List every stored file
POST    /api/file/uploadfile             Upload a file (multipart field "file")
DELETE  /api/file/delete/[fileName]      Delete a file
PATCH   /api/file                        Re-order files (not supported)
GET     /api/file/[fileName]             Download a file
"""

from fastapi import APIRouter, Body, File, UploadFile, status
from fastapi.responses import Response

from api.files.models import FilePublic
from api.files import services
from core.deps import StorageConfigDep, StorageDep
from core.utils import content_disposition

router = APIRouter(prefix="/file", tags=["File Endpoints"])

BAD_REQUEST_RESPONSE = {
    status.HTTP_400_BAD_REQUEST: {"description": "Invalid request or storage failure"}
}


@router.get(
    "/list",
    response_model=list[FilePublic],
    status_code=status.HTTP_200_OK,
    responses=BAD_REQUEST_RESPONSE,
)
def get_file_list(gateway: StorageDep) -> list[FilePublic]:
    """
    Returns the list of files stored in the container.
    """
    return services.list_files(gateway=gateway)


@router.post(
    "/uploadfile",
    response_model=str,
    status_code=status.HTTP_200_OK,
    responses=BAD_REQUEST_RESPONSE,
)
def upload_file(
    gateway: StorageDep,
    storage_config: StorageConfigDep,
    file: UploadFile | None = File(None, description="The file to upload"),
) -> str:
    """
    Upload a file and return its absolute location.

    Rejected with a map of failures (NoFile, FileSizeTooBig,
    InvalidFileType) when the file does not pass validation.
    """
    return services.upload_file(
        gateway=gateway, storage_config=storage_config, file=file
    )


@router.delete(
    "/delete/{file_name}",
    response_model=str,
    status_code=status.HTTP_200_OK,
    responses=BAD_REQUEST_RESPONSE,
)
def delete_file(gateway: StorageDep, file_name: str) -> str:
    """
    Delete a file from storage.
    """
    return services.delete_file(gateway=gateway, file_name=file_name)


@router.patch(
    "",
    response_model=bool,
    status_code=status.HTTP_200_OK,
    responses=BAD_REQUEST_RESPONSE,
)
def reorder_files(
    gateway: StorageDep,
    file_names: list[str] = Body(..., description="File names in the requested order"),
) -> bool:
    """
    Re-order files based on the provided list of names.
    """
    return services.reorder_files(gateway=gateway, file_names=file_names)


@router.get(
    "/{file_name}",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    responses=BAD_REQUEST_RESPONSE,
)
def get_file(gateway: StorageDep, file_name: str) -> Response:
    """
    Download a file. The body is the raw content, served with the
    content type it was stored with.
    """
    record = services.download_file(gateway=gateway, file_name=file_name)
    return Response(
        content=record.content,
        media_type=record.content_type,
        headers={"Content-Disposition": content_disposition(record.file_name)},
    )
