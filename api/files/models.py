"""
Models for the Files API
"""

from pydantic import BaseModel, ConfigDict, Field


class FileRecord(BaseModel):
    """
    One stored object: its key, metadata and, when materialized
    for an upload or a download, its content
    """

    file_name: str
    content_type: str | None = None
    file_length: int | None = None  # Size in bytes
    content: bytes | None = Field(default=None, repr=False)


class FilePublic(BaseModel):
    """Public file representation used by the listing endpoint"""

    file_name: str = Field(serialization_alias="fileName")
    content_type: str | None = Field(default=None, serialization_alias="contentType")
    file_length: int | None = Field(default=None, serialization_alias="fileLength")

    model_config = ConfigDict(from_attributes=True)
