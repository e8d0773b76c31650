# Storage utilities ----

import os
from typing import BinaryIO
from urllib.parse import quote

READ_CHUNK_SIZE = 16 * 1024


def read_stream(stream: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> bytes:
  """
  Read a binary stream to the end in fixed size chunks.
  Works with file objects and botocore streaming bodies.
  """
  chunks = []
  while True:
    chunk = stream.read(chunk_size)
    if not chunk:
      break
    chunks.append(chunk)
  return b"".join(chunks)


def base_file_name(file_name: str) -> str:
  """
  Strip any directory component from a client supplied file name.
  Browsers on Windows may send the full local path, so both
  separators are handled.
  """
  return os.path.basename(file_name.replace("\\", "/"))


def content_disposition(file_name: str) -> str:
  """
  Attachment header for a download. Header values must be latin-1, so
  the name is sent percent-encoded in filename* (RFC 6266) with an
  ASCII filename fallback for older clients.
  """
  fallback = "".join(
    c if " " <= c < "\x7f" and c not in "\"\\" else "_" for c in file_name
  )
  return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"
