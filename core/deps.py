"""
Define functions/aliases for dependency injection
"""
import threading
from collections.abc import Generator
from typing import Annotated, TypeAlias
from fastapi import Depends

from api.files.storage import StorageGateway
from core.config import StorageConfig, get_storage_config
from core.s3 import get_s3_client

gateway: StorageGateway | None = None
_gateway_lock = threading.Lock()


def init_storage_gateway(storage_config: StorageConfig) -> StorageGateway:
  """Create the process wide gateway (once) for the configured bucket"""
  global gateway
  if gateway is None:
    with _gateway_lock:
      if gateway is None:
        gateway = StorageGateway(get_s3_client(storage_config), storage_config)
  return gateway


# Define storage dependency
def get_storage_gateway(
  storage_config: Annotated[StorageConfig, Depends(get_storage_config)],
) -> Generator[StorageGateway, None, None]:
  yield init_storage_gateway(storage_config)

StorageConfigDep: TypeAlias = Annotated[StorageConfig, Depends(get_storage_config)]
StorageDep: TypeAlias = Annotated[StorageGateway, Depends(get_storage_gateway)]
