import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from virtimage.libvirt.errors import (
    PayloadTooLargeError,
    PoolLookupError,
    SourceError,
    StorageError,
    UnsupportedSchemeError,
    VolumeCreateError,
    VolumeLookupError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_storage_operation(operation: Callable[[], T]) -> T:
    try:
        return operation()
    except UnsupportedSchemeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except (PoolLookupError, VolumeLookupError) as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except VolumeCreateError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except PayloadTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc))
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except ConnectionError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


async def execute_storage_task(operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    return await run_in_threadpool(
        lambda: call_storage_operation(lambda: operation(*args, **kwargs))
    )


__all__ = ["logger", "T", "call_storage_operation", "execute_storage_task"]
