"""
API Server Router - the HTTP surface of the state backend.

Two route prefixes accept any HTTP verb; the verb is looked up in an explicit
mapping table to pick the operation, and verbs missing from the table are
answered with 405:

    /states/{path}   GET | POST, PUT | DELETE     -> ObjectStore
    /locks/{path}    LOCK, POST, PUT | UNLOCK, DELETE -> LockManager
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool

from ..config import BackendConfig
from ..errors import BackendError, MethodNotAllowedError
from ..locks import LockManager
from ..objects import ObjectStore
from .auth import install_basic_auth

logger = logging.getLogger(__name__)

Operation = Callable[[Any, str, Request], Awaitable[Response]]


async def read_state(store: ObjectStore, path: str, request: Request) -> Response:
    data = await run_in_threadpool(store.read, path)
    return Response(content=data, status_code=200, media_type="application/octet-stream")


async def write_state(store: ObjectStore, path: str, request: Request) -> Response:
    body = await request.body()
    await run_in_threadpool(store.write, path, body)
    return Response(status_code=200)


async def delete_state(store: ObjectStore, path: str, request: Request) -> Response:
    await run_in_threadpool(store.delete, path)
    return Response(status_code=200)


async def acquire_lock(locks: LockManager, path: str, request: Request) -> Response:
    # Decode before touching storage: a malformed body never reaches the lock file
    lock_info = locks.decode(await request.body())
    await run_in_threadpool(locks.acquire, path, lock_info)
    return Response(status_code=200)


async def release_lock(locks: LockManager, path: str, request: Request) -> Response:
    lock_info = locks.decode(await request.body())
    await run_in_threadpool(locks.release, path, lock_info)
    return Response(status_code=200)


STATE_OPERATIONS: Dict[str, Operation] = {
    "GET": read_state,
    "POST": write_state,
    "PUT": write_state,
    "DELETE": delete_state,
}

LOCK_OPERATIONS: Dict[str, Operation] = {
    "LOCK": acquire_lock,
    "POST": acquire_lock,
    "PUT": acquire_lock,
    "UNLOCK": release_lock,
    "DELETE": release_lock,
}


class OperationDispatcher:
    """
    ASGI endpoint that routes every verb through an operation table.

    Being a plain ASGI callable rather than a function, the route accepts
    any method (including LOCK and UNLOCK) and the table alone decides
    which ones are allowed.
    """

    def __init__(self, operations: Dict[str, Operation], target: str):
        self.operations = operations
        self.target = target

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)
        operation = self.operations.get(request.method.upper())
        if operation is None:
            raise MethodNotAllowedError(request.method)
        response = await operation(
            getattr(request.app.state, self.target),
            request.path_params["path"],
            request,
        )
        await response(scope, receive, send)


def create_app(
    config: Optional[BackendConfig] = None,
    object_store: Optional[ObjectStore] = None,
    lock_manager: Optional[LockManager] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Server configuration. Defaults to BackendConfig().
        object_store: Optional ObjectStore. Defaults to one rooted at
                      <data_dir>/states.
        lock_manager: Optional LockManager. Defaults to one rooted at
                      <data_dir>/locks.

    Returns:
        Configured FastAPI application
    """
    config = config or BackendConfig()

    app = FastAPI(
        title="tfbackend",
        description="HTTP remote state backend with advisory locking",
        version="0.1.0",
    )

    app.state.config = config
    app.state.object_store = object_store or ObjectStore(config.states_dir)
    app.state.lock_manager = lock_manager or LockManager(config.locks_dir)

    install_basic_auth(app, config)

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return Response(
            content=exc.body,
            status_code=exc.status_code,
            media_type=exc.media_type,
        )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    app.router.add_route(
        "/states/{path:path}",
        OperationDispatcher(STATE_OPERATIONS, "object_store"),
        name="states",
        include_in_schema=False,
    )
    app.router.add_route(
        "/locks/{path:path}",
        OperationDispatcher(LOCK_OPERATIONS, "lock_manager"),
        name="locks",
        include_in_schema=False,
    )

    return app
