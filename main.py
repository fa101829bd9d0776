"""
FastAPI app: compiled RBAC policy served as an authorization API.

Decisions:
- .env is loaded before importing policy_authz settings so AUTHZ_* values
  are available when the store and router are created (Ruff E402 suppressed).
- The index is loaded at startup; a broken policy fails startup instead of
  serving with no rules.
- Caller identity comes from headers set by the upstream auth layer; see
  AUTHZ_USER_HEADER / AUTHZ_GROUPS_HEADER.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from starlette.concurrency import run_in_threadpool

load_dotenv()

from policy_authz import (  # noqa: E402
    PolicyStore,
    create_authz_router,
    load_settings,
    require_any_permission,
    require_permission,
)

logging.basicConfig(level=logging.INFO, format="[%(name)s] <%(levelname)s> %(message)s")

settings = load_settings()
store = PolicyStore(settings.policy_file, settings.cache_file)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await run_in_threadpool(store.reload)
    yield


app = FastAPI(lifespan=lifespan)
app.include_router(create_authz_router(store, settings))


@app.get("/")
async def home():
    index = store.index
    return {"source_policy_hash": index.source_policy_hash}


# Example protected routes: permission on a named resource.
@app.get("/reports")
async def reports(user=Depends(require_permission(store, settings, "reports", "read"))):
    return {"ok": True, "area": "reports", "user": user}


@app.get("/reports/edit")
async def edit_reports(user=Depends(require_any_permission(store, settings, "reports", "write", "admin"))):
    return {"ok": True, "area": "reports editor", "user": user}
