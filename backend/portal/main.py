# portal/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Your configuration and DB
from portal.config import settings, build_info
from portal.core.db import init_db, close_db
from portal.core.errors import PortalError
from portal.core.authorization import authorize_request

from portal.api.routers import auth, pages, users, account, keys

from portal.core.bootstrap import run_bootstrap
from portal.core.key_ring import warm_cipher
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME, version=build_info.version)

# Fallback policy: every route needs a session unless allowlisted
app.middleware("http")(authorize_request)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.on_event("startup")
async def on_startup():
    logger.info("[startup] %s %s (build %s, %s)", settings.APP_NAME, build_info.version,
                build_info.build_label or "-", build_info.build_time)
    await warm_cipher()
    # Storage first; the admin reseed must finish before traffic is accepted
    try:
        await init_db()
    except Exception:
        # Service still starts; admin access is not guaranteed
        logger.exception("[bootstrap] Database migration or seeding failed.")
        return
    await run_bootstrap()


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# Pages
app.include_router(pages.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(account.router)
app.include_router(keys.router)


@app.get("/healthz")
def healthz():
    return {"ok": True}
