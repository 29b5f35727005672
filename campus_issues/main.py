# File: campus_issues/main.py
# Project: campus-issues-backend
# Auto-added for reference

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_issues.core.config import cors_origins_list, settings
from campus_issues.core.errors import CampusIssuesError
from campus_issues.core.ratelimit import limiter
from campus_issues.routers import admin, auth, dashboard, home, issues, map as map_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Campus Issues API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

async def _campus_error_handler(request: Request, exc: CampusIssuesError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

async def _not_found_fallback(request: Request, exc: StarletteHTTPException):
    # unknown routes get the not-found page; everything else keeps FastAPI's rendering
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"detail": "Page not found", "path": request.url.path})
    return await http_exception_handler(request, exc)

app.add_exception_handler(CampusIssuesError, _campus_error_handler)
app.add_exception_handler(StarletteHTTPException, _not_found_fallback)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(home.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(issues.router)
app.include_router(dashboard.router)
app.include_router(map_router.router)
