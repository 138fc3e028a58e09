# Cookbook API Main Entry Point
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from . import __version__
from .errors import CookbookError
from .settings import settings
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .routers.reference import router as reference_router
from .routers.ingest import router as ingest_router
from .routers.images import router as images_router
from .routers.fallback import router as fallback_router

# Configure structured logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("cookbook")

# Rate limiter (per-IP)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

app = FastAPI(title="Cookbook API", version=__version__)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CookbookError)
async def cookbook_error_handler(request: Request, exc: CookbookError):
    logger.error(f"Error in handler: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Oops"})


app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
app.include_router(reference_router, prefix="/api", tags=["reference"])
app.include_router(ingest_router, prefix="/api", tags=["ingest"])
app.include_router(images_router, prefix="/api", tags=["images"])

# Must stay last: matches every path
app.include_router(fallback_router)
