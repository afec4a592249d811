# backend/messenger/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.messenger.config.settings import settings
from backend.messenger.database.session import Base, engine
from backend.messenger.auth.routes import router as auth_router
from backend.messenger.users.routes import router as users_router
from backend.messenger.groups.routes import router as groups_router
from backend.messenger.messaging.routes import router as messages_router
from backend.messenger.messaging.routes import ws_router

# import the models so every table is registered before create_all
from backend.messenger.models.user import ChatUser  # noqa: F401
from backend.messenger.models.group import ChatGroup, ChatUserGroup  # noqa: F401
from backend.messenger.models.message import Message  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(groups_router)
app.include_router(messages_router)
app.include_router(ws_router)


# every error leaves the service as {"error": "<message>"}

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.warning(f"[App] Malformed request to {request.url.path}: {details}")
    return JSONResponse(status_code=400, content={"error": f"Invalid JSON: {details}"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"[App] Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/")
def read_root():
    return {"message": f"{settings.APP_NAME} is running"}
