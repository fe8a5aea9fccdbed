# backend/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

load_dotenv()

from config import settings
from database import init_db
from services.errors import NotFound, InsufficientStock, StoreFailure, ValidationFailure

# Routers
from routes.auth import router as auth_router
from routes.products import router as products_router
from routes.withdrawals import router as withdrawals_router
from routes.stock import router as stock_router
from routes.dashboard import router as dashboard_router
from routes.reports import router as reports_router
from routes.logs import router as logs_router
from routes.uploads import router as uploads_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Materials Withdrawal API", version="1.0.0", lifespan=lifespan)

# Uploaded images are served straight from disk
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# CORS: local frontend plus the deployed one, when configured
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors -> HTTP responses
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(InsufficientStock)
async def insufficient_stock_handler(request: Request, exc: InsufficientStock):
    return JSONResponse(
        status_code=409,
        content={
            "detail": exc.message,
            "product_id": exc.product_id,
            "available": exc.available,
            "requested": exc.requested,
        },
    )


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    return JSONResponse(status_code=503, content={"detail": exc.message})


app.include_router(auth_router)
app.include_router(products_router)
app.include_router(withdrawals_router)
app.include_router(stock_router)
app.include_router(dashboard_router)
app.include_router(reports_router)
app.include_router(logs_router)
app.include_router(uploads_router)


@app.get("/")
def read_root():
    return {"message": "Materials Withdrawal API is running"}
