import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounts import router as accounts_router
from config import settings
from database import collection_names, ensure_indexes, get_db
from errors import AppError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


# ----------------------
# App Setup
# ----------------------
@asynccontextmanager
async def lifespan(_: FastAPI):
    database = get_db()
    if database is None:
        logger.warning("DATABASE_URL/DATABASE_NAME not set; running without a database")
    else:
        try:
            ensure_indexes(database)
        except Exception as e:
            logger.error("Could not ensure indexes: %s", e)
    yield


app = FastAPI(title="Wallet Account API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(accounts_router)


@app.exception_handler(AppError)
def app_error_handler(_, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


# ----------------------
# Health/Test
# ----------------------
@app.get("/")
def read_root():
    return {"message": "Wallet API running"}


@app.get("/test")
def test_database(database=Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": "✅ Set" if settings.database_name else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if database is not None:
            response["collections"] = collection_names(database)
            response["database"] = "✅ Connected"
            response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"⚠️ {str(e)[:60]}"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
