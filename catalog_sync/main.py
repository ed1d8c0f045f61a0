import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_sync.api.v1.endpoints.sync_management import router as sync_management_router
from catalog_sync.core.logging_config import configure_logging
from catalog_sync.schemas.sync_schemas import HealthResponse

configure_logging()
_logger = logging.getLogger(__name__)

app = FastAPI(title="Catalog Sync")

origins = [
    "http://localhost",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sync_management_router)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()
