from __future__ import annotations  # FastAPI server exposing interview practice sessions

import logging
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config import ServiceAvailability, settings


logger = logging.getLogger(__name__)

app = FastAPI(title="Interview Practice API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/api/health")
def health() -> Dict[str, str]:  # Liveness check with configured service list
    return {"status": "ok", "services": ServiceAvailability.from_settings(settings).describe()}
