#!/usr/bin/env python3

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from bibliolend.routes import api
from bibliolend.core import db
from bibliolend.core.exceptions import TransientStorageConflict
from bibliolend.configs import OPTIONS, CORS_ORIGINS
from bibliolend import __version__ as VERSION


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.init()
    yield


app = FastAPI(
    title="Bibliolend API",
    description="Bibliolend: lending core for library copies, loans and sanctions",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TransientStorageConflict, api.storage_conflict_handler)

app.include_router(api.router, prefix="/v1/api")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bibliolend.app:app", **OPTIONS)
