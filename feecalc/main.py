from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from . import config
from .api import charges, tariffs
from .db import init_db

app = FastAPI(title="Apartment Fee Calculator")

# Strict CORS; origins come from env `CORS_ALLOWED`
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(charges.router)
app.include_router(tariffs.router)


@app.on_event("startup")
def on_startup():
    config.configure_logging()
    init_db()


@app.get("/", response_class=HTMLResponse)
def index():
    return "<h1>Apartment Fee Calculator</h1><p>Service up.</p>"


@app.get("/api/health")
def health():
    return {"status": "ok"}
