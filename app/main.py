# app/main.py
from fastapi import FastAPI
from app.api.routes import router as api_router

app = FastAPI(title="UE Site Bridge")

app.include_router(api_router)
