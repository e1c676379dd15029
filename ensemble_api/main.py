# ensemble_api/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging_config import setup_logging
from .routes.predict import router as predict_router

setup_logging()

app = FastAPI(
    title="Local Ensemble Prediction API",
    description="Combine cached decision-tree models into one offline prediction",
    version="1.0.0"
)

# Allow CORS from anywhere.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the prediction endpoints.
app.include_router(predict_router, prefix="", tags=["prediction"])
