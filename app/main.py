"""Main FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.data import routes as data_routes
from app.sequencing import routes as sequencing_routes
from app.sequencing.errors import ReorderError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title="Lexicon API",
    description="Glossaries, policies and PRDs organized per project",
    version="0.3.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Sequencing errors surface as 404 / 409 / 503 wherever they are raised
app.add_exception_handler(ReorderError, sequencing_routes.reorder_error_handler)

# Include routers
app.include_router(data_routes.router, prefix=f"{settings.API_V1_PREFIX}/data", tags=["Data"])
app.include_router(sequencing_routes.router, prefix=f"{settings.API_V1_PREFIX}/sequencing", tags=["Sequencing"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Lexicon API",
        "version": "0.3.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
