"""
FastAPI application entry point.

Run with: uvicorn televault.api.main:app --reload --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from televault import __version__
from televault.api.routes import accounts
from televault.api.dependencies import initialize_services, get_client_factory


app = FastAPI(
    title="TeleVault API",
    description="Read-only REST API over TeleVault accounts and balances",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure in production
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    initialize_services()


@app.on_event("shutdown")
async def shutdown_event():
    """Release shared clients on application shutdown."""
    try:
        client_factory = get_client_factory()
    except RuntimeError:
        return

    client_factory.close()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "TeleVault API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(accounts.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
