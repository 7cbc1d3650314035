"""Price Paid Search API - Main Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricepaid.api.properties import router as properties_router
from pricepaid.core.elasticsearch import SearchClientRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.search_clients = SearchClientRegistry()
    yield
    await app.state.search_clients.close()


app = FastAPI(
    title="Price Paid Search API",
    description="Search, filter and map property sale transactions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(properties_router)


@app.get("/")
def read_root():
    """Root endpoint with API info."""
    return {
        "message": "Welcome to Price Paid Search API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
