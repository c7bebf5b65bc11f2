"""Laborobo core FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from .routers import my_work, projects, tasks, team, tools, work_orders

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("laborobo-core")

logger.info("Starting Laborobo core API")

app = FastAPI(
    title="Laborobo Core API",
    description="Projects, work orders, tasks, My Work and agent tools",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(projects.router, prefix="/api/v1/projects")
app.include_router(work_orders.router, prefix="/api/v1/work-orders")
app.include_router(tasks.router, prefix="/api/v1/tasks")
app.include_router(my_work.router, prefix="/api/v1/my-work")
app.include_router(team.router, prefix="/api/v1/team")
app.include_router(tools.router, prefix="/api/v1/tools")


@app.get("/")
def root():
    """Root endpoint with server info."""
    return {
        "name": "Laborobo Core API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
