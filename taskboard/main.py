from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS
from .database import create_tables
from .routers import auth, lists, tasks

# Create FastAPI app
app = FastAPI(
    title="Taskboard API",
    description="Personal task lists with progression tracking",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(lists.router, prefix="/api", tags=["lists"])
app.include_router(tasks.router, prefix="/api", tags=["tasks"])


# Create tables on startup
@app.on_event("startup")
def on_startup():
    create_tables()


@app.get("/")
def read_root():
    return {"message": "Taskboard API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
