from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging
import os

# Load environment variables before the modules that read them are imported
load_dotenv()

from database.connection import engine, Base  # noqa: E402
import models  # noqa: E402,F401
from routes import admin, events, users, attendance, notifications  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Event Attendance API",
    description="Event registration, QR check-in and attendance notifications",
    version="1.0.0"
)

# CORS configuration - comma-separated origins, defaults to the local frontend
allowed_origins = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3002").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers (no /api prefix - routes are at root level)
app.include_router(admin.router, tags=["Admin"])
app.include_router(events.router, tags=["Events"])
app.include_router(users.router, tags=["Users"])
app.include_router(attendance.router, tags=["Attendance"])
app.include_router(notifications.router, tags=["Notifications"])


@app.get("/")
def root():
    """Root endpoint"""
    return {"message": "Event Attendance API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", 5000))
    uvicorn.run("main:app", host=host, port=port, reload=True)
