# campusconnect/main.py
import logging

import uvicorn

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campusconnect.config import settings
from campusconnect.database import engine, Base
from campusconnect.exceptions import CampusConnectError, ConflictError
from campusconnect.routes import users, rooms, bookings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create the database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="CampusConnect Room Booking",
    description="Room discovery, availability and booking approval for campus rooms",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Booking core errors -> HTTP responses
@app.exception_handler(CampusConnectError)
async def handle_campusconnect_error(request: Request, exc: CampusConnectError):
    detail = exc.detail
    if isinstance(exc, ConflictError):
        detail = "Room is already booked for this time slot"
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})

# Registering Routers
app.include_router(users.router)
app.include_router(rooms.router)
app.include_router(bookings.router)

@app.get("/", tags=["Root"])
def read_root():
    return {"message": "Welcome to CampusConnect Room Booking"}


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
