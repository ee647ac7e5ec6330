import logging

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .routers import slots

logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Portal Booking Availability API")

app.include_router(slots.router)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    return {"db": db.execute(text("SELECT 1")).scalar() == 1}
