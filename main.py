import logging

from fastapi import FastAPI

from core.database import MOCK_MODE, Base, engine, session_scope
from core.logging_config import setup_logging
from services.config_service import should_seed_mock_data
from services.mock_data_service import seed_mock_data

# Import all models to register them
from models.client import Client
from models.container import Container
from models.id_sequence import IdSequence
from models.iso_code import IsoCode
from models.shipping_line import ShippingLine
from models.user import User

# Import routers
from api import auth, containers, dashboard, users
from api.reference_data import clients_router, iso_codes_router, shipping_lines_router

setup_logging()
log = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="GestCont Yard API",
    description="Container yard entries, exits, reference data and dashboard statistics",
    version="1.0.0"
)

# Register routers
app.include_router(auth.router)
app.include_router(containers.router, prefix="/api")
app.include_router(shipping_lines_router, prefix="/api")
app.include_router(iso_codes_router, prefix="/api")
app.include_router(clients_router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")


@app.on_event("startup")
def load_mock_data() -> None:
    if not MOCK_MODE:
        log.info("Using configured database; mock data disabled.")
        return
    if not should_seed_mock_data():
        log.info("No DATABASE_URL set and SEED_MOCK_DATA is off; starting with an empty in-memory yard.")
        return

    log.warning("No DATABASE_URL set, falling back to in-memory mock data")
    with session_scope() as db:
        seed_mock_data(db)


# ==================== HEALTH CHECK ====================
@app.get("/health")
def health_check():
    """Health check endpoint for Docker and Kubernetes."""
    return {
        "status": "healthy",
        "service": "GestCont Yard API",
        "version": "1.0.0",
        "mode": "mock" if MOCK_MODE else "database",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
