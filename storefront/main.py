from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.database import Base, SessionLocal, engine, test_database_connection
from storefront.middleware.error_handler import setup_error_handlers
from storefront.models import cart, catalog, orders, otp, users  # noqa: F401 (register tables)
from storefront.routes import account, admin_users, categories, dashboard, products
from storefront.routes import cart as cart_routes
from storefront.routes import orders as order_routes
from storefront.routes import otp as otp_routes
from storefront.services.seed import seed_admin, seed_categories
from storefront.utils.logger import setup_logger

# Setup logging
logger = setup_logger(log_file=settings.LOG_FILE)

# Create database tables
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
except Exception as e:
    logger.error(f"Failed to create database tables: {str(e)}", exc_info=True)

app = FastAPI(
    title="Storefront Service",
    description="Building materials storefront: accounts, catalog, cart and orders",
    version="0.1.0"
)

# Setup error handlers
setup_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(account.router)
app.include_router(otp_routes.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(cart_routes.router)
app.include_router(order_routes.router)
app.include_router(dashboard.router)
app.include_router(admin_users.router)


@app.get("/")
def read_root():
    logger.info("Root endpoint accessed")
    return {"message": "Storefront backend is running"}


@app.get("/health")
def health():
    database_ok = test_database_connection()
    return {"status": "ok" if database_ok else "degraded", "database": database_ok}


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up")

    db = SessionLocal()
    try:
        seed_admin(db)
        seed_categories(db)
    except Exception as e:
        # A failed seed must not keep the API from starting
        logger.error(f"Failed to seed initial data: {str(e)}", exc_info=True)
    finally:
        db.close()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
