from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.catalog import Category
from storefront.models.users import Role
from storefront.repositories.users import UserDirectory
from storefront.utils.logger import get_logger

logger = get_logger("seed")

DEFAULT_CATEGORIES = [
    ("Basic Building Materials", "Cement, bricks, steel, sand, gravel"),
    ("Paints & Decor", "Interior and exterior paints, wallpaper, gypsum"),
    ("Plumbing & Sanitary", "Pipes, mixers, basins, sanitary ware"),
    ("Electrical & Lighting", "Cables, switches, bulbs, distribution boards"),
    ("Wood & Doors", "Timber, wooden doors, windows, parquet"),
    ("Ceramics & Porcelain", "Wall and floor tiles, porcelain, marble"),
    ("Tools & Equipment", "Hand tools, power tools, scaffolding"),
    ("Insulation & Chemicals", "Thermal and water insulation, adhesives, curing compounds"),
]


def seed_categories(db: Session) -> int:
    if db.query(Category).first() is not None:
        return 0
    db.add_all([Category(name=name, description=description) for name, description in DEFAULT_CATEGORIES])
    db.commit()
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} categories")
    return len(DEFAULT_CATEGORIES)


def seed_admin(db: Session) -> bool:
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.info("Admin seed skipped: ADMIN_EMAIL/ADMIN_PASSWORD not configured")
        return False
    directory = UserDirectory(db)
    if directory.find_by_email(settings.ADMIN_EMAIL):
        return False
    directory.create(
        email=settings.ADMIN_EMAIL,
        display_name=settings.ADMIN_DISPLAY_NAME,
        password=settings.ADMIN_PASSWORD,
        role=Role.ADMIN,
        is_email_verified=True,
    )
    logger.info(f"Seeded admin account {settings.ADMIN_EMAIL}")
    return True
