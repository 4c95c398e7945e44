from __future__ import annotations

import logging

from sqlalchemy import select

from backend.app.core.config import SUPPLY_MODULE, configure_logging
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.db.models.models_v1 import Category, Supplier

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Divers"
DEFAULT_SUPPLIER = "Fournisseur local"


def run_seed(create_schema: bool = False):
    if create_schema:
        # hors Alembic (SQLite de dev)
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        # 1) Catégorie par défaut
        category = db.scalar(select(Category).where(Category.name == DEFAULT_CATEGORY))
        if not category:
            db.add(Category(name=DEFAULT_CATEGORY, modules=[SUPPLY_MODULE]))

        # 2) Fournisseur par défaut
        supplier = db.scalar(select(Supplier).where(Supplier.name == DEFAULT_SUPPLIER))
        if not supplier:
            db.add(Supplier(name=DEFAULT_SUPPLIER, modules=[SUPPLY_MODULE]))

        db.commit()
        logger.info("seed OK: category=%s, supplier=%s", DEFAULT_CATEGORY, DEFAULT_SUPPLIER)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run_seed(create_schema=engine.dialect.name == "sqlite")
