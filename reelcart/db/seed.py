# reelcart/db/seed.py
"""Seed categories and hosts into the database"""
from sqlalchemy.orm import Session
from ..models import Category, Host
from ..database import SessionLocal, init_db
import logging

logger = logging.getLogger(__name__)

# Category seed data
CATEGORIES = [
    {"name": "Tech Reviews", "description": "In-depth reviews of phones, laptops and gadgets"},
    {"name": "Unboxings", "description": "First looks straight out of the box"},
    {"name": "Comparisons", "description": "Head-to-head product comparisons"},
    {"name": "Buying Guides", "description": "What to buy at every budget"},
    {"name": "Home & Kitchen", "description": "Appliances and gear for the home"},
]

# Host seed data
HOSTS = [
    {"name": "Maya Lindqvist", "bio": "Former hardware engineer, reviews laptops and audio gear"},
    {"name": "Tomas Ferreira", "bio": "Camera and smartphone specialist"},
    {"name": "Priya Nair", "bio": "Covers smart home and kitchen tech"},
]


def seed_categories(db: Session):
    """Seed categories into database"""
    logger.info("Seeding categories...")

    for category_data in CATEGORIES:
        # Check if category already exists
        existing = db.query(Category).filter(Category.name == category_data["name"]).first()
        if existing:
            logger.info(f"Category '{category_data['name']}' already exists, skipping...")
            continue

        db.add(Category(**category_data))
        logger.info(f"Added category: {category_data['name']}")

    db.commit()
    logger.info("✅ Categories seeded successfully!")


def seed_hosts(db: Session):
    """Seed hosts into database; host names are not unique, so match on name anyway"""
    logger.info("Seeding hosts...")

    for host_data in HOSTS:
        existing = db.query(Host).filter(Host.name == host_data["name"]).first()
        if existing:
            logger.info(f"Host '{host_data['name']}' already exists, skipping...")
            continue

        db.add(Host(**host_data))
        logger.info(f"Added host: {host_data['name']}")

    db.commit()
    logger.info("✅ Hosts seeded successfully!")


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        seed_categories(db)
        seed_hosts(db)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Seeding failed: {e}", exc_info=True)
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
