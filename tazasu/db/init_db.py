"""
Database initialization helpers.

Models are imported here so their tables get registered on Base.metadata
before ``create_all`` runs.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tazasu.core.config import Settings
from tazasu.core.security import hash_password
from tazasu.db.session import Database
from tazasu.models.base import Base
from tazasu.models.complaint import Complaint
from tazasu.models.update import Update
from tazasu.models.user import ROLE_ADMIN, ROLE_USER, User

logger = logging.getLogger(__name__)

SEED_COMPLAINTS = [
    {
        "owner": "user",
        "name": "Aigul Nurlanova",
        "lat": 43.222,
        "lng": 76.8512,
        "address": "Almaty, Abay st. 150",
        "description": "The water has an unpleasant smell and a cloudy colour. "
        "The problem has persisted for a week.",
        "status": "pending",
    },
    {
        "owner": "user",
        "name": "Erlan Kasymov",
        "lat": 51.1694,
        "lng": 71.4491,
        "address": "Astana, Kenesary st. 40",
        "description": "Low water pressure, sometimes no supply at all, "
        "especially in the morning and evening.",
        "status": "in_progress",
    },
    {
        "owner": "admin",
        "name": "Gulnara Abdullina",
        "lat": 43.6532,
        "lng": 51.1694,
        "address": "Aktobe, Moldagulova st. 25",
        "description": "Water tastes of chlorine; children complain of stomach "
        "aches after drinking it. Quality check needed.",
        "status": "resolved",
    },
    {
        "owner": "user",
        "name": "Askhat Zhumabekov",
        "lat": 50.2833,
        "lng": 57.1667,
        "address": "Petropavl, Konstitutsii st. 15",
        "description": "Rusty water from the taps for the third day. "
        "Cannot be used for drinking or cooking.",
        "status": "pending",
    },
    {
        "owner": "admin",
        "name": "Dinara Sagyndykova",
        "lat": 42.3417,
        "lng": 69.59,
        "address": "Shymkent, Baitursynov st. 89",
        "description": "Water supply is cut off without notice. "
        "The published schedule is not followed.",
        "status": "in_progress",
    },
]

SEED_UPDATES = [
    ("System update", "We updated the system to improve stability and speed."),
    ("New features", "Added new features for tracking complaint status."),
]


def init_db(database: Database) -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=database.engine)


def drop_db(database: Database) -> None:
    Base.metadata.drop_all(bind=database.engine)


def seed_initial_data(db: Session, settings: Settings) -> dict:
    """
    Insert the demo admin, a test user, sample complaints and updates.

    Returns row counts per table after seeding.
    """
    admin = User(
        name="TAZA SU Administrator",
        email="admin@tazasu.kz",
        password_hash=hash_password("admin123", settings),
        role=ROLE_ADMIN,
    )
    user = User(
        name="Test User",
        email="user@test.com",
        password_hash=hash_password("user123", settings),
        phone="+7 777 123 4567",
        role=ROLE_USER,
    )
    db.add_all([admin, user])
    db.flush()

    owners = {"admin": admin.id, "user": user.id}
    for item in SEED_COMPLAINTS:
        db.add(
            Complaint(
                user_id=owners[item["owner"]],
                name=item["name"],
                location_lat=item["lat"],
                location_lng=item["lng"],
                location_address=item["address"],
                description=item["description"],
                status=item["status"],
            )
        )

    for title, description in SEED_UPDATES:
        db.add(Update(title=title, description=description))

    db.flush()
    counts = {
        "users": db.scalar(select(func.count()).select_from(User)),
        "complaints": db.scalar(select(func.count()).select_from(Complaint)),
        "updates": db.scalar(select(func.count()).select_from(Update)),
    }
    logger.info("Seeded initial data: %s", counts)
    return counts
