# File: tazasu/api/v1/routes_updates.py

from fastapi import APIRouter
from sqlalchemy import select

from tazasu.api.deps import DbSession
from tazasu.models.update import Update
from tazasu.schemas.common import UpdateList

router = APIRouter()


@router.get("", response_model=UpdateList, summary="Service announcements")
def list_updates(db: DbSession):
    updates = db.scalars(
        select(Update).order_by(Update.created_at.desc(), Update.id.desc())
    ).all()
    return {"updates": updates}
