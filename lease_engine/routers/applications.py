# lease_engine/routers/applications.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import ApplicationCreate, ApplicationOut, ApplicationStatusUpdate, ApplicationViewOut
from ..services.application_queries import list_applications
from ..services.application_store import create_application
from ..services.lease_issuance import update_status

router = APIRouter(prefix="/applications", tags=["applications"])


def get_actor_id(x_actor_id: Optional[str] = Header(default=None)) -> Optional[str]:
    # identity is verified upstream; we only record who asked
    return x_actor_id


@router.get("", response_model=list[ApplicationViewOut])
def list_applications_route(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    user_type: Optional[str] = Query(default=None, alias="userType"),
    db: Session = Depends(get_db),
):
    tenant_id = manager_id = None
    if user_id and user_type:
        if user_type == "tenant":
            tenant_id = user_id
        elif user_type == "manager":
            manager_id = user_id
    return list_applications(db, tenant_id=tenant_id, manager_id=manager_id)


@router.post("", response_model=ApplicationOut, status_code=201)
def create_application_route(
    payload: ApplicationCreate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return create_application(db, payload.to_submission(), actor_id=actor_id)


@router.put("/{application_id}/status", response_model=ApplicationOut)
def update_application_status_route(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return update_status(db, application_id, payload.status, actor_id=actor_id)
