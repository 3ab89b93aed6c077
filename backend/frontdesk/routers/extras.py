"""
Extra service routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from frontdesk.database import get_db
from frontdesk.models.ontology import User
from frontdesk.models.schemas import ExtraServiceCreate, ExtraServiceUpdate, ExtraServiceResponse
from frontdesk.security.auth import require_manager
from frontdesk.services.extra_service import ExtraCatalogService

router = APIRouter(prefix="/extras", tags=["Extra services"])


@router.get("", response_model=List[ExtraServiceResponse])
def list_extras(
    include_inactive: bool = False,
    category: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return ExtraCatalogService(db).get_extras(include_inactive, category)


@router.post("", response_model=ExtraServiceResponse)
def create_extra(
    data: ExtraServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    try:
        return ExtraCatalogService(db).create_extra(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{extra_id}", response_model=ExtraServiceResponse)
def update_extra(
    extra_id: int,
    data: ExtraServiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    service = ExtraCatalogService(db)
    if not service.get_extra(extra_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Extra service not found")
    try:
        return service.update_extra(extra_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
