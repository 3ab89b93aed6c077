"""
Extra service catalog - bookable add-ons such as breakfast or parking
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from frontdesk.models.ontology import ExtraService
from frontdesk.models.schemas import ExtraServiceCreate, ExtraServiceUpdate


class ExtraCatalogService:
    """Extra service catalog"""

    def __init__(self, db: Session):
        self.db = db

    def get_extras(self, include_inactive: bool = False, category: Optional[str] = None) -> List[ExtraService]:
        query = self.db.query(ExtraService)
        if not include_inactive:
            query = query.filter(ExtraService.is_active == True)
        if category:
            query = query.filter(ExtraService.category == category)
        return query.order_by(ExtraService.name).all()

    def get_extra(self, extra_id: int) -> Optional[ExtraService]:
        return self.db.query(ExtraService).filter(ExtraService.id == extra_id).first()

    def get_extra_by_name(self, name: str) -> Optional[ExtraService]:
        return self.db.query(ExtraService).filter(ExtraService.name == name).first()

    def create_extra(self, data: ExtraServiceCreate) -> ExtraService:
        if self.get_extra_by_name(data.name):
            raise ValueError(f"Extra service '{data.name}' already exists")

        extra = ExtraService(**data.model_dump())
        self.db.add(extra)
        self.db.commit()
        self.db.refresh(extra)
        return extra

    def update_extra(self, extra_id: int, data: ExtraServiceUpdate) -> ExtraService:
        """Update an extra; price changes only affect bookings priced afterwards"""
        extra = self.get_extra(extra_id)
        if not extra:
            raise ValueError("Extra service not found")

        update_data = data.model_dump(exclude_unset=True)
        if 'name' in update_data:
            existing = self.get_extra_by_name(update_data['name'])
            if existing and existing.id != extra_id:
                raise ValueError(f"Extra service '{update_data['name']}' already exists")

        for key, value in update_data.items():
            setattr(extra, key, value)

        self.db.commit()
        self.db.refresh(extra)
        return extra
