from pydantic import BaseModel
from typing import List

from app.studio.models.passes import PassDefinition


class PassListResponse(BaseModel):
    """Каталог абонементов"""
    passes: List[PassDefinition]
    total: int
