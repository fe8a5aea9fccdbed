from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional, Any


# One audit entry; admin_id is empty for kiosk actions
class LogResponse(BaseModel):
    id: int
    admin_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)


class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int
