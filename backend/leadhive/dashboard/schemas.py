from pydantic import BaseModel
from typing import List

class StatusSlice(BaseModel):
    name: str
    value: int
    color: str

class SourceBar(BaseModel):
    name: str
    leads: int

class DashboardStats(BaseModel):
    total_leads: int
    potential_revenue: float
    conversion_rate: float
    new_leads: int
    high_budget_leads: int
    overdue_follow_ups: int
    status_distribution: List[StatusSlice]
    source_distribution: List[SourceBar]
