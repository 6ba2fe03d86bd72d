from pydantic import BaseModel
from typing import List


class MonthlyStat(BaseModel):
    """Registrations folded into one calendar month"""

    name: str
    events: int
    revenue: float
    registrations: int


class CategoryStat(BaseModel):
    name: str
    value: int


class AnalyticsTotals(BaseModel):
    events: int
    registrations: int
    revenue: float
    avgAttendance: int


class Analytics(BaseModel):
    totals: AnalyticsTotals
    monthlyData: List[MonthlyStat]
    categoryData: List[CategoryStat]
