"""Analytics schemas for lead dashboards and revenue."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CountRow(BaseModel):
    key: str
    count: int
    percentage: float


class PipelineRow(CountRow):
    insight: str


class AgentBreakdown(BaseModel):
    rows: List[CountRow]
    assigned_count: int
    unassigned_count: int


class RetryRow(BaseModel):
    retry_count: int
    count: int


class DayRow(BaseModel):
    date: str
    count: int


class LeadsOverTime(BaseModel):
    days: List[DayRow]
    total: int
    avg_per_day: float
    peak_day: int


class FollowUpSplit(BaseModel):
    overdue: int
    upcoming: int


class LeadAnalyticsOverview(BaseModel):
    as_of: str
    total: int
    categories: dict
    by_status: List[CountRow]
    by_pipeline: List[PipelineRow]
    by_agent: AgentBreakdown
    by_retry: List[RetryRow]
    over_time: LeadsOverTime
    follow_up: FollowUpSplit
    inactive_by_status: List[CountRow]

    model_config = ConfigDict(from_attributes=True)


class CourseRevenueRow(BaseModel):
    course_name: str
    units: int
    total_revenue: Decimal
    avg_fee: Decimal
    total_due: Decimal


class RevenuePoint(BaseModel):
    date: str
    revenue: Decimal


class RevenueAnalytics(BaseModel):
    total_revenue: Decimal
    total_units: int
    avg_revenue_per_unit: Decimal
    total_due: Decimal
    revenue_by_course: List[CourseRevenueRow]
    revenue_over_time: List[RevenuePoint]
    date_from: Optional[str] = None
    date_to: Optional[str] = None
