"""
Schemas Pydantic para validación
"""
from .common import (
    RepresentativeSummary,
    DoctorSummary,
    ProductSummary,
    HealthResponse
)
from .assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    AssignmentDetailResponse,
    AssignmentStatsResponse,
    VisitGoalResponse,
    CalendarEntry,
    CalendarDay,
    WeeklyCalendarResponse,
    WeeklySeriesCreate,
    WeeklySeriesUpdate,
    SeriesItemResult,
    WeeklySeriesResult,
    SeriesHeadResponse
)
from .meeting import (
    MeetingStartRequest,
    MeetingPostponeRequest,
    MeetingEndRequest,
    MeetingProductCreate,
    MeetingProductUpdate,
    MeetingProductResponse,
    MeetingResponse,
    MeetingDetailResponse,
    MeetingListResponse,
    MeetingStatsResponse,
    MeetingProductsPartition
)
from .discussed_product import (
    DiscussedProductsUpdate,
    DiscussedProductIdsResponse,
    ProductForSelection,
    DiscussedProductDetailed,
    DiscussedSummaryRequest,
    DiscussedSummaryResponse
)

__all__ = [
    # Common
    "RepresentativeSummary",
    "DoctorSummary",
    "ProductSummary",
    "HealthResponse",
    # Assignment
    "AssignmentCreate",
    "AssignmentUpdate",
    "AssignmentResponse",
    "AssignmentDetailResponse",
    "AssignmentStatsResponse",
    "VisitGoalResponse",
    "CalendarEntry",
    "CalendarDay",
    "WeeklyCalendarResponse",
    "WeeklySeriesCreate",
    "WeeklySeriesUpdate",
    "SeriesItemResult",
    "WeeklySeriesResult",
    "SeriesHeadResponse",
    # Meeting
    "MeetingStartRequest",
    "MeetingPostponeRequest",
    "MeetingEndRequest",
    "MeetingProductCreate",
    "MeetingProductUpdate",
    "MeetingProductResponse",
    "MeetingResponse",
    "MeetingDetailResponse",
    "MeetingListResponse",
    "MeetingStatsResponse",
    "MeetingProductsPartition",
    # Discussed products
    "DiscussedProductsUpdate",
    "DiscussedProductIdsResponse",
    "ProductForSelection",
    "DiscussedProductDetailed",
    "DiscussedSummaryRequest",
    "DiscussedSummaryResponse"
]
