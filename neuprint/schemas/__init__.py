from neuprint.schemas.report import (
    AnalyzeRequest,
    HealthResponse,
    ReportMeta,
    ReportResponse,
)

__all__ = ["AnalyzeRequest", "HealthResponse", "ReportMeta", "ReportResponse"]
