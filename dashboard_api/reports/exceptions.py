"""
Report Errors
"""


class ReportError(Exception):
    """Base class for report failures."""


class InvalidReportRequest(ReportError):
    """Request parameters were rejected before any query ran."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SkuNotFoundError(ReportError):
    """No SKU matches the requested code."""

    def __init__(self, sku_id: str):
        self.sku_id = sku_id
        super().__init__(f"SKU not found: {sku_id}")
