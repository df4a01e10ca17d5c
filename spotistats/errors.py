"""
Error taxonomy for playlist analysis.

Every failure that leaves the pipeline is one of three kinds, each with a
stable error code and the HTTP status a web caller should answer with.
"""

from __future__ import annotations

from typing import Any, Optional


class SpotistatsError(Exception):
    """Base class. `detail` carries diagnostics (upstream status, body)."""

    code = "analysis_failed"
    status = 500

    def __init__(self, message: str = "", detail: Any = None):
        self.message = message or self.code
        self.detail = detail
        self.stage: Optional[str] = None
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.code}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class NotAuthenticated(SpotistatsError):
    """Missing, expired or unrefreshable credential."""

    code = "not_authenticated"
    status = 401


class UpstreamFetchFailed(SpotistatsError):
    """The provider answered a metadata, paging or batch request with a failure."""

    code = "upstream_fetch_failed"
    status = 502

    def __init__(self, message: str = "", detail: Any = None,
                 http_status: Optional[int] = None):
        super().__init__(message, detail)
        self.http_status = http_status


class AnalysisFailed(SpotistatsError):
    """Anything unexpected, e.g. a malformed payload."""

    code = "analysis_failed"
    status = 500
