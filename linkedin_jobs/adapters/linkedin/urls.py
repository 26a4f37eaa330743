"""
URL construction for LinkedIn job searches and offset-based pagination.
"""

import re
import urllib.parse
from typing import Optional

from linkedin_jobs.core.models import SearchRequest
from linkedin_jobs.adapters.linkedin.config import (
    BASE_URL,
    GUEST_SEARCH_URL,
    JOB_TYPE_FILTER,
    JOB_VIEW_URL,
    JOBS_PER_PAGE,
    TIME_POSTED_FILTER,
    WORK_MODE_FILTER,
)

JOB_ID_IN_URL = re.compile(r"/jobs/view/(?:[^/?#]*-)?(\d+)")


def initial_start(request: SearchRequest, page_size: int = JOBS_PER_PAGE) -> int:
    """
    Starting ``start`` offset for a request.

    An explicit page number (``start_page``, or legacy ``offset``) wins; a
    company URL that already carries ``start`` keeps it; otherwise 0.
    """
    page = request.start_page or request.offset
    if page and page > 1:
        return (page - 1) * page_size
    if request.company_jobs_url:
        return get_start_param(request.company_jobs_url) or 0
    return 0


def build_search_url(
    request: SearchRequest,
    search_url: str = GUEST_SEARCH_URL,
    page_size: int = JOBS_PER_PAGE,
) -> str:
    """
    Build a LinkedIn search URL: keywords, location, start offset and the
    fixed filters (past week, full-time, on-site/remote/hybrid).
    """
    start = initial_start(request, page_size)

    if request.company_jobs_url:
        if start:
            return with_start_param(request.company_jobs_url, start)
        return request.company_jobs_url

    params = []
    if request.position:
        params.append(("keywords", request.position))
    if request.location:
        params.append(("location", request.location))
    if start:
        params.append(("start", str(start)))
    params.append(("f_TPR", TIME_POSTED_FILTER))
    params.append(("f_JT", JOB_TYPE_FILTER))
    params.append(("f_WT", WORK_MODE_FILTER))
    return f"{search_url}?{urllib.parse.urlencode(params)}"


def get_start_param(url: str) -> Optional[int]:
    """Read ``?start=`` from a LinkedIn jobs URL, or None."""
    query = urllib.parse.parse_qs(urllib.parse.urlparse(url).query)
    values = query.get("start")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


def with_start_param(url: str, start: int) -> str:
    """Return ``url`` with ``start`` set (added if missing, never negative)."""
    parsed = urllib.parse.urlparse(absolute_url(url))
    query = [
        (key, value)
        for key, value in urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
        if key != "start"
    ]
    query.append(("start", str(max(0, start))))
    return urllib.parse.urlunparse(
        parsed._replace(query=urllib.parse.urlencode(query))
    )


def absolute_url(href: str) -> str:
    if not href:
        return ""
    return urllib.parse.urljoin(BASE_URL, href)


def extract_job_id_from_url(url: str) -> str:
    """Numeric job id from ``/jobs/view/<id>`` or ``/jobs/view/<slug>-<id>``."""
    match = JOB_ID_IN_URL.search(url or "")
    return match.group(1) if match else ""


def build_job_url(job_id: str) -> str:
    return JOB_VIEW_URL.format(job_id=job_id)
