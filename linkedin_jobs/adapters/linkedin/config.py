"""
LinkedIn-specific constants.
"""

# Base URLs
BASE_URL = "https://www.linkedin.com"
GUEST_SEARCH_URL = "https://www.linkedin.com/jobs/search"
AUTH_SEARCH_URL = "https://www.linkedin.com/jobs/search-results/"
LOGIN_URL = "https://www.linkedin.com/login"
FEED_URL = "https://www.linkedin.com/feed/"
JOB_VIEW_URL = "https://www.linkedin.com/jobs/view/{job_id}"

# Search filters applied to every keyword search
TIME_POSTED_FILTER = "r604800"  # f_TPR: past 7 days
JOB_TYPE_FILTER = "F"  # f_JT: full-time
WORK_MODE_FILTER = "2,1,3"  # f_WT: remote, on-site, hybrid

# Pagination
JOBS_PER_PAGE = 25  # LinkedIn default
MAX_REVEAL_SCROLLS = 50  # Slow-scroll ceiling while looking for the pagination bar
REVEAL_SCROLL_STEP = 300  # px

# Fixed wait used by the minimal variant instead of a container wait
MINIMAL_SETTLE_MS = 3000

# Login
LOGIN_CHECK_TIMEOUT = 15000  # ms
LOGIN_SETTLE_MS = 3000
