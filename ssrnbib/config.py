from __future__ import annotations

SSRN_ABSTRACT_BASE = "https://papers.ssrn.com/sol3/papers.cfm?abstract_id="
SSRN_PERMANENT_BASE = "https://ssrn.com/abstract="

# Every SSRN working paper is registered under the same container
DEFAULT_JOURNAL = "SSRN Electronic Journal"
DEFAULT_PUBLISHER = "Elsevier BV"
DEFAULT_ENTRY_TYPE = "article"

# Substituted when a date tag cannot be parsed; chosen far enough in the future
# that it never looks like a real publication date
SENTINEL_DATE = "01/01/2099"

# names of the <meta> tags that carry the citation data
META_TITLE = "citation_title"
META_ONLINE_DATE = "citation_online_date"
META_PUBLICATION_DATE = "citation_publication_date"
META_AUTHOR = "citation_author"

# author links on an abstract page
COAUTHOR_LINK_TITLE = "View other papers by this author"
COAUTHOR_EXCLUDED_PREFIX = "See all articles"

# bib-key infix used when a paper has more than two authors
BIBKEY_ET_AL = "EtAl"
BIBKEY_NO_AUTHOR_PREFIX = "SSRN"

# HTTP request configuration
# Default timeout for HTTP requests (in seconds)
HTTP_TIMEOUT_DEFAULT = 30.0

# Retry policy for fetching an abstract page
# The first wait is FETCH_BACKOFF_INITIAL seconds and every following wait is
# FETCH_BACKOFF_MULTIPLIER times longer, never exceeding FETCH_BACKOFF_MAX
FETCH_MAX_ATTEMPTS = 5
FETCH_BACKOFF_INITIAL = 4.0
FETCH_BACKOFF_MULTIPLIER = 2.0
FETCH_BACKOFF_MAX = 64.0

# the session adapter never retries on its own; RetryPolicy counts every GET
HTTP_TRANSPORT_RETRIES = 0

# HTTP status codes that should trigger retries
HTTP_RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
