"""
Network Configuration Constants

Endpoints, timeouts and quotas of the external services.
"""

from .system import BASE_SECOND


class NetworkConfig:
    """Network configuration constants."""

    USER_AGENT = "dpccompare/0.1.0"
    ACCEPT_JSON = "application/json"
    CONTENT_TYPE_JSON = "application/json"

    # Error shape used when no HTTP response was received
    UNKNOWN_ERROR_STATUS = 500
    UNKNOWN_ERROR_CODE = 9999


class CensusConfig:
    """US Census Bureau geocoder."""

    BASE_URL = "https://geocoding.geo.census.gov/geocoder"
    ONELINE_ADDRESS_PATH = "/geographies/onelineaddress"
    BENCHMARK = "Public_AR_Current"
    VINTAGE = "Current_Current"
    LAYERS = "Counties"
    TIMEOUT = 15 * BASE_SECOND  # geocoder can take several seconds

    # Free tier is ~2,500 requests/day (undocumented); keep a buffer
    MAX_DAILY_REQUESTS = 2400
    BATCH_DELAY = 0.1 * BASE_SECOND
    PREWARM_DELAY = 0.2 * BASE_SECOND


class MarketplaceConfig:
    """Healthcare.gov marketplace API."""

    BASE_URL = "https://marketplace.api.healthcare.gov/api/v1"
    TIMEOUT = 10 * BASE_SECOND
    API_KEY_PARAM = "apikey"
    PLACEHOLDER_API_KEY = "your_api_key_here"  # noqa: S105
    KEY_REQUEST_URL = "https://developer.cms.gov/marketplace-api/key-request.html"

    PLANS_SEARCH_PATH = "/plans/search"
    PLAN_DETAILS_PATH = "/plans/{plan_id}"
    ELIGIBILITY_PATH = "/households/eligibility/estimates"
    SLCSP_PATH = "/households/slcsp"
    LCBP_PATH = "/households/lcbp"


class NadacConfig:
    """CMS NADAC drug acquisition cost datastore."""

    BASE_URL = "https://data.medicaid.gov/api/1/datastore/query"
    DATASET_ID = "f38d0706-1239-442c-a3cc-40ef1b686ac0"
    TIMEOUT = 30 * BASE_SECOND
    DEFAULT_SEARCH_LIMIT = 20
    BATCH_CHUNK_SIZE = 5
    BATCH_DELAY = 0.1 * BASE_SECOND
