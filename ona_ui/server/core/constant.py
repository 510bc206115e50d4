PROJECT_NAME = "Ona UI API"

API_PREFIX = "/api"
API_PUBLIC_STR = f"{API_PREFIX}/public"
API_ADMIN_STR = f"{API_PREFIX}/admin"
API_USER_STR = f"{API_PREFIX}/user"
API_AUTH_STR = f"{API_PREFIX}/auth"

# Pagination bounds
DEFAULT_PAGE_SIZE = 20
ADMIN_MAX_PAGE_SIZE = 100
PUBLIC_MAX_PAGE_SIZE = 50

# Cache-Control max-age (seconds) for public catalog responses
PUBLIC_CACHE_TTL = 300
PUBLIC_CACHE_TTL_SHORT = 60
