"""Application-wide constants and configuration values.

Centralizes storage keys and checkout numbers so the stores, the API client
and the checkout service agree on them.
"""

# ============== STORAGE KEYS ==============
CART_STORAGE_KEY = "baoan_cart_v1"
BRANCH_STORAGE_KEY = "activeBranchId"
TOKEN_STORAGE_KEY = "token"
USER_STORAGE_KEY = "user"
LAST_ORDER_PHONE_KEY = "last_order_phone"

DEFAULT_KEY_PREFIX = "storefront:"

# ============== BRANCHES ==============
ALL_BRANCHES = "all"
BRANCH_QUERY_PARAM = "branchId"

# ============== CART ==============
MIN_QUANTITY = 1

# ============== API ==============
DEFAULT_API_URL = "http://localhost:9009/api"
DEFAULT_API_TIMEOUT = 30  # seconds
ORDER_ENDPOINT = "/order-public/orders"
ORDER_TRACK_ENDPOINT = "/order-public/orders/track"

# ============== CHECKOUT (VND) ==============
SHIPPING_FEE = 20_000
FREE_SHIPPING_THRESHOLD = 300_000
FREESHIP_VOUCHER_MIN = 99_000

ORDER_CHANNEL = "ONLINE"
ORDER_INITIAL_STATUS = "PENDING"
DELIVERY_METHOD = "SHIP"

PLACEHOLDER_IMAGE = "https://via.placeholder.com/900x900.png?text=No+Image"
