"""Application-wide constants.

This module centralizes magic numbers and fixed platform values so the
rest of the relay has a single source of truth.
"""

# =============================================================================
# Facebook API
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Base URL for the Graph API (the Send API lives under /me/messages)
FACEBOOK_GRAPH_API_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_API_VERSION}"

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# =============================================================================
# Webhook
# =============================================================================

# Value of the envelope "object" field for Page subscriptions
PAGE_OBJECT = "page"

# hub.mode value sent by Facebook when confirming a subscription
SUBSCRIBE_MODE = "subscribe"

# Header carrying the HMAC of the raw request body
SIGNATURE_HEADER = "x-hub-signature"

# =============================================================================
# Server
# =============================================================================

# Default listening port
DEFAULT_PORT = 5000

# Directory served under /assets
STATIC_ASSETS_DIR = "public/assets"

# Graceful shutdown timeout (seconds) - wait this long for outbound sends
GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS = 30.0
