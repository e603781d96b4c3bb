"""Constants for Electrolux Devices integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and storage settings.
"""

DOMAIN = "electrolux_devices"
NAME = "Electrolux Devices"
MANUFACTURER = "Electrolux"

AUTH_BASE_URL = "https://api.ocp.electrolux.one"
BASE_URL = "https://api.developer.electrolux.one"
USER_AGENT = "ElectroluxDevices/1.0 (Home Assistant)"

DEFAULT_POLLING_INTERVAL = 10  # seconds
HTTP_TIMEOUT = 10.0  # seconds

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"
ERROR_MISSING_CREDENTIALS = "missing_credentials"

CONF_API_KEY = "api_key"
CONF_CLIENT_ID = "client_id"
CONF_CLIENT_SECRET = "client_secret"
CONF_REFRESH_TOKEN = "refresh_token"
CONF_POLLING_INTERVAL = "polling_interval"

# Accessory context keys (persisted with each accessory)
CONTEXT_CAPABILITIES = "capabilities"
CONTEXT_APPLIANCE_ID = "applianceId"
CONTEXT_MODEL_NAME = "modelName"

STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 5  # seconds

CONNECTION_STATE_CONNECTED = "connected"

SIGNAL_NEW_ACCESSORY = f"{DOMAIN}_new_accessory_{{}}"
