"""Internal constants shared across the library."""

BASE_URL = "https://global.sofarcloud.com/api/"

LOGIN_ENDPOINT = "user/auth/he/login"
STATION_LIST_ENDPOINT = "device/stationInfo/selectStationListPages"
STATION_DETAIL_ENDPOINT = "device/stationInfo/selectStationDetail"

LOGIN_USER_AGENT = "okhttp/3.14.9"
APP_USER_AGENT = "okhttp/4.9.2"

#: Token lifetime requested at login, in seconds (30 days).
LOGIN_EXPIRE_TIME = 2592000
LOGIN_SUCCESS_CODE = "0"

STATION_PAGE_NUM = 1
STATION_PAGE_SIZE = 10

#: Record key holding the station id; it addresses the container and topic instead of becoming a leaf.
STATION_ID_KEY = "id"

#: Key of the nested realtime object inside a station detail response.
REALTIME_KEY = "stationRealTimeVo"

REQUEST_TIMEOUT_S = 5.0

# ------------------------------------------------------------------
# Field naming conventions of the vendor schema
# ------------------------------------------------------------------

UNIT_SUFFIX = "Unit"
INDICATOR_SUFFIXES: tuple[str, ...] = ("Flag", "IsNull")

# ------------------------------------------------------------------
# MQTT
# ------------------------------------------------------------------

TOPIC_PREFIX = "SofarCloud"
DEFAULT_MQTT_PORT = 1883
MQTT_CONNECT_TIMEOUT_S = 4.0
MQTT_KEEPALIVE_S = 60
UNSET_BROKER_ADDRESSES: frozenset[str] = frozenset({"", "0.0.0.0"})

# ------------------------------------------------------------------
# Run
# ------------------------------------------------------------------

#: Upper bound (inclusive, seconds) of the jittered startup delay.
STARTUP_DELAY_MAX_S = 57
SNAPSHOT_FILENAME = "sofar_realtime.json"
DONE_REASON = "Everything done. Going to terminate till next schedule"
