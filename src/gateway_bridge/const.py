"""Constants shared by the bridge: capability tags, device events, defaults."""

# Capability and type tags carried by devices
TYPE_LIGHT = "type:light"
DEFAULT_GATEWAY_TYPE = "type:miio:gateway"
CAP_BRIGHTNESS = "cap:brightness"
CAP_DIMMABLE = "cap:dimmable"
CAP_COLORABLE = "cap:colorable"

# Device push notifications
EVENT_POWER_CHANGED = "powerChanged"
EVENT_BRIGHTNESS_CHANGED = "brightnessChanged"
EVENT_TEMPERATURE_CHANGED = "temperatureChanged"
EVENT_HUMIDITY_CHANGED = "relativeHumidityChanged"
EVENT_ILLUMINANCE_CHANGED = "illuminanceChanged"
EVENT_BATTERY_CHANGED = "batteryLevelChanged"
EVENT_ACTION = "action"
EVENT_MOVEMENT = "movement"
EVENT_INACTIVITY = "inactivity"

DEFAULT_POLL_INTERVAL = 5 * 60  # seconds
# Gateway light sensors read high by this much
DEFAULT_ILLUMINANCE_OFFSET = 270
ILLUMINANCE_MAX_VALUE = 1200
DEFAULT_BRIGHTNESS = 50
# Used for packed colors on lights without brightness control
FULL_BRIGHTNESS = 100
DEFAULT_MANUFACTURER = "Xiaomi"
