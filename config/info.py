import os

# meta
APP_NAME = "zenith-network"

# directories
HOME_DIR = os.path.expanduser("~")
CONFIG_DIR = os.path.join(
    os.environ.get("XDG_CONFIG_HOME", os.path.join(HOME_DIR, ".config")), APP_NAME
)
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
CONFIG_ENV_VAR = "ZENITH_NETWORK_CONFIG"
