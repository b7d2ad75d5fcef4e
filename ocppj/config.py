"""
Configuration settings for the OCPP-J runtime.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Server settings
HOST = os.getenv('OCPP_HOST', '0.0.0.0')
PORT = int(os.getenv('OCPP_PORT', 9000))
LISTEN_PATH = os.getenv('OCPP_LISTEN_PATH', '/{ws}')

# Logging settings
LOG_DIR = Path(os.getenv('OCPP_LOG_DIR', BASE_DIR / 'logs'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Dispatcher settings
QUEUE_CAPACITY = int(os.getenv('OCPP_QUEUE_CAPACITY', 10))
RESPONSE_TIMEOUT = float(os.getenv('OCPP_RESPONSE_TIMEOUT', 30))
RETAIN_QUEUE_ON_DISCONNECT = os.getenv('OCPP_RETAIN_QUEUE', 'false').lower() in ('1', 'true', 'yes')

# WebSocket timeouts (seconds)
WRITE_WAIT = float(os.getenv('OCPP_WS_WRITE_WAIT', 10))
PONG_WAIT = float(os.getenv('OCPP_WS_PONG_WAIT', 60))
PING_PERIOD = float(os.getenv('OCPP_WS_PING_PERIOD', 54))
HANDSHAKE_TIMEOUT = float(os.getenv('OCPP_WS_HANDSHAKE_TIMEOUT', 30))

# Client reconnection backoff
RECONNECT_MIN_DELAY = float(os.getenv('OCPP_RECONNECT_MIN_DELAY', 10))
RECONNECT_RANDOM_RANGE = float(os.getenv('OCPP_RECONNECT_RANDOM_RANGE', 15))
RECONNECT_REPEAT = int(os.getenv('OCPP_RECONNECT_REPEAT', 5))

# Payload settings
# An empty format falls back to ISO 8601 with microseconds
DATE_TIME_FORMAT = os.getenv('OCPP_DATE_TIME_FORMAT', '%Y-%m-%dT%H:%M:%SZ')
MESSAGE_VALIDATION = os.getenv('OCPP_MESSAGE_VALIDATION', 'true').lower() in ('1', 'true', 'yes')

# Heartbeat interval returned by the demo central system
DEFAULT_HEARTBEAT_INTERVAL = 300  # 5 minutes in seconds
