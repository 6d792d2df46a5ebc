import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "cors-proxy")
PROXY_BASE_PATH = os.environ.get("PROXY_BASE_PATH", "").rstrip("/")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
