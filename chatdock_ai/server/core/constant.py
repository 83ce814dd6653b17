PROJECT_NAME = "ChatDock-AI"
VERSION = "0.1.0"
API_V1_STR = "/api/v1"
