SERVICE_NAME = "agent-control-gate"
SERVICE_VERSION = "0.1.0"
PLUGIN_ID = "agent-control"
USER_AGENT = "openclaw-agent-control-plugin/0.1"
