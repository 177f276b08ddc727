"""memdbgvis protocol constants.

Single source of truth for launch markers, file extensions, the signal
identity and the serialization frame layout. The trigger side and the
inspector side must stay synchronized on every value here.
"""

# Launch argument: "<marker>:<path-to-agent-module>"
AGENT_MARKER = "-agentpath"
AGENT_DELIMITER = ":"

# Binary module extensions replaced to obtain the handshake file
MODULE_EXTENSIONS = (".dll", ".so", ".dylib", ".pyd")
DATA_EXTENSION = ".dat"
SOCKET_EXTENSION = ".sock"

# Signal identity
SIGNAL_NAME = "memdbgvis"
SIGNAL_DATAGRAM = SIGNAL_NAME.encode("ascii")
AUDIT_EVENT = "memdbgvis.visualize"

DEFAULT_SIGNAL_HOST = "127.0.0.1"
DEFAULT_SIGNAL_PORT = 47474

# Serialization frame: [Magic(4) | Ver(1) | Status(1) | Length(4)] = 10 bytes
FRAME_MAGIC = b"MDVS"
FRAME_VERSION = 1
FRAME_HEADER_FMT = "<4sBBI"
FRAME_HEADER_LEN = 10

# Sentinel bodies for failed serialization
NOT_SERIALIZABLE_MESSAGE = b"ERROR: Object is not serializable."
IO_ERROR_MESSAGE = b"Object serialization failed due to an I/O error."

# Environment configuration
ENV_AGENT_OPTIONS = "MEMDBGVIS_AGENT_OPTIONS"
ENV_SIGNAL = "MEMDBGVIS_SIGNAL"
ENV_SIGNAL_HOST = "MEMDBGVIS_SIGNAL_HOST"
ENV_SIGNAL_PORT = "MEMDBGVIS_SIGNAL_PORT"
ENV_QUIET = "MEMDBGVIS_QUIET"
