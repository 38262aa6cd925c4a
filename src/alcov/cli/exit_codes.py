# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_GENERIC = 1  # Generic failure (fallback)
EXIT_DATAERR = 65  # Input data was invalid (e.g., empty dump, malformed XML)
EXIT_NOINPUT = 66  # Input not found (e.g., source root or dump missing)
EXIT_CONFIG = 78  # Invalid configuration (e.g., no source root configured)

__all__ = ["EXIT_CONFIG", "EXIT_DATAERR", "EXIT_GENERIC", "EXIT_NOINPUT", "EXIT_OK"]
