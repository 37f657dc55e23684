# Sibling artifacts derived from the target path by appending these suffixes.
TMP_SUFFIX = ".tmp"
BACKUP_SUFFIX = ".bk"

# Prefix for every diagnostic line written to stderr.
DIAGNOSTIC_PREFIX = "REPRINT SEZ: "

# Environment variables consulted at call time (values "1" or "true" enable).
QUIET_ENV_VAR = "REPRINT_QUIET"
VERBOSE_ENV_VAR = "REPRINT_VERBOSE"

# Replacement text is always encoded this way; original content is raw bytes.
TEXT_ENCODING = "utf-8"
