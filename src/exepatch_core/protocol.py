"""exepatch protocol constants.

Single source of truth for on-disk naming, size fingerprints and exit codes.
Keep this file stable. Applier and verifier must remain synchronized.
"""

# Backup lives beside the target: <target> + BACKUP_SUFFIX
BACKUP_SUFFIX = ".backup"

# Size fingerprint of the known-good reference executable
REFERENCE_EXPECTED_SIZE = 0x757C00  # 7,830,528 bytes

# Bundled patch set (package data under exepatch_core/data/)
REFERENCE_PATCH_SET = "reference.json"

# Process exit status
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# Patch table suffixes
JSON_SUFFIX = ".json"
PARQUET_SUFFIX = ".parquet"

# Parquet schema metadata keys for patch-set level fields
META_NAME = b"exepatch.name"
META_EXPECTED_SIZE = b"exepatch.expected_size"
