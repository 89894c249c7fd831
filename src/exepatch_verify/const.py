ERRORS = {
  "E_ARGUMENT_MISSING": "Executable path not provided",
  "E_FILE_NOT_FOUND": "Executable not found",
  "E_OPEN_FAILURE": "Failed to open executable",
  "E_SIZE_MISMATCH": "Unexpected file size",
  "E_BACKUP_FAILURE": "Failed to create backup",
  "E_NOT_OPEN": "File is not open",
  "E_SEEK_FAILURE": "Failed to seek to position",
  "E_WRITE_FAILURE": "Failed to write to file",
  "E_RESTORE_FAILURE": "Failed to restore backup",
  "E_PATCH_NOT_APPLIED": "Patch bytes not present at offset",
  "E_PATCH_SET_INVALID": "Patch set invalid",
}
