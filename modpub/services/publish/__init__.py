"""Release publishing pipeline: extract, resolve, hash and upload."""
