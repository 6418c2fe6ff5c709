"""Optional diagnostics comparing model code length to standard compressors."""
