"""SecureZip: filtered, deterministic ZIP snapshots of project directories."""
