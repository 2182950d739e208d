"""CloudTask: a personal task manager backed by a local key-value store."""
