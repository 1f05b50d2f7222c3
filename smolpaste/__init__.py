"""smolpaste: a minimal authenticated paste and file hosting service."""
