"""Game editions, API access, version detection, integrity lists and Linux patching."""

__all__ = ["api", "consts", "game", "linux_patch", "repair", "schema"]