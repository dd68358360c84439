"""Downloading and unpacking archives, free-space checks and version differences."""

__all__ = ["archives", "diff", "downloader", "free_space", "installer"]