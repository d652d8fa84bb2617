"""Remote key retrieval."""

from pkgtrust.remote.downloader import FileDownloader

__all__ = ["FileDownloader"]
