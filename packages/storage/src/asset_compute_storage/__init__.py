"""Asset Compute storage: source acquisition, rendition persistence, work directories.

Everything here tolerates flaky networks (bounded retry) and hostile input
(locators are validated before any request is made).
"""

from asset_compute_storage.fetch import SourceFetcher, get_source
from asset_compute_storage.retry import RetryPolicy
from asset_compute_storage.upload import RenditionUploader, put_rendition
from asset_compute_storage.workdir import WorkDirectoryManager

__all__ = [
    "RenditionUploader",
    "RetryPolicy",
    "SourceFetcher",
    "WorkDirectoryManager",
    "get_source",
    "put_rendition",
]
