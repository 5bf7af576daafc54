"""Built-in passthrough worker: every rendition is a byte copy of the source.

Useful for smoke-testing a deployment end to end (download, upload, queue
routing) without any transformation library installed.
"""

import shutil

from asset_compute_shared.asset_models import Rendition, Source
from asset_compute_worker import worker


def copy_source(source: Source, rendition: Rendition) -> None:
    shutil.copyfile(source.path, rendition.path)


main = worker(copy_source)
