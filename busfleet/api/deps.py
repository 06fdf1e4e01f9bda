# busfleet/api/deps.py
from typing import Iterator

from busfleet.storage.base import Storage
from busfleet.storage.factory import open_storage


def get_storage() -> Iterator[Storage]:
    """Yield a storage for the request and make sure it's closed afterwards."""
    with open_storage() as storage:
        yield storage
