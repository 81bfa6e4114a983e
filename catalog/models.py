"""
catalog/models.py -- Domain dataclass for the store catalog.

Pure data container. Queries and paging live in catalog/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Store:
    """A shop listed in the catalog.

    open_at / closed_at are local "HH:MM" strings. tag is a single category
    label used to filter listings (empty means untagged). id is None before the
    record is written to the database.
    """

    name: str
    description: str = ""
    city: str = ""
    address: str = ""
    card_img: str = ""
    rating: float = 0.0
    open_at: str = ""
    closed_at: str = ""
    tag: str = ""
    id: Optional[str] = None
