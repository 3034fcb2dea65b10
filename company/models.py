"""
company/models.py -- Domain dataclass for employer records.

Pure data container. Persistence lives in company/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Company:
    """An employer that posts jobs.

    id is None before the record is written to the database.
    """

    name: str
    id: Optional[int] = None
    description: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None  # URL or stored file name
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: Optional[str] = None
