"""
Parcel Server — Payment Record
===============================

What:  Typed view of a document in the `payments` collection.
       Written once per confirmed payment; never updated or deleted.
"""

from datetime import datetime
from typing import List, Optional, Union

from parcel_server.models.document import DocumentRecord


class Payment(DocumentRecord):
    parcelId: str
    email: str
    amount: float
    paymentMethod: Optional[Union[str, List[str]]] = None
    transactionId: str
    paid_at: datetime
    paid_at_string: str
