"""
Parcel Server — Payment Request/Response Schemas
=================================================
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PaymentConfirm(BaseModel):
    """Body of POST /payments, sent by the client after the card charge succeeded."""

    parcelId: str = Field(description="Parcel the payment settles")
    email: str = Field(min_length=1)
    amount: float = Field(ge=0)
    paymentMethod: Optional[Union[str, List[str]]] = None
    transactionId: str = Field(min_length=1, description="Provider transaction / intent id")


class PaymentConfirmResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    inserted_id: str = Field(alias="insertedId")


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount_in_cents: int = Field(alias="amountInCents", gt=0)


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(alias="clientSecret")
