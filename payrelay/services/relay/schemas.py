"""API request/response schemas for relay endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    """Payload accepted by `POST /create-order`."""

    model_config = ConfigDict(populate_by_name=True)

    amount: str = Field(pattern=r"^\d+(\.\d{1,3})?$")
    currency: str = Field(pattern=r"^[A-Z]{3}$")
    payee_email: str = Field(alias="payeeEmail", min_length=3)


class CreateOrderResponse(BaseModel):
    """Order id, approve link and correlation token handed back to the client."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderID")
    approve_link: str = Field(alias="approveLink")
    correlation_token: str = Field(alias="correlationToken")


class CaptureOrderRequest(BaseModel):
    """Payload accepted by `POST /capture-order`."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderID", pattern=r"^[A-Za-z0-9-]+$")


class ErrorResponse(BaseModel):
    error: str
