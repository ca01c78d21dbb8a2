from pydantic import BaseModel, ConfigDict
from typing import Optional


class BookingRequest(BaseModel):
    # Acepta teléfono numérico (JSON) igual que texto
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Todo opcional: la validación de obligatorios la hace BookingService
    name: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    time: Optional[str] = None
    date: Optional[str] = None
    notes: Optional[str] = None


class ModifyRequest(BookingRequest):
    pass


class CancelRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    service: str
    date: str
    time: str
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    message: str
    appointment: AppointmentOut


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str


class IdentityOut(BaseModel):
    phone: str
    name: str
