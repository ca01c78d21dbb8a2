from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ValidationError as SchemaError
from sqlalchemy.orm import Session
from typing import Optional, Type

from ..database import get_db
from .. import schemas
from ..errors import ValidationError
from ..services.booking import BookingService, MSG_PHONE_REQUIRED

router = APIRouter(prefix="", tags=["appointments"])

MSG_BAD_BODY = "Invalid request body"
FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def parse_body(model: Type[BaseModel]):
    """
    Dependencia que lee el body como formulario o como JSON según el
    content-type. Body vacío = sin campos (lo valida BookingService).
    """
    async def dependency(request: Request) -> BaseModel:
        content_type = request.headers.get("content-type", "").lower()
        if content_type.startswith(FORM_TYPES):
            form = await request.form()
            data = {k: v for k, v in form.items() if isinstance(v, str)}
        elif await request.body():
            try:
                data = await request.json()
            except ValueError:
                raise ValidationError(MSG_BAD_BODY)
        else:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(MSG_BAD_BODY)
        try:
            return model.model_validate(data)
        except SchemaError:
            raise ValidationError(MSG_BAD_BODY)

    return dependency


@router.get("/check-phone/{phone}")
def check_phone(phone: str, svc: BookingService = Depends(get_booking_service)):
    appt = svc.find(phone)
    if appt is None:
        return {"exists": False}
    return {"exists": True, "appointment": schemas.AppointmentOut.model_validate(appt).model_dump()}


@router.post("/submit-booking", response_model=schemas.BookingResponse)
def submit_booking(
    req: schemas.BookingRequest = Depends(parse_body(schemas.BookingRequest)),
    svc: BookingService = Depends(get_booking_service),
):
    appt = svc.submit(
        name=req.name,
        phone=req.phone,
        service=req.service,
        time=req.time,
        date=req.date,
        notes=req.notes,
    )
    return schemas.BookingResponse(
        message="Appointment saved successfully!",
        appointment=schemas.AppointmentOut.model_validate(appt),
    )


@router.post("/modify-appointment", response_model=schemas.BookingResponse)
def modify_appointment(
    req: schemas.ModifyRequest = Depends(parse_body(schemas.ModifyRequest)),
    svc: BookingService = Depends(get_booking_service),
):
    # Sólo los campos enviados; un "notes": null explícito borra las notas
    changes = req.model_dump(exclude_unset=True)
    phone = changes.pop("phone", None)
    appt = svc.modify(phone, **changes)
    return schemas.BookingResponse(
        message="Appointment updated successfully!",
        appointment=schemas.AppointmentOut.model_validate(appt),
    )


@router.post("/cancel-appointment", response_model=schemas.MessageResponse)
def cancel_appointment(
    req: schemas.CancelRequest = Depends(parse_body(schemas.CancelRequest)),
    svc: BookingService = Depends(get_booking_service),
):
    svc.cancel(req.phone)
    return schemas.MessageResponse(message="Appointment canceled successfully!")


@router.get("/appointment/{phone}", response_model=schemas.AppointmentOut)
def get_appointment(phone: str, svc: BookingService = Depends(get_booking_service)):
    return schemas.AppointmentOut.model_validate(svc.get(phone))


@router.get("/confirmation", response_model=schemas.AppointmentOut)
def confirmation(phone: Optional[str] = Query(default=None), svc: BookingService = Depends(get_booking_service)):
    if not phone:
        raise ValidationError(MSG_PHONE_REQUIRED)
    return schemas.AppointmentOut.model_validate(svc.get(phone))
