# booking_api/errors.py
"""
Errores de dominio. Cada uno lleva el status HTTP con el que se reporta;
la traducción a respuesta vive en un único lugar (main.py).
"""


class BookingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Falta un campo obligatorio o viene mal formado."""
    status_code = 400


class NotFound(BookingError):
    status_code = 404


class InvalidToken(BookingError):
    """Token desconocido o vencido."""
    status_code = 401
