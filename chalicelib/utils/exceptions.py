__all__ = ["ApiException", "NotAuthorizedException", "InvalidRequestBody", "RecordNotFound",
           "NumberOfRetriesExceeded", "ValidationException", "MissingFields", "MissingCustomerFields",
           "MissingAddressFields", "InvalidItemId", "ItemNotFound", "ItemUnavailable", "InvalidQuantity",
           "InvalidStatus", "InvalidQueryParameter", "OrderNotFound", "OrderNumberConflict",
           "MenuItemNotFound", "ReservationNotFound", "ReservationDateInPast"]


class ApiException(Exception):
    STATUS_CODE = 400
    LEVEL = 'warning'

    def __init__(self, message: str = '', errors=None):
        super().__init__(message)
        self.errors = errors or []


# Auth exceptions
class NotAuthorizedException(ApiException):
    STATUS_CODE = 401


# Generic Exceptions
class InvalidRequestBody(ApiException):
    pass


class InvalidQueryParameter(ApiException):
    pass


# DynamoDB exceptions
class RecordNotFound(ApiException):
    STATUS_CODE = 404


# DB Performance Exception
class NumberOfRetriesExceeded(Exception):
    pass


# Validations exceptions
class ValidationException(ApiException):
    pass


class MissingFields(ValidationException):
    pass


class MissingCustomerFields(ValidationException):
    pass


class MissingAddressFields(ValidationException):
    pass


class InvalidItemId(ValidationException):
    pass


class ItemNotFound(ValidationException):
    pass


class ItemUnavailable(ValidationException):
    pass


class InvalidQuantity(ValidationException):
    pass


class InvalidStatus(ValidationException):
    pass


class ReservationDateInPast(ValidationException):
    pass


# Not found exceptions
class OrderNotFound(RecordNotFound):
    pass


class MenuItemNotFound(RecordNotFound):
    pass


class ReservationNotFound(RecordNotFound):
    pass


class OrderNumberConflict(ApiException):
    STATUS_CODE = 409
    LEVEL = 'error'
