"""
Input models for sensitive entities.

Create models declare required fields; update models make every field
optional but refuse ``null`` for sensitive ones, since a stored triplet can
only be replaced, never cleared. Validation messages never echo the
rejected value.
"""
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CARD_NUMBER_RE = re.compile(r"^\d{13,19}$")
EXPIRY_DATE_RE = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")
CVV_RE = re.compile(r"^\d{3,4}$")


def check_card_number(value: str) -> str:
    if not CARD_NUMBER_RE.match(value):
        raise ValueError("Invalid card number format/length.")
    return value


def check_expiry_date(value: str) -> str:
    if not EXPIRY_DATE_RE.match(value):
        raise ValueError("Invalid expiry date format. Use MM/YY.")
    return value


def check_cvv(value: str) -> str:
    if not CVV_RE.match(value):
        raise ValueError("Invalid CVV format. Must be 3 or 4 digits.")
    return value


def check_not_null(value: Optional[str], name: str) -> str:
    if value is None:
        raise ValueError(f"{name} cannot be null")
    return value


class RecordInput(BaseModel):
    """Base for entity input; unknown attributes are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CredentialCreate(RecordInput):
    site_name: str = Field(alias="siteName", min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    url: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None


class CredentialUpdate(RecordInput):
    site_name: Optional[str] = Field(default=None, alias="siteName", min_length=1)
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_not_null(cls, value: Optional[str]) -> str:
        return check_not_null(value, "password")


class WalletCardCreate(RecordInput):
    cardholder_name: str = Field(alias="cardholderName", min_length=1)
    card_number: str = Field(alias="cardNumber")
    expiry_date: str = Field(alias="expiryDate")
    cvv: str
    card_type: Optional[str] = Field(default=None, alias="cardType")
    bank_name: Optional[str] = Field(default=None, alias="bankName")
    notes: Optional[str] = None

    @field_validator("card_number")
    @classmethod
    def valid_card_number(cls, value: str) -> str:
        return check_card_number(value)

    @field_validator("expiry_date")
    @classmethod
    def valid_expiry_date(cls, value: str) -> str:
        return check_expiry_date(value)

    @field_validator("cvv")
    @classmethod
    def valid_cvv(cls, value: str) -> str:
        return check_cvv(value)


class WalletCardUpdate(RecordInput):
    cardholder_name: Optional[str] = Field(
        default=None, alias="cardholderName", min_length=1
    )
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")
    cvv: Optional[str] = None
    card_type: Optional[str] = Field(default=None, alias="cardType")
    bank_name: Optional[str] = Field(default=None, alias="bankName")
    notes: Optional[str] = None

    @field_validator("cardholder_name")
    @classmethod
    def cardholder_not_null(cls, value: Optional[str]) -> str:
        return check_not_null(value, "cardholderName")

    @field_validator("card_number")
    @classmethod
    def valid_card_number(cls, value: Optional[str]) -> str:
        return check_card_number(check_not_null(value, "cardNumber"))

    @field_validator("expiry_date")
    @classmethod
    def valid_expiry_date(cls, value: Optional[str]) -> str:
        return check_expiry_date(check_not_null(value, "expiryDate"))

    @field_validator("cvv")
    @classmethod
    def valid_cvv(cls, value: Optional[str]) -> str:
        return check_cvv(check_not_null(value, "cvv"))
