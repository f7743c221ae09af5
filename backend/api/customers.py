"""Customers API Routes

Request body endpoint whose model is documented from its validators.
"""
from enum import Enum
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from schemarules import Validator
from schemarules.logging import api_logger

log = api_logger()

router = APIRouter()


# === Models ===

class CustomerTier(str, Enum):
    STANDARD = "standard"
    GOLD = "gold"
    PLATINUM = "platinum"


class Address(BaseModel):
    line1: str
    city: str
    postcode: Optional[str] = None


class CustomerCreate(BaseModel):
    name: str
    email: Optional[str] = None
    age: int
    discount: float = 0.0
    tier: str = "standard"
    tags: list[str] = []
    nickname: Optional[str] = None
    address: Optional[Address] = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    tier: str


# === Validators ===

class AddressValidator(Validator[Address]):
    def __init__(self):
        super().__init__()
        self.rule_for("line1").not_empty().maximum_length(100)
        self.rule_for("city").not_empty()
        self.rule_for("postcode").matches(r"^\d{5}$")


class CustomerValidator(Validator[CustomerCreate]):
    def __init__(self):
        super().__init__()
        self.rule_for("name").not_empty().maximum_length(64)
        self.rule_for("email").email_address()
        self.rule_for("age").greater_than(0).less_than_or_equal(150)
        self.rule_for("discount").inclusive_between(0, 100)
        self.rule_for("tier").is_in_enum(CustomerTier)
        self.rule_for("tags").not_empty()
        self.rule_for("nickname").maximum_length(20).when(lambda c: c.tier == CustomerTier.GOLD)
        self.rule_for("address").set_validator(AddressValidator())


VALIDATORS = (CustomerValidator(), AddressValidator())


# === Endpoints ===

_customers: list[CustomerCreate] = []


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(customer: CustomerCreate):
    """Register a customer."""
    _customers.append(customer)
    log.info("customer_created", customer_id=len(_customers), tier=customer.tier)
    return CustomerResponse(id=len(_customers), name=customer.name, tier=customer.tier)
