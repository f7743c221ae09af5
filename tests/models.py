"""Models and validators shared across the test suite."""
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemarules import Validator

TEXT_PROPERTY_1 = "text_property_1"
TEXT_PROPERTY_2 = "text_property_2"


class Color(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class Sample(BaseModel):
    plain_text: str = ""
    not_null: Optional[str] = None
    not_empty: str = ""
    email_address: str = ""
    regex_field: str = ""
    value_in_range: int = 0
    value_in_range_exclusive: int = 0
    value_in_range_float: float = 0.0
    value_in_range_double: float = 0.0
    decimal_value: float = 0.0
    not_empty_with_max_length: str = ""
    color: Optional[Color] = None
    tags: list[str] = []


class SampleValidator(Validator[Sample]):
    def __init__(self):
        super().__init__()
        self.rule_for("not_null").not_null()
        self.rule_for("not_empty").not_empty()
        self.rule_for("email_address").email_address()
        self.rule_for("regex_field").matches(r"(\d{4})-(\d{2})-(\d{2})")
        self.rule_for("value_in_range").inclusive_between(5, 10)
        self.rule_for("value_in_range_exclusive").exclusive_between(5, 10)
        self.rule_for("value_in_range_float").inclusive_between(5.1, 10.2)
        self.rule_for("value_in_range_double").exclusive_between(5.1, 10.2)
        self.rule_for("decimal_value").inclusive_between(Decimal("1.333"), Decimal("200.333"))
        self.rule_for("not_empty_with_max_length").not_empty().maximum_length(50)
        self.rule_for("color").not_null()
        self.rule_for("tags").not_empty().maximum_length(5)


class TwoTexts(BaseModel):
    text_property_1: Optional[str] = None
    text_property_2: Optional[str] = None


class TwoTextsValidator(Validator[TwoTexts]):
    def __init__(self):
        super().__init__()
        self.rule_for(TEXT_PROPERTY_1).not_empty().maximum_length(64)
        self.rule_for(TEXT_PROPERTY_2).maximum_length(64).not_empty()


class Address(BaseModel):
    street: str
    zip_code: Optional[str] = None


class Person(BaseModel):
    name: str
    address: Address
    previous: list[Address] = []


class AddressValidator(Validator[Address]):
    def __init__(self):
        super().__init__()
        self.rule_for("street").not_empty().maximum_length(80)
        self.rule_for("zip_code").matches(r"^\d{5}$")


class PersonValidator(Validator[Person]):
    def __init__(self):
        super().__init__()
        self.rule_for("name").not_empty()
        self.rule_for("address").set_validator(AddressValidator())


class Paint(BaseModel):
    shade: str = "red"
    coats: int = 1


class PaintValidator(Validator[Paint]):
    def __init__(self):
        super().__init__()
        self.rule_for("shade").is_in_enum(Color)
        self.rule_for("coats").greater_than_or_equal(1)


class Filter(BaseModel):
    """Parameter-grouping model: documented only as flat query parameters."""
    term: Optional[str] = None
    limit: int = 10
    shade: str = "red"


class FilterValidator(Validator[Filter]):
    def __init__(self):
        super().__init__()
        self.rule_for("term").not_empty().maximum_length(30)
        self.rule_for("limit").inclusive_between(1, 50)
        self.rule_for("shade").is_in_enum(Color)


class Profile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = ""
    last_name: str = ""


class ProfileValidator(Validator[Profile]):
    def __init__(self):
        super().__init__()
        self.rule_for("first_name").not_empty()
        self.rule_for("last_name").maximum_length(40)
