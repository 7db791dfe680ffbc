import logging
import string
from typing import Any, Dict, List, Mapping, Optional

from faker import Faker

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "TestPassword@123"
TEST_CARD_NUMBER = "4532 1111 1111 1111"  # not a real card

_ALPHANUMERIC = string.ascii_letters + string.digits


class TestDataBuilder:
    """
    Generates randomized domain records for scenarios.
    Each generator returns a new dict; overrides are merged last and always win.
    """
    __test__ = False  # not a pytest test class

    def __init__(self, locale: str = "en_US", seed: Optional[int] = None):
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)

    def generate_user(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """User credentials with a fixed, known password"""
        return {
            "username": self.faker.user_name(),
            "email": self.faker.email(),
            "password": DEFAULT_PASSWORD,
            "first_name": self.faker.first_name(),
            "last_name": self.faker.last_name(),
            **(overrides or {}),
        }

    def generate_product(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return {
            "name": f"{self.faker.color_name()} {self.faker.word().title()}",
            "description": self.faker.sentence(nb_words=12),
            "price": self.faker.pyfloat(min_value=1, max_value=1000, right_digits=2),
            "quantity": self.faker.random_int(min=1, max=100),
            "sku": self.faker.lexify("?" * 10, letters=_ALPHANUMERIC),
            **(overrides or {}),
        }

    def generate_order(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return {
            "order_id": self.faker.uuid4(),
            "order_number": self.faker.numerify("#" * 8),
            "status": "pending",
            "total": self.faker.pyfloat(min_value=100, max_value=10000, right_digits=2),
            "items": [],
            **(overrides or {}),
        }

    def generate_address(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return {
            "street": self.faker.street_address(),
            "city": self.faker.city(),
            "state": self.faker.state_abbr(),
            "zip_code": self.faker.zipcode(),
            "country": self.faker.country(),
            **(overrides or {}),
        }

    def generate_payment_card(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Payment card with a static test number; only the holder name is random"""
        return {
            "card_number": TEST_CARD_NUMBER,
            "expiry_date": "12/25",
            "cvv": "123",
            "cardholder_name": self.faker.name(),
            **(overrides or {}),
        }

    @staticmethod
    def build_object(schema: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Build a record from a schema.

        Callable values are invoked with no arguments; anything else is used as-is.
        """
        obj = {key: value() if callable(value) else value for key, value in schema.items()}
        logger.info(f"[TestDataBuilder] Generated object: {obj}")
        return obj

    @classmethod
    def build_array(cls, schema: Mapping[str, Any], count: int = 5) -> List[Dict[str, Any]]:
        """Build count independent records; values may repeat across records"""
        return [cls.build_object(schema) for _ in range(count)]

