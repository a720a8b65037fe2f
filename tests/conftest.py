import pytest

from bentacars.config import EngineConfig


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def full_memory():
    """Every gating slot already known, as the contact store would hand it back."""
    return {
        "vehicle": "sedan",
        "payment_mode": "cash",
        "budget_or_downpayment": 600000,
        "location": "Quezon City",
        "timeline": "this week",
    }
