"""Shared pytest fixtures."""

from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest

from apps.fleet.models import Vehicle
from apps.users.models import User

_sequence = count(1)


@pytest.fixture
def operator_admin(db):
    return User.objects.create_user(
        email="ops@example.com",
        phone="+94770000100",
        password="AdminPass123",
        role=User.RoleChoices.ADMIN,
    )


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email="customer@example.com",
        phone="+94770000200",
        password="CustomerPass123",
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email="other@example.com",
        phone="+94770000201",
        password="CustomerPass123",
    )


@pytest.fixture
def provider(db):
    return User.objects.create_user(
        email="provider@example.com",
        phone="+94770000300",
        password="ProviderPass123",
        role=User.RoleChoices.PROVIDER,
        business_name="Lanka Wheels",
        provider_status=User.ProviderStatus.APPROVED,
    )


@pytest.fixture
def make_vehicle(db):
    def factory(**overrides) -> Vehicle:
        number = next(_sequence)
        data = {
            "vehicle_number": f"WP-CAB-{number:04d}",
            "vehicle_type": Vehicle.VehicleType.VAN,
            "brand": "Toyota",
            "model": "KDH",
            "year": 2019,
            "color": "White",
            "capacity": 14,
            "fuel_type": Vehicle.FuelType.DIESEL,
            "transmission": Vehicle.Transmission.MANUAL,
            "daily_rate": Decimal("10000.00"),
            "monthly_rate": Decimal("250000.00"),
        }
        data.update(overrides)
        return Vehicle.objects.create(**data)

    return factory


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle()
