"""Integration tests for finance endpoints."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.finances.models import FinancialEntry
from apps.users.models import User


class FinanceAPITests(APITestCase):
    def setUp(self) -> None:
        self.customer = User.objects.create_user(
            email="payer@example.com",
            phone="+94770000050",
            password="PayerPass123",
        )
        self.admin = User.objects.create_user(
            email="accounts@example.com",
            phone="+94770000051",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.booking = Booking.objects.create(
            customer=self.customer,
            service_type=Booking.ServiceType.CARGO,
            pickup_location="Pettah",
            dropoff_location="Galle",
            pickup_date=date(2030, 6, 1),
            pickup_time=time(7, 0),
            passengers=1,
            distance=Decimal("180.00"),
            price_per_km=Decimal("120.00"),
            total_price=Decimal("21600.00"),
        )

    def test_customer_pays_own_booking(self) -> None:
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            reverse("payment-list"), {"booking": self.booking.pk, "payment_method": "card"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["amount"], "21600.00")
        self.assertTrue(response.data["transaction_id"].startswith("TXN_"))

    def test_admin_completes_payment(self) -> None:
        self.client.force_authenticate(self.customer)
        created = self.client.post(
            reverse("payment-list"), {"booking": self.booking.pk, "payment_method": "cash"}, format="json"
        )

        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse("payment-set-status", args=[created.data["id"]]), {"status": "completed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIsNotNone(response.data["processed_at"])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, "completed")

    def test_ledger_filters_by_type_and_date(self) -> None:
        self.client.force_authenticate(self.admin)
        for payload in (
            {"type": "income", "category": "other_income", "description": "Scrap sale", "amount": "3000.00", "date": "2030-01-05"},
            {"type": "expense", "category": "utilities", "description": "Electricity", "amount": "9000.00", "date": "2030-01-06"},
            {"type": "expense", "category": "marketing", "description": "Flyers", "amount": "2500.00", "date": "2030-03-01"},
        ):
            created = self.client.post(reverse("financial-entry-list"), payload, format="json")
            self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        response = self.client.get(
            reverse("financial-entry-list"), {"type": "expense", "start_date": "2030-01-01", "end_date": "2030-01-31"}
        )

        self.assertEqual([row["description"] for row in response.data], ["Electricity"])
        self.assertEqual(FinancialEntry.objects.get(description="Flyers").created_by, self.admin)

    def test_mismatched_category_is_400(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("financial-entry-list"),
            {"type": "income", "category": "fuel", "description": "Wrong", "amount": "10.00", "date": "2030-01-01"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "category")

    def test_summary_end_date_is_inclusive(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(
            reverse("financial-entry-list"),
            {"type": "expense", "category": "fuel", "description": "Diesel", "amount": "4000.00", "date": "2030-01-31"},
            format="json",
        )

        response = self.client.get(reverse("financial-summary"), {"start_date": "2030-01-01", "end_date": "2030-01-31"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["manual_expenses"], Decimal("4000.00"))
        self.assertEqual(response.data["net_profit"], Decimal("-4000.00"))

    def test_reports_are_admin_only(self) -> None:
        self.client.force_authenticate(self.customer)

        self.assertEqual(self.client.get(reverse("financial-summary")).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse("financial-monthly")).status_code, status.HTTP_403_FORBIDDEN)
