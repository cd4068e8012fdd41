"""Integration tests for booking API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers the customer booking flow and admin-only actions."""

    def setUp(self) -> None:
        self.customer = User.objects.create_user(
            email="rider@example.com",
            phone="+94770000020",
            password="RiderPass123",
        )
        self.other = User.objects.create_user(
            email="rider2@example.com",
            phone="+94770000021",
            password="RiderPass123",
        )
        self.admin = User.objects.create_user(
            email="dispatch@example.com",
            phone="+94770000022",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.list_url = reverse("booking-list")
        self.payload = {
            "service_type": "wedding",
            "pickup_location": "Galle Face Hotel",
            "dropoff_location": "Mount Lavinia Hotel",
            "pickup_date": "2030-08-20",
            "pickup_time": "09:00",
            "passengers": 4,
            "distance": "12.50",
            "payment_method": "card",
        }

    def _create(self, user=None) -> int:
        self.client.force_authenticate(user or self.customer)
        response = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data["id"]

    def test_create_booking_returns_estimate(self) -> None:
        booking_id = self._create()

        booking = Booking.objects.get(pk=booking_id)
        self.assertEqual(booking.customer, self.customer)
        self.assertEqual(booking.total_price, Decimal("1875.00"))

    def test_zero_passengers_is_rejected(self) -> None:
        self.client.force_authenticate(self.customer)

        response = self.client.post(self.list_url, {**self.payload, "passengers": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Booking.objects.exists())

    def test_customer_cannot_mark_booking_paid(self) -> None:
        booking_id = self._create()

        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"payment_status": "completed", "additional_notes": "Decorations please"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["payment_status"], "pending")
        self.assertEqual(response.data["additional_notes"], "Decorations please")

    def test_bookings_are_private(self) -> None:
        booking_id = self._create()
        self._create(self.other)

        self.client.force_authenticate(self.customer)
        listing = self.client.get(self.list_url)
        self.assertEqual([item["id"] for item in listing.data], [booking_id])

        self.client.force_authenticate(self.other)
        detail = self.client.get(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(detail.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(detail.data["code"], "access_denied")

        edit = self.client.patch(reverse("booking-detail", args=[booking_id]), {"passengers": 2}, format="json")
        removal = self.client.delete(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(edit.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(removal.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse("booking-detail", args=[987654])).status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_confirms_and_prices(self) -> None:
        booking_id = self._create()
        self.client.force_authenticate(self.admin)

        confirmed = self.client.post(reverse("booking-set-status", args=[booking_id]), {"status": "confirmed"}, format="json")
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK, confirmed.data)

        priced = self.client.post(
            reverse("booking-set-pricing", args=[booking_id]),
            {"override_price": "2500.00", "confirmed": True},
            format="json",
        )
        self.assertEqual(priced.status_code, status.HTTP_200_OK, priced.data)
        self.assertEqual(priced.data["total_price"], "2500.00")
        self.assertEqual(priced.data["pricing_state"], "confirmed")

    def test_illegal_transition_is_400(self) -> None:
        booking_id = self._create()
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("booking-set-status", args=[booking_id]), {"status": "completed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_transition")

    def test_customer_cannot_use_admin_actions(self) -> None:
        booking_id = self._create()

        response = self.client.post(reverse("booking-set-status", args=[booking_id]), {"status": "confirmed"}, format="json")
        stats = self.client.get(reverse("booking-statistics"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(stats.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_deletes_pending_booking(self) -> None:
        booking_id = self._create()

        response = self.client.delete(reverse("booking-detail", args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Booking.objects.filter(pk=booking_id).exists())
