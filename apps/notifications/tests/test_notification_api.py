"""Integration tests for the notifications endpoint."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.users.models import User


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="reader@example.com",
            phone="+94770000060",
            password="ReaderPass123",
        )
        self.stranger = User.objects.create_user(
            email="stranger@example.com",
            phone="+94770000061",
            password="StrangerPass123",
        )
        for title in ("Booking confirmed", "Booking price confirmed"):
            Notification.objects.create(recipient=self.user, kind="booking_confirmed", title=title, message="...")
        self.foreign = Notification.objects.create(recipient=self.stranger, kind="rental_status", title="x", message="...")

    def test_list_shows_own_notifications_with_unread_count(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["unread_count"], 2)
        self.assertEqual(len(response.data["results"]), 2)

    def test_mark_read(self) -> None:
        self.client.force_authenticate(self.user)
        notification = Notification.objects.filter(recipient=self.user).first()

        response = self.client.post(reverse("notification-mark-read", args=[notification.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_read"])
        self.assertEqual(self.client.get(reverse("notification-list")).data["unread_count"], 1)

    def test_cannot_touch_someone_elses_notification(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("notification-mark-read", args=[self.foreign.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_read_all(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("notification-read-all"))

        self.assertEqual(response.data, {"updated": 2})
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)
