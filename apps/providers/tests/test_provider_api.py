"""Integration tests for provider contract, vehicle request and account endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.providers.models import VehicleProviderContract, VehicleRequest
from apps.users.models import User


class ProviderContractAPITests(APITestCase):
    def setUp(self) -> None:
        self.provider = User.objects.create_user(
            email="fleetowner@example.com",
            phone="+94770000040",
            password="ProviderPass123",
            role=User.RoleChoices.PROVIDER,
            business_name="Southern Cabs",
            provider_status=User.ProviderStatus.APPROVED,
        )
        self.other_provider = User.objects.create_user(
            email="fleetowner2@example.com",
            phone="+94770000041",
            password="ProviderPass123",
            role=User.RoleChoices.PROVIDER,
            provider_status=User.ProviderStatus.APPROVED,
        )
        self.customer = User.objects.create_user(
            email="plain@example.com",
            phone="+94770000042",
            password="CustomerPass123",
        )
        self.admin = User.objects.create_user(
            email="contracts@example.com",
            phone="+94770000043",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.list_url = reverse("provider-contract-list")
        self.payload = {
            "vehicle": {
                "vehicle_number": "sp-ca-7788",
                "brand": "Nissan",
                "model": "Caravan",
                "year": 2019,
                "color": "Blue",
                "vehicle_type": "Van",
                "fuel_type": "Diesel",
                "transmission": "Manual",
                "seating_capacity": 12,
                "insurance_details": {
                    "insurance_company": "Ceylinco",
                    "policy_number": "POL-991",
                    "expiry_date": "2031-06-30",
                },
            },
            "terms": {
                "start_date": "2030-03-01",
                "end_date": "2030-09-01",
                "duration_months": 6,
                "monthly_fee": "60000.00",
                "payment_terms": "Quarterly",
                "payment_method": "Cheque",
            },
            "special_conditions": ["Driver provided by owner"],
        }

    def _create(self) -> dict:
        self.client.force_authenticate(self.provider)
        response = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def test_provider_creates_contract(self) -> None:
        data = self._create()

        self.assertTrue(data["contract_id"].startswith("VPC-"))
        self.assertEqual(data["next_payment_date"], "2030-06-01")
        self.assertEqual(data["vehicle"]["insurance_details"]["expiry_date"], "2031-06-30")
        self.assertEqual([a["action"] for a in data["admin_actions"]], ["created"])

    def test_customers_cannot_request_contracts(self) -> None:
        self.client.force_authenticate(self.customer)

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_terms_are_rejected(self) -> None:
        self.client.force_authenticate(self.provider)

        response = self.client.post(self.list_url, {"vehicle": self.payload["vehicle"]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(VehicleProviderContract.objects.exists())

    def test_providers_see_only_their_contracts(self) -> None:
        contract = self._create()

        self.client.force_authenticate(self.other_provider)
        listing = self.client.get(self.list_url)
        detail = self.client.get(reverse("provider-contract-detail", args=[contract["id"]]))

        self.assertEqual(listing.data, [])
        self.assertEqual(detail.status_code, status.HTTP_403_FORBIDDEN)

    def test_partial_update_merges_terms(self) -> None:
        contract = self._create()

        response = self.client.patch(
            reverse("provider-contract-detail", args=[contract["id"]]),
            {"terms": {"monthly_fee": "65000.00"}, "notes": "Fee revised"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["monthly_fee"], "65000.00")
        self.assertEqual(response.data["payment_terms"], "Quarterly")
        self.assertEqual(response.data["notes"], "Fee revised")

    def test_admin_review_and_payment(self) -> None:
        contract = self._create()
        self.client.force_authenticate(self.admin)

        for new_status in ("under_review", "approved", "active"):
            response = self.client.post(
                reverse("provider-contract-set-status", args=[contract["id"]]), {"status": new_status}, format="json"
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        paid = self.client.post(
            reverse("provider-contract-record-payment", args=[contract["id"]]),
            {"amount": "180000.00", "payment_date": "2030-06-01"},
            format="json",
        )
        self.assertEqual(paid.status_code, status.HTTP_201_CREATED, paid.data)
        self.assertEqual(paid.data["payment_method"], "Cheque")

        detail = self.client.get(reverse("provider-contract-detail", args=[contract["id"]]))
        self.assertEqual(detail.data["next_payment_date"], "2030-09-01")
        self.assertEqual(detail.data["total_earnings"], "180000.00")

    def test_provider_cannot_change_status(self) -> None:
        contract = self._create()

        response = self.client.post(
            reverse("provider-contract-set-status", args=[contract["id"]]), {"status": "approved"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class VehicleRequestAPITests(APITestCase):
    def setUp(self) -> None:
        self.provider = User.objects.create_user(
            email="vans@example.com",
            phone="+94770000050",
            password="ProviderPass123",
            role=User.RoleChoices.PROVIDER,
            provider_status=User.ProviderStatus.APPROVED,
        )
        self.newcomer = User.objects.create_user(
            email="newvans@example.com",
            phone="+94770000051",
            password="ProviderPass123",
            role=User.RoleChoices.PROVIDER,
        )
        self.admin = User.objects.create_user(
            email="fleetdesk@example.com",
            phone="+94770000052",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.list_url = reverse("vehicle-request-list")
        self.payload = {
            "vehicle_number": "cp-kd-1010",
            "vehicle_type": "bus",
            "brand": "Ashok Leyland",
            "model": "Viking",
            "year": 2017,
            "color": "Red",
            "capacity": 40,
            "fuel_type": "diesel",
            "transmission": "manual",
            "daily_rate": "30000.00",
            "monthly_rate": "600000.00",
        }

    def test_unapproved_provider_is_refused_until_approved(self) -> None:
        self.client.force_authenticate(self.newcomer)
        refused = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(refused.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        approved = self.client.post(
            reverse("provider-account-set-status", args=[self.newcomer.pk]), {"status": "approved"}, format="json"
        )
        self.assertEqual(approved.status_code, status.HTTP_200_OK, approved.data)
        self.assertTrue(approved.data["is_verified"])

        self.client.force_authenticate(User.objects.get(pk=self.newcomer.pk))
        created = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        self.assertEqual(created.data["vehicle_number"], "CP-KD-1010")

    def test_review_flow(self) -> None:
        self.client.force_authenticate(self.provider)
        created = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        request_id = created.data["id"]

        duplicate = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(duplicate.data["field"], "vehicle_number")

        denied = self.client.post(reverse("vehicle-request-set-status", args=[request_id]), {"status": "approved"})
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        edited = self.client.patch(
            reverse("vehicle-request-detail", args=[request_id]), {"daily_rate": "28000.00"}, format="json"
        )
        self.assertEqual(edited.status_code, status.HTTP_200_OK, edited.data)
        self.assertEqual(edited.data["daily_rate"], "28000.00")

        approved = self.client.post(
            reverse("vehicle-request-set-status", args=[request_id]),
            {"status": "approved", "admin_notes": "Bus inspected"},
            format="json",
        )
        self.assertEqual(approved.status_code, status.HTTP_200_OK, approved.data)
        self.assertEqual(approved.data["approved_by"], self.admin.pk)

        searched = self.client.get(self.list_url, {"search": "viking", "status": "approved"})
        self.assertEqual([item["id"] for item in searched.data], [request_id])
        stats = self.client.get(reverse("vehicle-request-statistics"))
        self.assertEqual(stats.data["status_counts"]["approved"], 1)

    def test_other_provider_gets_403(self) -> None:
        self.client.force_authenticate(self.provider)
        request_id = self.client.post(self.list_url, self.payload, format="json").data["id"]
        rival = User.objects.create_user(
            email="rival@example.com",
            phone="+94770000053",
            role=User.RoleChoices.PROVIDER,
            provider_status=User.ProviderStatus.APPROVED,
        )

        self.client.force_authenticate(rival)
        self.assertEqual(self.client.get(self.list_url).data, [])
        detail = self.client.get(reverse("vehicle-request-detail", args=[request_id]))
        removal = self.client.delete(reverse("vehicle-request-detail", args=[request_id]))

        self.assertEqual(detail.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(removal.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(VehicleRequest.objects.filter(pk=request_id).exists())

    def test_provider_statistics_for_admin_only(self) -> None:
        self.client.force_authenticate(self.provider)
        self.assertEqual(
            self.client.get(reverse("provider-account-statistics")).status_code, status.HTTP_403_FORBIDDEN
        )

        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("provider-account-statistics"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status_counts"]["approved"], 1)
        self.assertEqual(response.data["status_counts"]["pending"], 1)
