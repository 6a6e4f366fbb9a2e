# tests/test_admin.py
from decimal import Decimal

import pytest
from django.contrib.auth.models import AnonymousUser
from django.contrib.messages import get_messages
from guardian.shortcuts import get_perms

from core.permissions import assign_object_perms_to_entity_admins, roles_for_user
from documents.models import Document
from ledger.models import LedgerEntry

from .factories import UserFactory, UserProfileFactory


def action_url(model, pk, tool):
    return f"/admin/documents/{model}/{pk}/actions/{tool}/"


@pytest.mark.django_db
class TestDocumentAdminActions:
    def test_change_page_renders(self, admin_client, make_invoice):
        invoice = make_invoice()
        response = admin_client.get(f"/admin/documents/invoice/{invoice.pk}/change/")
        assert response.status_code == 200

    def test_book_button(self, admin_client, make_invoice):
        invoice = make_invoice()

        response = admin_client.get(action_url("invoice", invoice.pk, "book_action"), follow=True)

        assert response.status_code == 200
        assert Document.objects.get(pk=invoice.pk).state == Document.State.BOOKED
        assert LedgerEntry.objects.filter(document_id=invoice.pk).count() == 3
        assert "Booked as number 1." in [str(m) for m in get_messages(response.wsgi_request)]

    def test_booking_error_becomes_message(self, admin_client, make_voucher):
        voucher = make_voucher([
            {"account_number": "5000", "amount": "10"},
            {"account_number": "2100", "amount": "-9"},
        ])

        response = admin_client.get(action_url("manualvoucher", voucher.pk, "book_action"), follow=True)

        messages = [str(m) for m in get_messages(response.wsgi_request)]
        assert any("(not-balanced)" in m for m in messages)
        assert Document.objects.get(pk=voucher.pk).state == Document.State.DRAFT

    def test_credit_button(self, admin_client, entity, make_invoice):
        invoice = make_invoice()
        admin_client.get(action_url("invoice", invoice.pk, "book_action"))

        admin_client.get(action_url("invoice", invoice.pk, "credit_action"))

        credit = Document.objects.get(reversal_of_id=invoice.pk)
        assert credit.total_incl_vat == Decimal("-250.00")


@pytest.mark.django_db
class TestRoles:
    def test_superuser_is_admin(self, admin_user):
        assert roles_for_user(admin_user) == {"admin"}

    def test_profile_roles(self, entity):
        profile = UserProfileFactory(entity=entity, roles="bookkeeper, auditor")
        assert roles_for_user(profile.user) == {"bookkeeper", "auditor"}

    def test_entity_admin_flag(self, entity):
        profile = UserProfileFactory(entity=entity, is_entity_admin=True)
        assert "admin" in roles_for_user(profile.user)

    def test_anonymous_and_plain_users_have_no_roles(self):
        assert roles_for_user(AnonymousUser()) == set()
        assert roles_for_user(UserFactory()) == set()

    def test_entity_admins_get_object_perms(self, entity, make_invoice):
        admin_profile = UserProfileFactory(entity=entity, is_entity_admin=True)
        other = UserProfileFactory(entity=entity)
        invoice = make_invoice()

        assign_object_perms_to_entity_admins(entity, invoice)

        assert "change_document" in get_perms(admin_profile.user, invoice)
        assert get_perms(other.user, invoice) == []
