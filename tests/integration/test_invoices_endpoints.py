"""Integration tests for the invoice feed and CSV import."""

import pytest
from fastapi import status

from repos import clients_repo
from tests.factories import create_client_record, create_user, link_user_to_client, make_auth_headers

EXPORT = (
    "Date,Transaction type,No.,Amount,Due date,Customer,Split,Terms,A/R paid,Open balance,Sent,Delivery address\n"
    '05/02/2024,Invoice,INV-2001,"$1,100.00",12/02/2099,Acme Roofing,Sales,7 Days,Unpaid,"$1,100.00",Sent,\n'
    "03/02/2024,Invoice,INV-2002,$330.00,10/02/2024,Acme Roofing,Sales,7 Days,Paid,$0.00,Sent,\n"
    "06/02/2024,Payment,INV-2002,$330.00,,Acme Roofing,,,,,,\n"
)


async def _import(client, headers, content=EXPORT):
    return await client.post(
        "/api/v1/invoices/import/csv",
        files={"file": ("export.csv", content.encode("utf-8-sig"), "text/csv")},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_import_requires_admin(client, user_headers):
    response = await _import(client, user_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_import_rejects_binary(client, admin_headers):
    response = await client.post(
        "/api/v1/invoices/import/csv",
        files={"file": ("export.csv", b"\xff\xfe\x00\x81", "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_linked_user_sees_transactions(client, db_session, admin_headers, plain_user, user_headers):
    """
    Test: After an import, a user linked to the client sees its invoices and payments.
    """
    acme = await create_client_record(db_session)
    await link_user_to_client(db_session, user=plain_user, client=acme)

    imported = await _import(client, admin_headers)
    assert imported.status_code == status.HTTP_200_OK
    assert imported.json()["invoices_created"] == 2
    assert imported.json()["payments_created"] == 1
    assert imported.json()["clients_created"] == 0

    response = await client.get("/api/v1/invoices/transactions", headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["client_id"] == str(acme.id)
    assert [row["type"] for row in data["data"]] == ["Payment", "Invoice", "Invoice"]
    assert data["data"][0]["number"].startswith("PAY-INV-2002-")
    assert [row["number"] for row in data["data"][1:]] == ["INV-2001", "INV-2002"]
    assert data["pagination"]["total"] == 3

    paid_only = await client.get("/api/v1/invoices/transactions", params={"status": "Paid"}, headers=user_headers)
    numbers = [row["number"] for row in paid_only.json()["data"] if row["type"] == "Invoice"]
    assert numbers == ["INV-2002"]

    paged = await client.get(
        "/api/v1/invoices/transactions",
        params={"limit": 2, "offset": 2},
        headers=user_headers,
    )
    assert paged.json()["pagination"]["has_more"] is False
    assert [row["number"] for row in paged.json()["data"]] == ["INV-2002"]

    summary = await client.get("/api/v1/invoices/summary", headers=user_headers)
    assert summary.json()["invoice_count"] == 2
    assert summary.json()["total_outstanding"] == 1100.0
    assert summary.json()["total_paid"] == 330.0


@pytest.mark.asyncio
async def test_user_without_client(client, user_headers):
    response = await client.get("/api/v1/invoices/transactions", headers=user_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_company_name_fallback(client, db_session, admin_headers):
    await _import(client, admin_headers)
    acme = await clients_repo.get_by_name(db_session, name="Acme Roofing")
    staff = await create_user(db_session, email="staff@acme.com.au", company="Acme Roofing")

    response = await client.get("/api/v1/invoices/transactions", headers=make_auth_headers(staff))

    assert response.json()["client_id"] == str(acme.id)


@pytest.mark.asyncio
async def test_admin_may_pick_client(client, db_session, admin_headers):
    await _import(client, admin_headers)
    acme = await clients_repo.get_by_name(db_session, name="Acme Roofing")

    response = await client.get(
        "/api/v1/invoices/transactions",
        params={"client_id": str(acme.id), "limit": 501},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = await client.get("/api/v1/invoices/transactions", params={"client_id": str(acme.id)}, headers=admin_headers)
    assert response.json()["metadata"] == {"invoice_count": 2, "payment_count": 1}
