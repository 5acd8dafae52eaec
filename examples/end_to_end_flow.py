"""End-to-End Example: Registry Flow over HTTP.

This example demonstrates the complete request flow against an in-process
registry:
1. Register a user and log in for a bearer token
2. Create a patient, attach a file and record a diagnosed condition
3. Search across patients and their dependents
4. Delete the patient and observe the cascade

Run with:
    python examples/end_to_end_flow.py
"""

import base64

from fastapi.testclient import TestClient

from patient_registry.api.main import create_app
from patient_registry.infrastructure.config_manager import ConfigManager
from patient_registry.infrastructure.settings import Settings
from patient_registry.main import build_container


def login(client: TestClient) -> dict:
    print("\n[Step 1] Registering user and logging in...")
    credentials = {"username": "doctor1", "password": "secret-password"}
    client.post("/public/users", json=credentials).raise_for_status()
    token = client.post("/public/users/login", json=credentials).json()["token"]
    print("SUCCESS: Received bearer token")
    return {"Authorization": f"Bearer {token}"}


def create_records(client: TestClient, headers: dict) -> int:
    print("\n[Step 2] Creating patient with attachment and condition...")
    patient = client.post(
        "/patients",
        json={
            "name": "John Smith",
            "address": "1 Main Street",
            "phoneNumber": "5555555555",
            "dateOfBirth": "1980-05-17",
            "externalIdentifier": "123",
        },
        headers=headers,
    ).json()
    print(f"SUCCESS: Patient {patient['id']} created")

    attachment = client.post(
        f"/patients/{patient['id']}/attachments",
        data={"name": "knee scan", "description": "left knee", "type": "MRI"},
        files={"data": ("knee.bin", b"\x00\x01\x02\x03", "application/octet-stream")},
        headers=headers,
    ).json()
    print(f"SUCCESS: Attachment {attachment['id']} stored ({len(base64.b64decode(attachment['data']))} bytes)")

    condition = client.post(
        f"/patients/{patient['id']}/diagnosedConditions",
        json={"name": "Influenza", "code": "J11", "date": "2023-01-15"},
        headers=headers,
    ).json()
    print(f"SUCCESS: Diagnosed condition {condition['id']} recorded")

    duplicate = client.post(
        "/patients",
        json={
            "name": "Johnny Smith",
            "phoneNumber": "5555555555",
            "dateOfBirth": "1980-05-17",
            "externalIdentifier": "123",
        },
        headers=headers,
    )
    print(f"  Duplicate externalIdentifier rejected: {duplicate.status_code} {duplicate.json()}")
    return patient["id"]


def search(client: TestClient, headers: dict) -> None:
    print("\n[Step 3] Searching...")
    for params in ({"attachmentType": "MRI"}, {"diagnosedConditionCode": "J11"}, {}):
        results = client.get("/patients", params=params, headers=headers).json()
        print(f"  {params or 'no criteria'} -> {[p['name'] for p in results]}")


def delete(client: TestClient, headers: dict, patient_id: int) -> None:
    print("\n[Step 4] Deleting patient...")
    client.delete(f"/patients/{patient_id}", headers=headers).raise_for_status()
    records = client.get("/public/health").json()["records"]
    print(f"SUCCESS: Remaining records: {records}")


def main():
    print("=" * 70)
    print("Patient Registry: end-to-end flow")
    print("=" * 70)

    settings = Settings(ConfigManager({"auth": {"token_secret": "example-secret", "bcrypt_rounds": 4}}))
    with TestClient(create_app(build_container(settings))) as client:
        headers = login(client)
        patient_id = create_records(client, headers)
        search(client, headers)
        delete(client, headers, patient_id)


if __name__ == "__main__":
    main()
