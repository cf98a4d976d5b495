"""
Sample block storage payloads of the Warren API.
"""

TEST_DISK_UUID = "b5c1e3f2-7d4a-4c6e-9a8b-1f2e3d4c5b6a"

DISK = {
    "uuid": TEST_DISK_UUID,
    "status": "Active",
    "user_id": 1001,
    "billing_account_id": 42,
    "size_gb": 50,
    "source_image_type": "EMPTY",
    "source_image": "",
    "created_at": "2024-03-01 10:00:00",
    "updated_at": "2024-03-01 10:00:05",
    "snapshots": [
        {
            "uuid": "c0ffee00-0000-4000-8000-000000000001",
            "sizeGb": 50,
            "created_at": "2024-03-02 09:00:00",
            "disk_uuid": TEST_DISK_UUID,
        },
        {
            "uuid": "c0ffee00-0000-4000-8000-000000000002",
            "sizeGb": 50,
            "created_at": "2024-03-03 09:00:00",
            "disk_uuid": TEST_DISK_UUID,
        },
    ],
    "status_comment": "",
}
