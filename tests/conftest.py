import json
import sys
from pathlib import Path

import pytest

# Add the project root so the flat build modules import during tests
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


def write_doc(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def public_dir(tmp_path):
    """A small public/ tree with one file per entity class."""
    public = tmp_path / "public"
    write_doc(public / "SAMPLE_MERCHANTS" / "7.json", {
        "id": 7,
        "name": "Farmacia Central",
        "category": "Salud",
        "enabled": True,
        "type": "SPLIT",
        "stores": [
            {"address": {"lat": 10.48, "long": -66.90, "name": "Sede Caracas"}},
            {"address": {"lat": 11.0, "long": -63.9, "name": "Sede Margarita"}},
        ],
    })
    write_doc(public / "SAMPLE_STORE" / "store_42.json", [
        {"id": 1, "name": "Pago Movil ", "type": "MOBILE", "bankName": "Banplus ",
         "currency": {"id": 1, "name": "VES"}},
        {"id": 2, "name": "Zelle", "type": "TRANSFER", "bankName": None,
         "currency": {"id": 2, "name": "USD"}},
    ])
    write_doc(public / "SAMPLE_CLIENT" / "12345678.json", {
        "id": "a",
        "identifierNumber": 12345678,
        "amount": 25,
        "status": "OPEN",
        "channel": "IN_APP",
        "createdAt": "2024-01-01",
        "paymentDetails": {"user": {"fullName": "Maria de la Cruz"}},
    })
    return public
