"""ABI of the RealEstateRental contract calls this service uses.

Only the functions and the one event the service touches are declared. Point
``ledger.abi_path`` at the compiled artifact to use the full ABI instead.
"""

from __future__ import annotations

import json
from pathlib import Path

_PROPERTY_STRUCT = {
    "name": "",
    "type": "tuple",
    "internalType": "struct RealEstateRental.Property",
    "components": [
        {"name": "id", "type": "uint256", "internalType": "uint256"},
        {"name": "owner", "type": "address", "internalType": "address"},
        {"name": "propertyAddress", "type": "string", "internalType": "string"},
        {"name": "description", "type": "string", "internalType": "string"},
        {"name": "rentPerMonth", "type": "uint256", "internalType": "uint256"},
        {"name": "securityDeposit", "type": "uint256", "internalType": "uint256"},
        {"name": "isAvailable", "type": "bool", "internalType": "bool"},
        {"name": "isActive", "type": "bool", "internalType": "bool"},
    ],
}


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list | None = None,
        mutability: str = "nonpayable") -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": outputs or [],
    }


REAL_ESTATE_RENTAL_ABI: list[dict] = [
    _fn("listProperty", [
        ("_propertyAddress", "string"),
        ("_description", "string"),
        ("_rentPerMonth", "uint256"),
        ("_securityDeposit", "uint256"),
    ]),
    _fn("updateProperty", [
        ("_propertyId", "uint256"),
        ("_propertyAddress", "string"),
        ("_description", "string"),
        ("_rentPerMonth", "uint256"),
        ("_securityDeposit", "uint256"),
        ("_isAvailable", "bool"),
    ]),
    _fn("delistProperty", [("_propertyId", "uint256")]),
    _fn("getProperty", [("_propertyId", "uint256")], [_PROPERTY_STRUCT], "view"),
    _fn("propertyCounter", [], [{"name": "", "type": "uint256", "internalType": "uint256"}], "view"),
    {
        "type": "event",
        "name": "PropertyListed",
        "anonymous": False,
        "inputs": [
            {"name": "propertyId", "type": "uint256", "indexed": True, "internalType": "uint256"},
            {"name": "owner", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "propertyAddress", "type": "string", "indexed": False, "internalType": "string"},
            {"name": "rentPerMonth", "type": "uint256", "indexed": False, "internalType": "uint256"},
        ],
    },
]


def load_abi(path: str = "") -> list[dict]:
    """Return the ABI from a compiled artifact or ABI file, else the bundled one."""
    if not path:
        return REAL_ESTATE_RENTAL_ABI
    data = json.loads(Path(path).read_text())
    # Hardhat/Truffle artifacts wrap the ABI; plain ABI files are a bare list.
    return data["abi"] if isinstance(data, dict) else data
