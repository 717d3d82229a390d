"""
Pytest configuration and fixtures for Tortilla tests.

Fixtures provide captured solc output in the 0.5.x text format and a fake
invoker that returns it, so parsing and compiling can be tested without a
compiler installed.
"""

import shutil

import pytest

from tortilla.tests.fixtures import (
    MIGRATIONS_ABI,
    MIGRATIONS_BIN,
    TOKEN_ABI,
    FakeInvoker,
    solc_output,
    solc_section,
)


@pytest.fixture
def migrations_output() -> str:
    """solc --gas --bin --abi output for the Migrations contract"""
    return solc_output(solc_section(
        "Migrations",
        abi=MIGRATIONS_ABI,
        bin=MIGRATIONS_BIN,
        construction="140000 = 140000",
        external=["upgrade(address):\t23000"],
    ))


@pytest.fixture
def two_contract_output() -> str:
    """solc --gas --bin --abi output for a file declaring two contracts"""
    return solc_output(
        solc_section(
            "Migrations",
            abi=MIGRATIONS_ABI,
            bin=MIGRATIONS_BIN,
            construction="41200 + 139000 = 180200",
            external=[
                "last_completed_migration():\t1052",
                "owner():\t1045",
                "setCompleted(uint256):\t20402",
                "upgrade(address):\tinfinite",
            ],
            path="contracts/Migrations.sol",
        ),
        solc_section(
            "Token",
            abi=TOKEN_ABI,
            bin="6080604052",
            construction="infinite + 223000 = infinite",
            external=[":\t98", "transfer(address,uint256):\t44322"],
            internal=["_move(address,address,uint256):\t412"],
            path="contracts/Migrations.sol",
        ),
    )


@pytest.fixture
def fake_invoker(migrations_output) -> FakeInvoker:
    return FakeInvoker(stdout=migrations_output)


# Markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "solc: mark test as requiring a solc binary on PATH"
    )


def pytest_collection_modifyitems(config, items):
    """Skip solc-backed tests when the compiler is not installed."""
    if shutil.which("solc"):
        return
    skip_solc = pytest.mark.skip(reason="solc not found on PATH")
    for item in items:
        if "solc" in item.keywords:
            item.add_marker(skip_solc)
