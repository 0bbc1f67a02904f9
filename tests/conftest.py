"""
Fixtures shared by the lockbox tests. Everything runs against the local
encryption service, so no network is needed.
"""

import pytest

from lockbox import Lockbox
from lockclient import ClientSettings, LocalEncryptionService
from lockclient.files import BundleFile
from lockmeta import user_address_condition

CHAIN = "ethereum"
ADDRESS = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"


@pytest.fixture
def service():
    yield LocalEncryptionService()


@pytest.fixture
def conditions():
    yield user_address_condition(ADDRESS, CHAIN)


@pytest.fixture
def files():
    yield [
        BundleFile(name="package.json", type="application/json", content=b'{"name": "lockbox"}'),
        BundleFile(name="notes.txt", type="text/plain", content="Hello, wörld\n".encode()),
        BundleFile(name="random.bin", content=bytes(range(256)) * 16),
    ]


@pytest.fixture
def session_sigs():
    yield {"https://node.example:7470": {"sig": "not-a-real-signature"}}


@pytest.fixture
def lockbox(service, session_sigs):
    yield Lockbox(
        settings=ClientSettings(chain=CHAIN, local=True),
        service=service,
        session_sigs=session_sigs,
    )
