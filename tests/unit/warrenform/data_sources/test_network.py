from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from tests.data.warren.network import NETWORK
from tests.data.warren.network import OTHER_NETWORK
from tests.data.warren.network import STALE_NETWORK
from tests.data.warren.network import TEST_NETWORK_UUID
from warrenform.client.errors import NetworkNotFoundError
from warrenform.data_sources import network
from warrenform.data_sources.network import NetworkDataSource

NETWORKS = [OTHER_NETWORK, STALE_NETWORK, NETWORK]


@patch.object(network, "list_networks", return_value=NETWORKS)
def test_lookup_by_name(mock_list):
    result = NetworkDataSource(MagicMock()).read(name="test-network")

    assert result["id"] == TEST_NETWORK_UUID
    assert result["subnet_ipv4"] == "10.42.0.0/24"


@patch.object(network, "list_networks", return_value=NETWORKS)
def test_lookup_by_default_flag(mock_list):
    assert NetworkDataSource(MagicMock()).read(is_default=True)["id"] == TEST_NETWORK_UUID


@patch.object(network, "list_networks", return_value=NETWORKS)
def test_name_or_id_may_match(mock_list):
    data_source = NetworkDataSource(MagicMock())

    assert data_source.read(name="unknown", id=TEST_NETWORK_UUID)["name"] == "test-network"
    assert data_source.read(name="test-network", id="unknown")["id"] == TEST_NETWORK_UUID
    # Networks are checked in list order, so the name match listed first wins.
    assert data_source.read(name="other-network", id=TEST_NETWORK_UUID)["name"] == "other-network"
    with pytest.raises(NetworkNotFoundError):
        data_source.read(name="unknown", id="unknown")


@patch.object(network, "list_networks", return_value=NETWORKS)
def test_no_match_messages(mock_list):
    data_source = NetworkDataSource(MagicMock())

    with pytest.raises(NetworkNotFoundError) as excinfo:
        data_source.read(name="stale-network", is_default=True)
    assert str(excinfo.value) == "No match found for name: stale-network (Default true)"

    with pytest.raises(NetworkNotFoundError) as excinfo:
        data_source.read(id="unknown")
    assert str(excinfo.value) == "No match found for UUID: unknown"


@patch.object(network, "list_networks", return_value=[])
def test_lookup_in_other_location(mock_list):
    client = MagicMock()

    with pytest.raises(NetworkNotFoundError) as excinfo:
        NetworkDataSource(client).read(is_default=True, location="cyc01")

    client.for_location.assert_called_once_with("cyc01")
    mock_list.assert_called_once_with(client.for_location.return_value)
    assert str(excinfo.value) == "No match found for parameter: Default true"


def test_filter_required():
    with pytest.raises(ValueError):
        NetworkDataSource(MagicMock()).read()
