import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError
from awssweep.core.config import Config
from awssweep.core.errors import NotFoundError
from awssweep.resources import apigateway
from awssweep.sweep.clients import ClientCache, RegionalClient
from awssweep.sweep.report import SkipReason, SweepStatus
from awssweep.sweep.runner import SweepOptions

NOT_FOUND = ClientError({'Error': {'Code': 'NotFoundException', 'Message': 'Invalid VPC link identifier'}}, 'GetVpcLink')


@pytest.fixture
def apigw():
    return MagicMock()


@pytest.fixture
def client(apigw):
    session = MagicMock()
    session.client.return_value = apigw
    return RegionalClient(session, 'eu-west-1')


def test_find_vpc_link_not_found(client, apigw):
    apigw.get_vpc_link.side_effect = NOT_FOUND

    with pytest.raises(NotFoundError):
        apigateway.find_vpc_link_by_id(client, 'abc123')


def test_delete_vpc_link_ignores_not_found(client, apigw):
    apigw.delete_vpc_link.side_effect = NOT_FOUND

    apigateway.delete_vpc_link(client, 'abc123', {'id': 'abc123'})

    apigw.delete_vpc_link.assert_called_once_with(vpcLinkId='abc123')


def test_sweep_vpc_links(client, apigw):
    apigw.get_paginator.return_value.paginate.return_value = [
        {'items': [{'id': 'live'}, {'id': 'deleting'}]},
        {'items': [{'id': 'gone'}]},
    ]
    links = {
        'live': {'id': 'live', 'status': 'AVAILABLE'},
        'deleting': {'id': 'deleting', 'status': 'DELETING'},
    }

    def get_vpc_link(vpcLinkId):
        if vpcLinkId not in links:
            raise NOT_FOUND
        return links[vpcLinkId]

    apigw.get_vpc_link.side_effect = get_vpc_link
    options = SweepOptions(config=Config(max_workers=2), client_cache=ClientCache(lambda region: client))

    report = apigateway.sweep_vpc_links('eu-west-1', options)

    assert report.ok
    assert report.status_of('live') is SweepStatus.SUCCEEDED
    assert report.outcomes['deleting'].reason is SkipReason.PENDING_DELETION
    assert report.outcomes['gone'].reason is SkipReason.NOT_FOUND
    apigw.delete_vpc_link.assert_called_once_with(vpcLinkId='live')
    apigw.get_paginator.assert_called_with('get_vpc_links')
