from botocore.exceptions import ClientError
from awssweep.core.errors import is_not_found, not_found_from
from awssweep.sweep.report import SkipReason
from awssweep.sweep.runner import ResourceDefinition, SweepOptions, sweep_resources

NAME = 'aws_api_gateway_vpc_link'
MAX_PAGE_SIZE = 500


def find_vpc_link_by_id(client, vpc_link_id):
    apigateway = client.client('apigateway')
    try:
        return apigateway.get_vpc_link(vpcLinkId=vpc_link_id)
    except ClientError as e:
        if is_not_found(e):
            raise not_found_from(e, f"API Gateway VPC Link ({vpc_link_id})") from e
        raise


def is_deleting(vpc_link):
    return vpc_link.get('status') == 'DELETING'


def delete_vpc_link(client, vpc_link_id, data):
    apigateway = client.client('apigateway')
    try:
        apigateway.delete_vpc_link(vpcLinkId=vpc_link_id)
    except ClientError as e:
        if not is_not_found(e):
            raise


DEFINITION = ResourceDefinition(
    name=NAME,
    display_name='API Gateway VPC Link',
    service='apigateway',
    list_operation='get_vpc_links',
    result_key='items',
    id_key='id',
    page_size=MAX_PAGE_SIZE,
    describe=find_vpc_link_by_id,
    delete=delete_vpc_link,
    skip_rules=(
        (SkipReason.PENDING_DELETION, is_deleting),
    ),
)


def sweep_vpc_links(region, options=None):
    return sweep_resources(region, DEFINITION, options or SweepOptions())


def register(registry):
    registry.add(NAME, sweep_vpc_links)
