import logging
from botocore.exceptions import ClientError
from awssweep.core.errors import error_message_contains, is_not_found, not_found_from
from awssweep.sweep.report import SkipReason
from awssweep.sweep.runner import ResourceDefinition, SweepOptions, sweep_resources

NAME = 'aws_kms_key'
MAX_PAGE_SIZE = 1000
DEFAULT_DELETION_WINDOW_IN_DAYS = 7


def find_key_by_id(client, key_id):
    kms = client.client('kms')
    try:
        return kms.describe_key(KeyId=key_id)['KeyMetadata']
    except ClientError as e:
        if is_not_found(e):
            raise not_found_from(e, f"KMS Key ({key_id})") from e
        raise


def is_aws_managed(key):
    return key.get('KeyManager') == 'AWS'


def is_pending_deletion(key):
    return key.get('KeyState') in ('PendingDeletion', 'PendingReplicaDeletion')


def fill_defaults(candidate, data, deletion_window_in_days=DEFAULT_DELETION_WINDOW_IN_DAYS):
    data['key_id'] = candidate.identifier
    data['deletion_window_in_days'] = deletion_window_in_days


def delete_key(client, key_id, data):
    kms = client.client('kms')
    window = data.get('deletion_window_in_days', DEFAULT_DELETION_WINDOW_IN_DAYS)
    try:
        kms.schedule_key_deletion(KeyId=key_id, PendingWindowInDays=window)
    except ClientError as e:
        if is_not_found(e):
            return
        if error_message_contains(e, 'KMSInvalidStateException', 'pending deletion'):
            return
        raise
    logging.info(f"[{client.region}] Scheduled KMS Key {key_id} for deletion in {window} days")


def definition(deletion_window_in_days=DEFAULT_DELETION_WINDOW_IN_DAYS):
    return ResourceDefinition(
        name=NAME,
        display_name='KMS Key',
        service='kms',
        list_operation='list_keys',
        result_key='Keys',
        id_key='KeyId',
        page_size=MAX_PAGE_SIZE,
        describe=find_key_by_id,
        delete=delete_key,
        skip_rules=(
            (SkipReason.MANAGED_EXTERNALLY, is_aws_managed),
            (SkipReason.PENDING_DELETION, is_pending_deletion),
        ),
        fill_defaults=lambda candidate, data: fill_defaults(candidate, data, deletion_window_in_days),
    )


def sweep_keys(region, options=None):
    options = options or SweepOptions()
    return sweep_resources(region, definition(options.config.kms.deletion_window_in_days), options)


def register(registry):
    registry.add(NAME, sweep_keys)
