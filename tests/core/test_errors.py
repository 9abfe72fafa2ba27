import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from awssweep.core.errors import (
    NotFoundError, SweepError, combine_messages, error_code, is_access_denied, is_not_found, is_skip_sweep_error,
)


def client_error(code, message=''):
    return ClientError({'Error': {'Code': code, 'Message': message}}, 'Operation')


def test_error_code():
    assert error_code(client_error('Throttling')) == 'Throttling'
    assert error_code(RuntimeError('x')) == ''


def test_is_not_found():
    assert is_not_found(NotFoundError('gone'))
    assert is_not_found(client_error('NotFoundException'))
    assert is_not_found(client_error('ResourceNotFoundException'))
    assert not is_not_found(client_error('AccessDeniedException'))
    assert is_not_found(client_error('NoSuchKey'), codes=['NoSuchKey'])


def test_is_access_denied():
    assert is_access_denied(client_error('AccessDeniedException', 'nope'))
    assert is_access_denied(client_error('UnauthorizedOperation'))
    assert is_access_denied(client_error('Other', 'role is not authorized to perform: kms:DescribeKey'))
    assert not is_access_denied(client_error('NotFoundException', 'missing'))


@pytest.mark.parametrize("error,expected", [
    (None, False),
    (EndpointConnectionError(endpoint_url='https://kms.moon-1.amazonaws.com'), True),
    (client_error('UnsupportedOperation'), True),
    (client_error('InvalidAction', 'The action ListKeys is not valid for this web service'), True),
    (client_error('InvalidAction', 'something else'), False),
    (client_error('UnrecognizedClientException', 'The security token included in the request is invalid'), True),
    (client_error('AccessDeniedException', 'is not authorized to perform: kms:ListKeys'), False),
    (client_error('KMSInternalException'), False),
])
def test_is_skip_sweep_error(error, expected):
    assert is_skip_sweep_error(error) is expected


def test_combine_messages():
    assert combine_messages(['one']) == 'one'
    assert combine_messages(['one', 'two']) == '2 errors occurred:\n\t* one\n\t* two'


def test_sweep_error_keeps_failures():
    error = SweepError(['first', 'second'])

    assert error.failures == ['first', 'second']
    assert 'first' in str(error) and 'second' in str(error)
