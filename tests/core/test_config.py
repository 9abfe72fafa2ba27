import pytest
from awssweep.core.config import Config, load_config


def test_load_config_defaults():
    config = load_config(None)

    assert config.regions == []
    assert config.sweepers == ['all']
    assert config.max_workers == 10
    assert config.dry_run is False
    assert config.kms.deletion_window_in_days == 7


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / 'awssweep.yaml'
    path.write_text(
        "regions: us-west-2, us-east-1\n"
        "sweepers: [aws_kms_key]\n"
        "max_workers: 4\n"
        "dry_run: true\n"
        "kms:\n"
        "  deletion_window_in_days: 14\n"
    )

    config = load_config(str(path))

    assert config.regions == ['us-west-2', 'us-east-1']
    assert config.sweepers == ['aws_kms_key']
    assert config.max_workers == 4
    assert config.max_pool_connections == 20
    assert config.dry_run is True
    assert config.kms.deletion_window_in_days == 14


def test_load_config_empty_file(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('')

    assert load_config(str(path)) == Config()


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'nope.yaml'))


@pytest.mark.parametrize("body", [
    "max_workers: 0\n",
    "kms:\n  deletion_window_in_days: 3\n",
    "kms:\n  deletion_window_in_days: 31\n",
])
def test_load_config_rejects_invalid_values(tmp_path, body):
    path = tmp_path / 'bad.yaml'
    path.write_text(body)

    with pytest.raises(ValueError):
        load_config(str(path))


def test_pool_grows_with_workers():
    config = Config(max_workers=50).validate()

    assert config.max_pool_connections == 50



@pytest.mark.parametrize("body", [
    "kms:\n  deletion_window_in_days: '10'\n",
    "max_pool_connections: '20'\n",
    "max_workers: 2.5\n",
    "retry_max_attempts: true\n",
    "dry_run: 'no'\n",
    "kms: 7\n",
    "- us-west-2\n",
])
def test_load_config_rejects_wrong_types(tmp_path, body):
    path = tmp_path / 'bad.yaml'
    path.write_text(body)

    with pytest.raises(ValueError):
        load_config(str(path))
