"""Tests for the configuration text parser and mapping."""
import pytest

from ikconfig import ConfigState, KernelConfig, parse_config

from .conftest import CONFIG_TEXT


@pytest.fixture
def config():
    return parse_config(CONFIG_TEXT)


def test_parses_key_value_lines(config):
    assert config['CONFIG_GCC_VERSION'] == '130201'
    assert config['CONFIG_LOCALVERSION'] == '""'
    assert len(config) == 9


def test_skips_comments_and_malformed_lines():
    config = parse_config("# CONFIG_A is not set\n\nnot a config line\n=y\nCONFIG B=y\nCONFIG_C=y\n")
    assert dict(config) == {'CONFIG_C': 'y'}


def test_value_may_contain_equals():
    config = parse_config('CONFIG_CMDLINE="root=/dev/sda1 ro"\n')
    assert config['CONFIG_CMDLINE'] == '"root=/dev/sda1 ro"'


def test_later_duplicates_win():
    assert parse_config('CONFIG_HZ=100\nCONFIG_HZ=1000\n')['CONFIG_HZ'] == '1000'


def test_accepts_bytes_and_crlf():
    config = parse_config(b'CONFIG_A=y\r\nCONFIG_B=m\r\n')
    assert dict(config) == {'CONFIG_A': 'y', 'CONFIG_B': 'm'}


def test_lookup_without_prefix(config):
    assert config['HZ'] == '300'
    assert 'IKCONFIG' in config
    assert config.get('KASAN') is None
    assert 42 not in config


def test_get_value_missing_key(config):
    with pytest.raises(KeyError, match='CONFIG_KASAN'):
        config.get_value('CONFIG_KASAN')


def test_states(config):
    assert config.state('CONFIG_64BIT') is ConfigState.BUILT_IN
    assert config.state('EXT4_FS') is ConfigState.LOADABLE
    assert config.state('CONFIG_HZ') is None
    assert config.state('CONFIG_KASAN') is None
    assert config.is_enabled('CONFIG_IKCONFIG_PROC')
    assert not config.is_enabled('CONFIG_KASAN')


def test_is_read_only(config):
    with pytest.raises(TypeError):
        config['CONFIG_HZ'] = '1000'
    assert not hasattr(config, 'update')


def test_to_text_preserves_entries(config):
    assert parse_config(config.to_text()) == config


def test_empty():
    config = KernelConfig()
    assert len(config) == 0
    assert config.to_text() == ''
