"""
YAML configuration of the repository daemon

The configuration is read once per file path and exposed as immutable
namedtuples shared by every request handler.
"""
import functools
import os
import types
from collections import namedtuple
import yaml
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.translation import gettext as _
from reposerve.apkrepo.util import ConfigurationException, constants

TlsConfig = namedtuple('TlsConfig', ['crt', 'key', 'redirect', 'hsts'])

RedirectConfig = namedtuple('RedirectConfig', ['addr', 'host'])

HstsConfig = namedtuple('HstsConfig', ['max_age', 'include_subdomains', 'preload'])

JwtConfig = namedtuple('JwtConfig', ['jwks', 'issuer', 'audience', 'algorithms', 'claims'])

Config = namedtuple('Config', [
    'dir',
    'token',
    'jwt',
    'tls',
    'webhooks',
    'indexer',
    'signer',
    'index',
    'extension',
    'timeout',
    'workers',
    'serialize_uploads',
    'reject_duplicate_fields',
    'lock_dir',
])


def _require_type(data, key, expected, default=None):
    value = data.get(key, default)
    if value is not None and not isinstance(value, expected):
        raise ConfigurationException(
            _('Invalid value for {key}: {value!r}').format(key=key, value=value))
    return value


def _parse_tls(data):
    if data is None:
        return None
    if not isinstance(data, dict) or 'crt' not in data or 'key' not in data:
        raise ConfigurationException(_('tls requires both crt and key'))
    return TlsConfig(crt=str(data['crt']), key=str(data['key']),
                     redirect=_parse_redirect(data.get('redirect')),
                     hsts=_parse_hsts(data.get('hsts')))


def _parse_redirect(data):
    """
    Plain HTTP listener answering every request with a redirect to https

    Accepts true (listen on the default address) or a mapping with
    optional addr and host (host the redirect points to)
    """
    if data is None or data is False:
        return None
    if data is True:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationException(_('tls.redirect must be true or a mapping'))
    return RedirectConfig(
        addr=_require_type(data, 'addr', str, constants.DEFAULT_REDIRECT_ADDR),
        host=_require_type(data, 'host', str),
    )


def _parse_hsts(data):
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ConfigurationException(_('tls.hsts must be a mapping'))
    max_age = _require_type(data, 'max_age', int)
    if max_age is None:
        max_age = constants.DEFAULT_HSTS_MAX_AGE
    if isinstance(max_age, bool) or max_age < 0:
        raise ConfigurationException(_('Invalid value for max_age: {0!r}').format(max_age))
    return HstsConfig(
        max_age=max_age,
        include_subdomains=bool(data.get('include_subdomains', False)),
        preload=bool(data.get('preload', False)),
    )


def _parse_jwt(data):
    if data is None:
        return None
    if not isinstance(data, dict) or not data.get('jwks'):
        raise ConfigurationException(_('jwt requires a jwks url'))

    algorithms = _require_type(data, 'algorithms', list, ['RS256'])
    claims = _require_type(data, 'claims', dict, {})
    return JwtConfig(
        jwks=str(data['jwks']),
        issuer=_require_type(data, 'issuer', str),
        audience=_require_type(data, 'audience', str),
        algorithms=tuple(algorithms),
        claims=types.MappingProxyType(dict(claims)),
    )


def parse_config(data):
    """
    Builds a Config from the deserialized YAML document
    """
    if not isinstance(data, dict):
        raise ConfigurationException(_('Configuration must be a mapping'))
    if not data.get('dir'):
        raise ConfigurationException(_('Repository root (dir) is not configured'))

    webhooks = _require_type(data, 'webhooks', dict, {}) or {}
    timeout = _require_type(data, 'timeout', (int, float), constants.DEFAULT_COMMAND_TIMEOUT)
    workers = _require_type(data, 'workers', int, constants.DEFAULT_WORKERS)
    if workers < 1:
        raise ConfigurationException(_('workers must be at least 1'))

    token = data.get('token')
    return Config(
        dir=os.path.abspath(str(data['dir'])),
        token=str(token) if token is not None else None,
        jwt=_parse_jwt(data.get('jwt')),
        tls=_parse_tls(data.get('tls')),
        webhooks=types.MappingProxyType({str(k): str(v) for k, v in webhooks.items()}),
        indexer=_require_type(data, 'indexer', str, constants.DEFAULT_INDEXER),
        signer=_require_type(data, 'signer', str, constants.DEFAULT_SIGNER),
        index=_require_type(data, 'index', str, constants.DEFAULT_INDEX_FILENAME),
        extension=_require_type(data, 'extension', str, constants.DEFAULT_ARCHIVE_EXTENSION),
        timeout=timeout,
        workers=workers,
        serialize_uploads=bool(data.get('serialize_uploads', False)),
        reject_duplicate_fields=bool(data.get('reject_duplicate_fields', False)),
        lock_dir=_require_type(data, 'lock_dir', str),
    )


@functools.lru_cache(maxsize=None)
def load_config(path):
    """
    Reads and validates the YAML configuration file at path
    """
    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationException(_("Can't open {path}: {error}").format(path=path, error=e))
    except yaml.YAMLError as e:
        raise ConfigurationException(_("Can't read {path}: {error}").format(path=path, error=e))

    return parse_config(data)


@receiver(setting_changed)
def _reset_config_cache(setting, **kwargs):
    if setting == 'REPOSERVE_CONFIG':
        load_config.cache_clear()
