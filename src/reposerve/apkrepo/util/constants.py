# repository coordinate defaults
DEFAULT_VERSION = 'edge'
DEFAULT_REPO = 'main'
DEFAULT_ARCH = 'x86_64'

# external tooling defaults
DEFAULT_INDEXER = '/sbin/apk'
DEFAULT_SIGNER = '/usr/bin/abuild-sign'
DEFAULT_INDEX_FILENAME = 'APKINDEX.tar.gz'
DEFAULT_ARCHIVE_EXTENSION = '.apk'
DEFAULT_COMMAND_TIMEOUT = 300

DEFAULT_WORKERS = 4
MAX_FILENAME_BYTES = 255
STAGING_PREFIX = 'reposerve'
LOCK_PREFIX = '.reposerve-'

TOKEN_HEADER = 'token'
JWKS_CACHE_TIMEOUT = 3600
DELIMITER_TAIL_SLACK = 64

# tls hardening defaults
DEFAULT_REDIRECT_ADDR = '0.0.0.0:80'
DEFAULT_HSTS_MAX_AGE = 31536000
