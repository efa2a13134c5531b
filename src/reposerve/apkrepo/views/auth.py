import hmac
import logging
import requests
from django.conf import settings
from django.core.cache import cache
from jose import JWTError, jwt
from reposerve.apkrepo.util import constants

_JWKS_FETCH_TIMEOUT = 10


class TokenAuthorizer:
    """
    Accepts requests whose 'token' header equals the shared secret
    """

    def __init__(self, token):
        self.token = token

    def is_authorized(self, request):
        supplied = request.headers.get(constants.TOKEN_HEADER)
        if not supplied:
            return False
        return hmac.compare_digest(supplied.encode('utf-8'), self.token.encode('utf-8'))


class JwtAuthorizer:
    """
    Accepts requests carrying a bearer JWT signed by a key of the JWKS endpoint

    The issuer, audience and any additional claims configured must match.
    """

    def __init__(self, jwt_config, logger=None):
        self.jwt_config = jwt_config
        self.logger = logger or logging.getLogger(settings.DEFAULT_LOGGER)

    def get_jwks(self):
        """
        Retrieves the JSON web key set, through the cache
        """
        cache_key = 'jwks:' + self.jwt_config.jwks
        jwks = cache.get(cache_key)
        if jwks:
            return jwks

        self.logger.debug('Fetching JWKS from ' + self.jwt_config.jwks)
        response = requests.get(self.jwt_config.jwks, timeout=_JWKS_FETCH_TIMEOUT)
        response.raise_for_status()
        jwks = response.json()
        cache.set(cache_key, jwks, constants.JWKS_CACHE_TIMEOUT)
        return jwks

    def is_authorized(self, request):
        header = request.headers.get('Authorization', '')
        (scheme, _, token) = header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            return False

        try:
            claims = jwt.decode(
                token.strip(),
                self.get_jwks(),
                algorithms=list(self.jwt_config.algorithms),
                audience=self.jwt_config.audience,
                issuer=self.jwt_config.issuer,
                options={'verify_aud': self.jwt_config.audience is not None},
            )
        except (JWTError, requests.RequestException, ValueError) as e:
            self.logger.info('Rejected bearer token: {0}'.format(e))
            return False

        for name, expected in self.jwt_config.claims.items():
            if claims.get(name) != expected:
                self.logger.info('Rejected bearer token: claim {0} does not match'.format(name))
                return False

        return True


def get_authorizers(config, logger=None):
    """
    Returns the authorizers enabled by the configuration
    """
    authorizers = []
    if config.token:
        authorizers.append(TokenAuthorizer(config.token))
    if config.jwt:
        authorizers.append(JwtAuthorizer(config.jwt, logger=logger))
    return authorizers


def is_authorized(request, config, logger=None):
    """
    True when any configured authorizer accepts the request

    With no authorizer configured every request is refused
    """
    return any(authorizer.is_authorized(request)
               for authorizer in get_authorizers(config, logger=logger))
