from django.middleware.security import SecurityMiddleware
from reposerve.apkrepo.views import get_config


class TlsSecurityMiddleware(SecurityMiddleware):
    """
    SecurityMiddleware taking its HTTPS redirect and HSTS policy from the
    tls section of the repository configuration instead of SECURE_* settings
    """

    def __init__(self, get_response):
        super(TlsSecurityMiddleware, self).__init__(get_response)

        tls = get_config().tls
        redirect = tls.redirect if tls else None
        hsts = tls.hsts if tls else None

        self.redirect = redirect is not None
        self.redirect_host = redirect.host if redirect else None
        self.sts_seconds = hsts.max_age if hsts else 0
        self.sts_include_subdomains = bool(hsts and hsts.include_subdomains)
        self.sts_preload = bool(hsts and hsts.preload)
