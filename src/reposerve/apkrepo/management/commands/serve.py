import asyncio
import logging
from django.core.management.base import BaseCommand, CommandError
from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig
from reposerve.apkrepo.util import ReposerveException
from reposerve.apkrepo.views import get_config
from reposerve.apkrepo.management.util import init_cli_logger

DEFAULT_ADDR = '0.0.0.0:8080'

class Command(BaseCommand):
    """
    'serve' admin command
    """
    help = 'Serves the package repository over HTTP(S)'

    def add_arguments(self, parser):
        parser.add_argument('-a', '--addr', default=DEFAULT_ADDR,
                            help='addr:port to bind to (default {0})'.format(DEFAULT_ADDR))

    def handle(self, *args, **options):

        logger = init_cli_logger(options)

        # configuration problems are fatal before anything is bound
        try:
            config = get_config()
        except ReposerveException as e:
            raise CommandError(e)

        hypercorn_config = self.get_hypercorn_config(config, options['addr'])

        from reposerve.asgi import application
        logger.info('listening on {0} (repository {1})'.format(options['addr'], config.dir))
        asyncio.run(serve(application, hypercorn_config))

    def get_hypercorn_config(self, config, addr):
        """
        Translates the repository configuration into a hypercorn configuration
        """
        hypercorn_config = HypercornConfig()
        hypercorn_config.bind = [addr]
        hypercorn_config.accesslog = logging.getLogger('hypercorn.access')
        hypercorn_config.errorlog = logging.getLogger('hypercorn.error')
        if config.tls:
            hypercorn_config.certfile = config.tls.crt
            hypercorn_config.keyfile = config.tls.key
            if config.tls.redirect:
                # plain HTTP listener; TlsSecurityMiddleware redirects it to https
                hypercorn_config.insecure_bind = [config.tls.redirect.addr]
        return hypercorn_config
