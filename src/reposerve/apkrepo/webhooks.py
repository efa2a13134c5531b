import logging
from django.conf import settings
from reposerve.apkrepo.util import CommandFailed, WebhookExecutionFailed, WebhookNotFound
from reposerve.apkrepo.util.system import run_command


class WebhookDispatcher:
    """
    Runs the local script registered under a webhook name
    """

    def __init__(self, webhooks, timeout=None, logger=None):
        """
        webhooks - read-only mapping of webhook name to script path
        timeout - (optional) seconds before a script is killed
        logger - (optional) set custom logger, otherwise uses settings.DEFAULT_LOGGER
        """
        self.webhooks = webhooks
        self.timeout = timeout
        self.logger = logger or logging.getLogger(settings.DEFAULT_LOGGER)

    def dispatch(self, name):
        """
        Executes the script for a webhook without arguments

        Returns a message carrying the script's standard output.  Raises
        WebhookNotFound for an unknown name and WebhookExecutionFailed when
        the script cannot run or exits with an error.
        """
        script = self.webhooks.get(name)
        if script is None:
            self.logger.info('Unknown webhook: {0}'.format(name))
            raise WebhookNotFound(name)

        self.logger.info('Running webhook {0}: {1}'.format(name, script))
        try:
            output = run_command([script], timeout=self.timeout)
        except CommandFailed as e:
            self.logger.error('Webhook {0} failed: {1}'.format(name, e))
            raise WebhookExecutionFailed(script, e.reason)

        return '{0} executed with success: {1}'.format(script, output)
