from django.utils.translation import gettext as _

class ReposerveException(Exception):
    """
    Exceptions for the package repository
    """

    def __init__(self, message):
        super(ReposerveException, self).__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ConfigurationException(ReposerveException):
    """
    Exception for missing or malformed configuration
    """
    pass


class AuthorizationException(ReposerveException):
    """
    Exception for authorization failures
    """

    def __init__(self, message=None):
        if not message:
            message = _('Not authorized')

        super(AuthorizationException, self).__init__(message)


class IngestException(ReposerveException):
    """
    Base exception for failures while ingesting an upload
    """
    pass


class TruncatedUpload(IngestException):
    """
    The upload stream ended before every part was received
    """

    def __init__(self, message=None):
        if not message:
            message = _('Upload stream ended early')

        super(TruncatedUpload, self).__init__(message)


class InvalidUpload(IngestException):
    """
    The upload was received but cannot be accepted
    """
    pass


class StorageException(IngestException):
    """
    Filesystem failure while staging or committing files
    """
    pass


class CommandFailed(ReposerveException):
    """
    An external command could not be run or exited with an error
    """

    def __init__(self, command, message):
        self.command = command
        self.reason = message
        super(CommandFailed, self).__init__(
            _('{command}: {message}').format(command=command, message=message))


class WebhookException(ReposerveException):
    """
    Base exception for webhook dispatch failures
    """
    pass


class WebhookNotFound(WebhookException):

    def __init__(self, name):
        self.name = name
        super(WebhookNotFound, self).__init__(_('Not found'))


class WebhookExecutionFailed(WebhookException):

    def __init__(self, script, error):
        self.script = script
        super(WebhookExecutionFailed, self).__init__(
            _('failed to execute {script}: {error}').format(script=script, error=error))
