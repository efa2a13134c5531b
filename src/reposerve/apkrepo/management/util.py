import logging
from django.conf import settings
from django.core.management.base import CommandError
from reposerve.apkrepo.models import ArchiveCoordinate


def parse_coordinate(identifier):
    """
    Parses a coordinate identifier into an ArchiveCoordinate

    identifier -- string in the form <version>:<repo>:<arch>
    """
    try:
        return ArchiveCoordinate.parse(identifier)
    except ValueError as e:
        raise CommandError(e)


def init_cli_logger(command_options):

    logger = logging.getLogger(settings.DEFAULT_LOGGER)

    # if marked silent, filter any logging output except errors
    if command_options['verbosity'] == 0:
        logger.setLevel(logging.ERROR)
    # otherwise, increase logging verbosity
    elif command_options['verbosity'] >= 2:
        logger.setLevel(logging.DEBUG)

    return logger
