"""
Data model for the package repository

Nothing here is persisted in a database: the repository tree on disk is the
only state, addressed by ArchiveCoordinate.
"""
import enum
import logging
import os
from collections import namedtuple
from django.conf import settings
from django.utils.translation import gettext as _
from reposerve.apkrepo.util import InvalidUpload, constants
from reposerve.apkrepo.util.files import sanitize_filename

UNDECODABLE_CHARACTER = '\ufffd'


class CoordinateField(enum.Enum):
    """
    Form fields that select where an upload is stored
    """
    VERSION = 'version'
    REPO = 'repo'
    ARCH = 'arch'


class ArchiveCoordinate(namedtuple('ArchiveCoordinate', ['version', 'repo', 'arch'])):
    """
    Location of one architecture directory: root/version/repo/arch
    """
    __slots__ = ()

    @classmethod
    def default(cls):
        return cls(constants.DEFAULT_VERSION, constants.DEFAULT_REPO, constants.DEFAULT_ARCH)

    @classmethod
    def parse(cls, identifier):
        """
        Parses a coordinate written as version:repo:arch
        """
        try:
            (version, repo, arch) = identifier.split(':')
        except ValueError:
            raise ValueError(_('Invalid coordinate: {0}').format(identifier))
        return cls(version, repo, arch).sanitized()

    def sanitized(self):
        """
        Returns a copy whose segments are all safe path names

        A segment left empty by sanitization falls back to its default
        """
        defaults = self.default()
        return ArchiveCoordinate(*[sanitize_filename(value) or default
                                   for value, default in zip(self, defaults)])

    def relative_path(self):
        return os.path.join(self.version, self.repo, self.arch)

    def __str__(self):
        return '{0}:{1}:{2}'.format(self.version, self.repo, self.arch)


class ArchiveClassifier:
    """
    Accumulates coordinate form fields as they arrive in an upload

    strict - (optional) reject a field supplied twice instead of letting
             the last value win
    """

    def __init__(self, strict=False, logger=None):
        self.strict = strict
        self.logger = logger or logging.getLogger(settings.DEFAULT_LOGGER)
        self._values = {}

    def accept(self, name, value):
        """
        Records one form field; names outside CoordinateField are ignored
        """
        try:
            field = CoordinateField(name)
        except ValueError:
            self.logger.debug('Ignoring unknown form field: {0}'.format(name))
            return

        # the multipart parser replaces undecodable bytes with U+FFFD
        if UNDECODABLE_CHARACTER in value:
            self.logger.warning('Ignoring undecodable value of form field {0}'.format(name))
            return

        if field in self._values:
            if self.strict:
                raise InvalidUpload(_('Duplicate form field: {0}').format(name))
            self.logger.warning('Form field {0} supplied more than once, using {1!r}'.format(name, value))

        self._values[field] = value

    def accept_all(self, query_dict):
        """
        Records every value of a parsed QueryDict, in arrival order
        """
        for name, values in query_dict.lists():
            for value in values:
                self.accept(name, value)

    def coordinate(self):
        """
        Returns the sanitized coordinate with defaults for unseen fields
        """
        defaults = ArchiveCoordinate.default()
        return ArchiveCoordinate(
            version=self._values.get(CoordinateField.VERSION, defaults.version),
            repo=self._values.get(CoordinateField.REPO, defaults.repo),
            arch=self._values.get(CoordinateField.ARCH, defaults.arch),
        ).sanitized()


IngestResult = namedtuple('IngestResult', ['coordinate', 'files', 'indexed', 'signed'])
