import contextlib
import logging
import os
import shutil
import tempfile
from django.conf import settings
from django.core.exceptions import SuspiciousOperation
from django.http import UnreadablePostError
from django.http.multipartparser import MultiPartParserError
from django.utils.translation import gettext as _
from lockfile import FileLock
from reposerve.apkrepo.models import ArchiveClassifier, ArchiveCoordinate, IngestResult
from reposerve.apkrepo.util import (CommandFailed, InvalidUpload, StorageException,
                                    TruncatedUpload, constants)
from reposerve.apkrepo.util.staging import StagingArea, StagingUploadHandler
from reposerve.apkrepo.util.system import run_command


class Repository:
    """
    Manages the on-disk package repository: root/version/repo/arch

    Uploaded archives are committed into their architecture directory, after
    which the package index of that directory is rebuilt and signed by the
    configured external commands.
    """

    def __init__(self, config, logger=None):
        """
        Constructor for Repository class

        config - reposerve.apkrepo.config.Config instance
        logger - (optional) set custom logger, otherwise uses settings.DEFAULT_LOGGER
        """
        self.config = config
        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger(settings.DEFAULT_LOGGER)

    @property
    def root(self):
        return self.config.dir

    def get_destination(self, coordinate):
        """
        Returns the architecture directory for a coordinate
        """
        return os.path.join(self.root, coordinate.sanitized().relative_path())

    def ingest(self, request):
        """
        Stores every file of a multipart upload and refreshes the index

        request - Django request whose body has not been parsed yet

        Returns an IngestResult.  Raises TruncatedUpload if the body ended
        early and StorageException on filesystem failures; in both cases
        nothing is committed and the staged data is removed.
        """
        with StagingArea(logger=self.logger) as staging:
            handler = StagingUploadHandler(staging, request)
            request.upload_handlers = [handler]
            try:
                fields = request.POST
                request.FILES
            except UnreadablePostError as e:
                raise TruncatedUpload(_('Upload aborted: {0}').format(e))
            except MultiPartParserError as e:
                raise TruncatedUpload(_('Malformed upload: {0}').format(e))
            except SuspiciousOperation as e:
                # too many files or fields, or a body over the configured size
                raise InvalidUpload(str(e))

            if not handler.is_complete():
                raise TruncatedUpload()

            classifier = ArchiveClassifier(strict=self.config.reject_duplicate_fields,
                                           logger=self.logger)
            classifier.accept_all(fields)
            coordinate = classifier.coordinate()

            return self.add_packages(coordinate, staging.files)

    def add_packages(self, coordinate, staged_files):
        """
        Commits staged files to a coordinate, then re-indexes and signs it

        coordinate - ArchiveCoordinate of the destination
        staged_files - files exposing a name and temporary_file_path()
        """
        coordinate = coordinate.sanitized()
        with self._coordinate_lock(coordinate):
            stored = self.commit(coordinate, staged_files)
            (indexed, signed) = self.refresh_index(coordinate)

        return IngestResult(coordinate=coordinate, files=stored, indexed=indexed, signed=signed)

    def commit(self, coordinate, staged_files):
        """
        Copies staged files into the architecture directory of a coordinate

        The directory (and any missing parent) is created even when there is
        nothing to copy.  Returns the stored filenames.
        """
        destination = self.get_destination(coordinate)
        stored = []
        try:
            os.makedirs(destination, exist_ok=True)
            for staged_file in staged_files:
                target = os.path.join(destination, staged_file.name)
                self.logger.info('Storing {0} in {1}'.format(staged_file.name, destination))
                shutil.copyfile(staged_file.temporary_file_path(), target)
                stored.append(staged_file.name)
        except OSError as e:
            raise StorageException(
                _('Cannot store files in {path}: {error}').format(path=destination, error=e))

        return stored

    def list_archives(self, coordinate):
        """
        Returns the sorted names of the archive files in a coordinate's directory
        """
        destination = self.get_destination(coordinate)
        archives = []
        with os.scandir(destination) as entries:
            for entry in entries:
                if entry.name.endswith(self.config.extension) and entry.is_file():
                    archives.append(entry.name)
        return sorted(archives)

    def refresh_index(self, coordinate):
        """
        Rebuilds and signs the package index of a coordinate

        Failures are logged and never raised: stored archives stay in place
        and the index is stale (or unsigned) until the next refresh.

        Returns a tuple (indexed, signed)
        """
        destination = self.get_destination(coordinate)

        try:
            archives = self.list_archives(coordinate)
            output = run_command(
                [self.config.indexer, 'index', '-o', self.config.index,
                 '--rewrite-arch', coordinate.arch] + archives,
                cwd=destination, timeout=self.config.timeout)
            self.logger.info('{0}: {1}'.format(os.path.basename(self.config.indexer), output.strip()))
        except (CommandFailed, OSError) as e:
            self.logger.error('Error when indexing {0}: {1}'.format(coordinate, e))
            return (False, False)

        try:
            output = run_command([self.config.signer, self.config.index],
                                 cwd=destination, timeout=self.config.timeout)
            self.logger.info('{0}: {1}'.format(os.path.basename(self.config.signer), output.strip()))
        except CommandFailed as e:
            self.logger.error('Error when signing {0}: {1}'.format(coordinate, e))
            return (True, False)

        return (True, True)

    def list_coordinates(self):
        """
        Returns every coordinate that has a directory in the repository tree
        """
        coordinates = []
        if not os.path.isdir(self.root):
            return coordinates

        for version in sorted(os.listdir(self.root)):
            version_dir = os.path.join(self.root, version)
            if version.startswith('.') or not os.path.isdir(version_dir):
                continue
            for repo in sorted(os.listdir(version_dir)):
                repo_dir = os.path.join(version_dir, repo)
                if repo.startswith('.') or not os.path.isdir(repo_dir):
                    continue
                for arch in sorted(os.listdir(repo_dir)):
                    if not arch.startswith('.') and os.path.isdir(os.path.join(repo_dir, arch)):
                        coordinates.append(ArchiveCoordinate(version, repo, arch))

        return coordinates

    def _coordinate_lock(self, coordinate):
        """
        Inter-process lock serializing writes to one coordinate, when enabled
        """
        if not self.config.serialize_uploads:
            return contextlib.nullcontext()

        lock_dir = self.config.lock_dir or tempfile.gettempdir()
        lock_filename = os.path.join(
            lock_dir, constants.LOCK_PREFIX + str(coordinate))
        return FileLock(lock_filename)
