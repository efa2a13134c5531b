import logging
import os
import shutil
import tempfile
from django.conf import settings
from django.core.files.uploadedfile import UploadedFile
from django.core.files.uploadhandler import FileUploadHandler, SkipFile
from django.http import HttpRequest
from reposerve.apkrepo.util import StorageException, constants
from reposerve.apkrepo.util.files import sanitize_filename


class StagedFile(UploadedFile):
    """
    An uploaded file written into a staging directory under its sanitized name
    """

    def __init__(self, path, name, content_type=None, charset=None, content_type_extra=None):
        super(StagedFile, self).__init__(open(path, 'wb+'), name, content_type, 0,
                                         charset, content_type_extra)
        self.path = path

    def temporary_file_path(self):
        return self.path


class StagingArea:
    """
    Request-scoped temporary directory receiving uploaded files

    Use as a context manager: the directory and everything staged in it is
    removed when the block exits, whatever the outcome.
    """

    def __init__(self, prefix=constants.STAGING_PREFIX, logger=None):
        self.prefix = prefix
        self.logger = logger or logging.getLogger(settings.DEFAULT_LOGGER)
        self.path = None
        self._files = {}

    def __enter__(self):
        try:
            self.path = tempfile.mkdtemp(prefix=self.prefix)
        except OSError as e:
            raise StorageException('Cannot create staging directory: {0}'.format(e))
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    @property
    def files(self):
        """
        Staged files in the order they were first received
        """
        return list(self._files.values())

    def create(self, name, content_type=None, charset=None, content_type_extra=None):
        """
        Opens a new staged file for writing

        name - already sanitized filename; a repeated name replaces the earlier file
        """
        previous = self._files.pop(name, None)
        if previous:
            previous.close()

        path = os.path.join(self.path, name)
        self.logger.info('saving {0}'.format(path))
        try:
            staged_file = StagedFile(path, name, content_type, charset, content_type_extra)
        except OSError as e:
            raise StorageException('Cannot stage {0}: {1}'.format(name, e))

        self._files[name] = staged_file
        return staged_file

    def discard(self, name):
        """
        Drops a partially received file
        """
        staged_file = self._files.pop(name, None)
        if staged_file:
            staged_file.close()
            if os.path.exists(staged_file.path):
                os.remove(staged_file.path)

    def close(self):
        """
        Closes every staged file and removes the staging directory
        """
        for staged_file in self._files.values():
            staged_file.close()
        self._files.clear()

        if self.path:
            try:
                shutil.rmtree(self.path)
            except OSError as e:
                self.logger.warning('Unable to remove staging directory {0}: {1}'.format(self.path, e))
            self.path = None


class StreamTail:
    """
    Read-through wrapper remembering the last bytes read from a stream

    stream - file-like object to read from
    size - number of trailing bytes kept
    """

    def __init__(self, stream, size, initial=b''):
        self.stream = stream
        self.size = size
        self.tail = initial[-size:]

    def read(self, *args, **kwargs):
        data = self.stream.read(*args, **kwargs)
        if data:
            self.tail = (self.tail + data)[-self.size:]
        return data

    def __getattr__(self, name):
        return getattr(self.stream, name)

    def ends_with(self, delimiter):
        return self.tail.rstrip().endswith(delimiter)


class StagingUploadHandler(FileUploadHandler):
    """
    Upload handler streaming every file part into a StagingArea, chunk by chunk
    """

    def __init__(self, staging, request=None):
        super(StagingUploadHandler, self).__init__(request)
        self.staging = staging
        self.interrupted = False
        self.pending = False
        self.closing_delimiter = None
        self.body = None

    def handle_raw_input(self, input_data, META, content_length, boundary, encoding=None):
        self.closing_delimiter = b'--' + boundary + b'--'
        tail_size = len(self.closing_delimiter) + constants.DELIMITER_TAIL_SLACK
        if isinstance(input_data, HttpRequest):
            # the parser reads the body through request.read()
            self.body = StreamTail(input_data._stream, tail_size)
            input_data._stream = self.body
        else:
            # body already buffered in memory
            self.body = StreamTail(input_data, tail_size, initial=input_data.getvalue())

    def new_file(self, *args, **kwargs):
        super(StagingUploadHandler, self).new_file(*args, **kwargs)

        name = sanitize_filename(self.file_name or '')
        if not name:
            self.staging.logger.warning('Skipping file part with unusable name: {0!r}'.format(self.file_name))
            raise SkipFile()

        self.file = self.staging.create(name, self.content_type, self.charset,
                                        self.content_type_extra)
        self.pending = True

    def receive_data_chunk(self, raw_data, start):
        try:
            self.file.write(raw_data)
        except OSError as e:
            raise StorageException('Cannot stage {0}: {1}'.format(self.file.name, e))

    def file_complete(self, file_size):
        self.file.flush()
        self.file.seek(0)
        self.file.size = file_size
        self.pending = False
        return self.file

    def upload_interrupted(self):
        self.interrupted = True
        if self.pending:
            self.staging.discard(self.file.name)

    def is_complete(self):
        """
        True when every file part that was started has been fully received
        and the body ended with the closing delimiter
        """
        if self.interrupted or self.pending:
            return False
        return self.body is None or self.body.ends_with(self.closing_delimiter)
