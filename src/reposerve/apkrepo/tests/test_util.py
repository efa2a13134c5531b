"""
Unit tests for filename handling, staging and classification
"""
import os
from django.test import SimpleTestCase
from reposerve.apkrepo.models import ArchiveClassifier, ArchiveCoordinate
from reposerve.apkrepo.util import CommandFailed, InvalidUpload
from reposerve.apkrepo.util.files import format_size, sanitize_filename
from reposerve.apkrepo.util.staging import StagingArea
from reposerve.apkrepo.util.system import run_command


class SanitizeFilenameTest(SimpleTestCase):

    def test_plain_names_are_kept(self):
        self.assertEqual(sanitize_filename('musl-1.2.4-r2.apk'), 'musl-1.2.4-r2.apk')
        self.assertEqual(sanitize_filename('x86_64'), 'x86_64')

    def test_separators_are_removed(self):
        self.assertEqual(sanitize_filename('../../etc/passwd'), '....etcpasswd')
        self.assertEqual(sanitize_filename('a\\b:c*d?e"f<g>h|i'), 'abcdefghi')
        self.assertEqual(sanitize_filename('tab\there\x00\x7f'), 'tabhere')

    def test_reserved_names_are_emptied(self):
        for name in ['', '.', '..', '...', 'CON', 'nul.txt', 'lpt1', '/']:
            self.assertEqual(sanitize_filename(name), '', name)

    def test_trailing_dots_and_spaces(self):
        self.assertEqual(sanitize_filename('name. . '), 'name')

    def test_long_names_are_truncated(self):
        self.assertEqual(len(sanitize_filename('a' * 300).encode()), 255)
        # a multi-byte character is never split
        truncated = sanitize_filename('é' * 200)
        self.assertEqual(truncated, 'é' * 127)


class FormatSizeTest(SimpleTestCase):

    def test_format_size(self):
        self.assertEqual(format_size(0), '0B')
        self.assertEqual(format_size(512), '512B')
        self.assertEqual(format_size(1023), '1023B')
        self.assertEqual(format_size(1024), '1.0KiB')
        self.assertEqual(format_size(12595), '12.3KiB')
        self.assertEqual(format_size(5 * 1024 * 1024), '5.0MiB')
        self.assertEqual(format_size(1024 * 1024 - 1), '1.0MiB')
        self.assertEqual(format_size(1024 ** 3 - 1), '1.0GiB')
        self.assertEqual(format_size(3 * 1024 ** 3), '3.0GiB')


class ArchiveCoordinateTest(SimpleTestCase):

    def test_parse(self):
        self.assertEqual(ArchiveCoordinate.parse('v3.19:community:aarch64'),
                         ArchiveCoordinate('v3.19', 'community', 'aarch64'))
        self.assertEqual(ArchiveCoordinate.parse('::'), ArchiveCoordinate.default())
        with self.assertRaises(ValueError):
            ArchiveCoordinate.parse('v3.19:community')

    def test_sanitized(self):
        coordinate = ArchiveCoordinate('..', 'com/munity', 'x86_64').sanitized()
        self.assertEqual(coordinate, ArchiveCoordinate('edge', 'community', 'x86_64'))
        self.assertEqual(str(coordinate), 'edge:community:x86_64')
        self.assertEqual(coordinate.relative_path(), os.path.join('edge', 'community', 'x86_64'))


class ArchiveClassifierTest(SimpleTestCase):

    def test_defaults(self):
        self.assertEqual(ArchiveClassifier().coordinate(), ArchiveCoordinate('edge', 'main', 'x86_64'))

    def test_fields(self):
        classifier = ArchiveClassifier()
        classifier.accept('arch', 'armv7')
        classifier.accept('unrelated', 'value')
        classifier.accept('version', 'v3.18')
        self.assertEqual(classifier.coordinate(), ArchiveCoordinate('v3.18', 'main', 'armv7'))

    def test_last_value_wins(self):
        classifier = ArchiveClassifier()
        classifier.accept('repo', 'main')
        classifier.accept('repo', 'testing')
        self.assertEqual(classifier.coordinate().repo, 'testing')

    def test_undecodable_value_is_skipped(self):
        classifier = ArchiveClassifier(strict=True)
        classifier.accept('repo', 'community')
        classifier.accept('repo', '\ufffd\ufffd')
        classifier.accept('arch', 'aarch\ufffd')
        self.assertEqual(classifier.coordinate(), ArchiveCoordinate('edge', 'community', 'x86_64'))

    def test_strict_rejects_duplicates(self):
        classifier = ArchiveClassifier(strict=True)
        classifier.accept('repo', 'main')
        with self.assertRaises(InvalidUpload):
            classifier.accept('repo', 'testing')


class StagingAreaTest(SimpleTestCase):

    def test_staging_is_removed(self):
        with StagingArea() as staging:
            staged = staging.create('pkg.apk')
            staged.write(b'data')
            staged.flush()
            path = staging.path
            self.assertTrue(os.path.isfile(staged.temporary_file_path()))
        self.assertFalse(os.path.exists(path))

    def test_staging_is_removed_on_error(self):
        with self.assertRaises(RuntimeError):
            with StagingArea() as staging:
                staging.create('pkg.apk')
                path = staging.path
                raise RuntimeError('boom')
        self.assertFalse(os.path.exists(path))

    def test_repeated_name_replaces_file(self):
        with StagingArea() as staging:
            staging.create('a.apk').write(b'first')
            staging.create('b.apk')
            replacement = staging.create('a.apk')
            replacement.write(b'second')
            replacement.flush()
            self.assertEqual([f.name for f in staging.files], ['b.apk', 'a.apk'])
            with open(replacement.temporary_file_path(), 'rb') as fh:
                self.assertEqual(fh.read(), b'second')

    def test_discard(self):
        with StagingArea() as staging:
            staged = staging.create('partial.apk')
            staging.discard('partial.apk')
            self.assertEqual(staging.files, [])
            self.assertFalse(os.path.exists(staged.temporary_file_path()))


class RunCommandTest(SimpleTestCase):

    def test_output(self):
        self.assertEqual(run_command(['echo', 'hello']), 'hello\n')

    def test_failures(self):
        with self.assertRaises(CommandFailed):
            run_command(['false'])
        with self.assertRaises(CommandFailed):
            run_command(['/nonexistent/reposerve-command'])
        with self.assertRaises(CommandFailed) as cm:
            run_command(['sleep', '5'], timeout=0.2)
        self.assertIn('timed out', str(cm.exception))
