"""
Unit tests for downloads and directory listings
"""
import os
from django.test import Client
from reposerve.apkrepo.listing import list_directory
from reposerve.apkrepo.tests.base import RepositoryTestCase


class RepositoryBrowseTest(RepositoryTestCase):

    def setUp(self):
        super(RepositoryBrowseTest, self).setUp()
        os.makedirs(self.repo_path('A'))
        os.makedirs(self.repo_path('edge', 'main', 'x86_64'))
        os.makedirs(self.repo_path('.staging'))
        self._write(self.repo_path('b.txt'), b'hello world')
        self._write(self.repo_path('<x>.txt'), b'')
        self._write(self.repo_path('.secret'), b'hidden')
        self._write(self.repo_path('edge', 'main', 'x86_64', 'pkg.apk'), b'\x00' * 2048)
        # metadata of a dangling link cannot be read
        os.symlink(os.path.join(self.tmp_dir, 'nowhere'), self.repo_path('dangling'))

    def _write(self, path, content):
        with open(path, 'wb') as fh:
            fh.write(content)

    def test_download_file(self):
        response = self.client.get('/edge/main/x86_64/pkg.apk')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(b''.join(response.streaming_content), b'\x00' * 2048)

    def test_download_missing_file(self):
        response = self.client.get('/edge/main/x86_64/missing.apk')
        self.assertEqual(response.status_code, 404)

    def test_hidden_entries_are_not_served(self):
        self.assertEqual(self.client.get('/.secret').status_code, 404)
        self.assertEqual(self.client.get('/.staging/').status_code, 404)

    def test_traversal_is_not_served(self):
        response = self.client.get('/edge/../../outside')
        self.assertEqual(response.status_code, 404)

    def test_root_listing(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/html; charset=utf-8')

        content = response.content.decode()
        self.assertIn('Index of /', content)
        self.assertNotIn('../', content)
        self.assertNotIn('.secret', content)
        self.assertNotIn('.staging', content)
        self.assertNotIn('dangling', content)

        # directories first, then files by name
        self.assertLess(content.index('>A/<'), content.index('>edge/<'))
        self.assertLess(content.index('>edge/<'), content.index('&lt;x&gt;.txt'))
        self.assertLess(content.index('&lt;x&gt;.txt'), content.index('>b.txt<'))

        self.assertIn('href="/%3Cx%3E.txt"', content)
        self.assertNotIn('<x>', content)
        self.assertIn('<span>11B</span>', content)

    def test_nested_listing(self):
        response = self.client.get('/edge/main/x86_64/')
        self.assertEqual(response.status_code, 200)

        content = response.content.decode()
        self.assertIn('Index of /edge/main/x86_64/', content)
        self.assertIn('<a href="/edge/main">../</a>', content)
        self.assertIn('href="/edge/main/x86_64/pkg.apk"', content)
        self.assertIn('<span>2.0KiB</span>', content)

    def test_listing_without_trailing_slash(self):
        response = self.client.get('/edge')
        self.assertEqual(response.status_code, 200)
        content = response.content.decode()
        self.assertIn('<a href="/">../</a>', content)
        self.assertIn('href="/edge/main"', content)

    def test_listing_requires_get(self):
        response = self.client.post('/edge/')
        self.assertEqual(response.status_code, 405)

    def test_list_directory(self):
        entries = list_directory(self.root, '/')
        self.assertEqual([e.name for e in entries], ['A', 'edge', '<x>.txt', 'b.txt'])
        self.assertEqual([e.is_dir for e in entries], [True, True, False, False])
        self.assertEqual(entries[3].size, '11B')
        self.assertRegex(entries[3].modified, r'^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}$')

    def test_unreadable_entry_is_omitted(self):
        entries = list_directory(self.root, '/')
        self.assertNotIn('dangling', [e.name for e in entries])
        self.assertEqual(self.client.get('/dangling').status_code, 404)

    def test_files_sorted_by_escaped_name(self):
        self._write(self.repo_path(';b.txt'), b'')
        entries = list_directory(self.root, '/')
        # '<' escapes to '&lt;', which sorts before ';'
        self.assertEqual([e.name for e in entries if not e.is_dir], ['<x>.txt', ';b.txt', 'b.txt'])


class TlsHardeningTest(RepositoryTestCase):

    def setUp(self):
        super(TlsHardeningTest, self).setUp()
        self.configure(tls={
            'crt': '/etc/ssl/repo.crt',
            'key': '/etc/ssl/repo.key',
            'redirect': {'addr': '0.0.0.0:8081', 'host': 'repo.example.org'},
            'hsts': {'max_age': 600, 'include_subdomains': True},
        })

    def test_plain_http_is_redirected(self):
        response = self.client.get('/edge/main/?x=1')
        self.assertEqual(response.status_code, 301)
        self.assertEqual(response['Location'], 'https://repo.example.org/edge/main/?x=1')

    def test_hsts_header(self):
        response = self.client.get('/', secure=True)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Strict-Transport-Security'], 'max-age=600; includeSubDomains')

    def test_no_hardening_without_options(self):
        self.configure(tls={'crt': '/etc/ssl/repo.crt', 'key': '/etc/ssl/repo.key'})
        self.client = Client()
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('Strict-Transport-Security', self.client.get('/', secure=True))
