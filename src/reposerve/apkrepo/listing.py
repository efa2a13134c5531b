import os
import posixpath
import stat
from collections import namedtuple
from urllib.parse import quote
from django.template.loader import render_to_string
from django.utils.html import escape
from reposerve.apkrepo.util.files import format_size, format_timestamp

DirEntry = namedtuple('DirEntry', ['name', 'url', 'modified', 'size', 'is_dir'])


def is_visible(name):
    """
    Hidden (dot) entries are never listed or served
    """
    return not name.startswith('.')


def _entry_url(request_path, name):
    return quote(posixpath.join(request_path, name), safe='/')


def _parent_url(request_path):
    parent = posixpath.dirname(request_path.rstrip('/')) or '/'
    return quote(parent, safe='/')


def _read_entry(entry, request_path):
    try:
        st = entry.stat()
    except OSError:
        return None

    return DirEntry(
        name=entry.name,
        url=_entry_url(request_path, entry.name),
        modified=format_timestamp(st.st_mtime),
        size=format_size(st.st_size),
        is_dir=stat.S_ISDIR(st.st_mode),
    )


def list_directory(directory, request_path, visible=is_visible):
    """
    Returns the visible entries of a directory, directories first, then by escaped name

    Entries whose metadata cannot be read are left out
    """
    entries = []
    with os.scandir(directory) as it:
        for entry in it:
            if not visible(entry.name):
                continue
            dir_entry = _read_entry(entry, request_path)
            if dir_entry:
                entries.append(dir_entry)

    entries.sort(key=lambda e: (not e.is_dir, escape(e.name)))
    return entries


def render_directory_listing(directory, root, request_path, visible=is_visible):
    """
    Renders the HTML index page of a directory of the repository tree

    directory - filesystem path of the directory to list
    root - filesystem path of the repository root
    request_path - URL path the directory was requested with
    """
    parent_url = None
    if os.path.normpath(directory) != os.path.normpath(root):
        parent_url = _parent_url(request_path)

    return render_to_string('apkrepo/directory_listing.html', {
        'index_of': 'Index of {0}'.format(request_path),
        'parent_url': parent_url,
        'entries': list_directory(directory, request_path, visible),
    })
