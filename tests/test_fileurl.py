import pytest

from vulnreach.fileurl import FileURLError, url_from_file_path, url_to_file_path

# (url, file_path, canonical_url, want_err)
POSIX_CASES = [
    ("file:///path/to/file", "/path/to/file", "", ""),
    ("file:/path/to/file", "/path/to/file", "file:///path/to/file", ""),
    ("file://localhost/path/to/file", "/path/to/file", "file:///path/to/file", ""),
    ("file://host.example.com/path/to/file", "", "", "file URL specifies non-local host"),
]

WINDOWS_CASES = [
    (
        "file://laptop/My%20Documents/FileSchemeURIs.doc",
        "\\\\laptop\\My Documents\\FileSchemeURIs.doc",
        "",
        "",
    ),
    (
        "file:///C:/Documents%20and%20Settings/davris/FileSchemeURIs.doc",
        "C:\\Documents and Settings\\davris\\FileSchemeURIs.doc",
        "",
        "",
    ),
    (
        "file:///D:/Program%20Files/Viewer/startup.htm",
        "D:\\Program Files\\Viewer\\startup.htm",
        "",
        "",
    ),
    (
        "file:///C:/Program%20Files/Music/Web%20Sys/main.html?REQUEST=RADIO",
        "C:\\Program Files\\Music\\Web Sys\\main.html",
        "file:///C:/Program%20Files/Music/Web%20Sys/main.html",
        "",
    ),
    (
        "file://applib/products/a-b/abc_9/4148.920a/media/start.swf",
        "\\\\applib\\products\\a-b\\abc_9\\4148.920a\\media\\start.swf",
        "",
        "",
    ),
    (
        "file:////applib/products/a%2Db/abc%5F9/4148.920a/media/start.swf",
        "",
        "",
        "file URL missing drive letter",
    ),
    (
        "C:\\Program Files\\Music\\Web Sys\\main.html?REQUEST=RADIO",
        "",
        "",
        "non-file URL",
    ),
    (
        "file://D:/Program Files/Viewer/startup.htm",
        "",
        "",
        "file URL encodes volume in host field: too few slashes?",
    ),
    (
        "file:///C:/exampleㄓ.txt",
        "C:\\exampleㄓ.txt",
        "file:///C:/example%E3%84%93.txt",
        "",
    ),
    ("file:///C:/example%E3%84%93.txt", "C:\\exampleㄓ.txt", "", ""),
    ("file:c:/path/to/file", "c:\\path\\to\\file", "file:///c:/path/to/file", ""),
    (
        "file://host.example.com/Share/path/to/file.txt",
        "\\\\host.example.com\\Share\\path\\to\\file.txt",
        "",
        "",
    ),
    ("file:////host.example.com/path/to/file", "", "", "file URL missing drive letter"),
    ("file://///host.example.com/path/to/file", "", "", "file URL missing drive letter"),
]

ALL_CASES = [(False, *c) for c in POSIX_CASES] + [(True, *c) for c in WINDOWS_CASES]


@pytest.mark.parametrize("windows,url,file_path,canonical,want_err", ALL_CASES)
def test_url_to_file_path(windows, url, file_path, canonical, want_err):
    if want_err:
        with pytest.raises(FileURLError) as info:
            url_to_file_path(url, windows=windows)
        assert str(info.value) == want_err
    else:
        assert url_to_file_path(url, windows=windows) == file_path


FROM_PATH_CASES = [c for c in ALL_CASES if c[2]]


@pytest.mark.parametrize("windows,url,file_path,canonical,want_err", FROM_PATH_CASES)
def test_url_from_file_path(windows, url, file_path, canonical, want_err):
    want = canonical or url
    assert url_from_file_path(file_path, windows=windows) == want


@pytest.mark.parametrize("windows,url,file_path,canonical,want_err", FROM_PATH_CASES)
def test_round_trip_from_path(windows, url, file_path, canonical, want_err):
    made = url_from_file_path(file_path, windows=windows)
    assert url_to_file_path(made, windows=windows) == file_path


@pytest.mark.parametrize("windows,path", [(False, "relative/path"), (True, "relative\\path"), (True, "\\rooted")])
def test_relative_path_rejected(windows, path):
    with pytest.raises(FileURLError) as info:
        url_from_file_path(path, windows=windows)
    assert str(info.value) == "path is not absolute"


def test_missing_path():
    with pytest.raises(FileURLError) as info:
        url_to_file_path("file://", windows=False)
    assert str(info.value) == "file URL missing path"


def test_non_file_scheme_rejected():
    with pytest.raises(FileURLError) as info:
        url_to_file_path("https://example.com/path", windows=False)
    assert str(info.value) == "non-file URL"


def test_error_is_value_error():
    with pytest.raises(ValueError):
        url_to_file_path("file:relative", windows=False)