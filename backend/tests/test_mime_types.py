import pytest


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("report.XLSX", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        ("memo.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        ("scan.Pdf", "application/pdf"),
        ("photo.JPEG", "image/jpeg"),
        ("archive.tar.csv", "text/csv"),
        ("noext", "application/octet-stream"),
        ("movie.mp4", "application/octet-stream"),
        ("", "application/octet-stream"),
        ("pdf", "application/octet-stream"),
    ],
)
def test_get_mime_type(file_name, expected):
    from maisa_node.constants.mime_types import get_mime_type

    assert get_mime_type(file_name) == expected
