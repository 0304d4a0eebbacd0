def _file(name, data=b"x"):
    from maisa_node.constants.mime_types import get_mime_type
    from maisa_node.services.worker_client import DownloadedFile

    return DownloadedFile(file_name=name, data=data, mime_type=get_mime_type(name))


def test_binary_slot_names():
    from maisa_node.services.assembler import binary_slot_names

    assert binary_slot_names(0) == []
    assert binary_slot_names(1) == ["data"]
    assert binary_slot_names(3) == ["data0", "data1", "data2"]


def test_assemble_result_preserves_status_fields():
    from maisa_node.services.assembler import assemble_result

    status = {"id": "E1", "result": "done", "executionId": "remote", "extra": {"k": 1}}
    item = assemble_result(status, "E1", [_file("a.pdf", b"abc")], item_index=2)

    assert item.json["extra"] == {"k": 1}
    assert item.json["executionId"] == "E1"
    assert item.json["outputFiles"] == [
        {"fileName": "a.pdf", "mimeType": "application/pdf", "fileSize": 3, "binaryProperty": "data"}
    ]
    assert item.binary["data"].file_name == "a.pdf"
    assert item.paired_item == 2


def test_assemble_result_without_files_has_no_binary():
    from maisa_node.services.assembler import assemble_result

    item = assemble_result({"result": "x"}, "E1")
    assert item.json == {"result": "x", "executionId": "E1", "outputFiles": []}
    assert item.binary is None
