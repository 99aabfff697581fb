import io
import json

from werkzeug.datastructures import FileStorage, ImmutableMultiDict, MultiDict

from fleet.parts import PartsManifest, build_parts_manifest, parse_parts_manifest

DOC = {
    "rootFiles": [{"id": "r1", "name": "manual.pdf", "url": "https://x/manual.pdf", "type": "document"}],
    "folders": [
        {"id": "f1", "name": "Engine", "files": [{"id": "e1", "name": "filter.png", "url": "https://x/f.png", "type": "image"}]},
        {"id": "f2", "name": "Empty", "files": []},
    ],
}


def test_parse_structured_document():
    m = parse_parts_manifest(DOC)
    assert [f.name for f in m.folders] == ["Engine", "Empty"]
    assert m.urls() == ["https://x/manual.pdf", "https://x/f.png"]
    assert m.to_dict() == DOC


def test_parse_legacy_forms():
    as_string = json.dumps(DOC)
    assert parse_parts_manifest(as_string).to_dict() == DOC
    assert parse_parts_manifest([as_string]).to_dict() == DOC


def test_parse_url_list():
    m = parse_parts_manifest(["https://x/a.png", "https://x/b.pdf"])
    assert [f.name for f in m.root_files] == ["a.png", "b.pdf"]


def test_unreadable_manifest_is_empty():
    assert parse_parts_manifest("{not json").is_empty()
    assert parse_parts_manifest(None).is_empty()
    assert parse_parts_manifest([]).is_empty()
    assert parse_parts_manifest(42) == PartsManifest()


def _fs(name, mimetype="image/png"):
    return FileStorage(stream=io.BytesIO(b"data"), filename=name, content_type=mimetype)


def test_build_merges_uploads_and_keeps_empty_folders():
    structure = {
        "rootFiles": [
            {"id": "r1", "name": "kept.pdf", "url": "https://x/kept.pdf", "type": "document"},
            {"id": "r2", "name": "pending.pdf", "type": "document"},
        ],
        "folders": [{"id": "f1", "name": "Brakes", "files": []}],
    }
    files = MultiDict({
        "partsFile_root_0": _fs("new.pdf", "application/pdf"),
        "partsFile_folder_0_0": _fs("pad.png"),
        "partsFile_folder_1_0": _fs("belt.png"),
    })
    form = ImmutableMultiDict({
        "partsFile_root_0_name": "New manual",
        "partsFile_folder_0_0_folder": "Brakes",
        "partsFile_folder_1_0_folder": "Engine",
    })
    calls = []

    def upload(fs, folder, number):
        calls.append((fs.filename, folder, number))
        return f"https://x/{folder or 'root'}/{fs.filename}"

    m = build_parts_manifest(json.dumps(structure), form, files, upload)

    assert calls == [("new.pdf", None, 1), ("pad.png", "Brakes", 1), ("belt.png", "Engine", 1)]
    assert [f.name for f in m.root_files] == ["kept.pdf", "New manual"]
    assert m.root_files[1].type == "document"
    assert m.folder("Brakes").files[0].url == "https://x/Brakes/pad.png"
    assert m.folder("Engine").files[0].type == "image"


def test_build_without_structure_returns_none():
    assert build_parts_manifest(None, {}, {}, lambda *a: "u") is None
    assert build_parts_manifest("nope", {}, {}, lambda *a: "u") is None


def test_pop_file_and_files_in():
    manifest = parse_parts_manifest({
        "rootFiles": [{"id": "r0", "name": "a.png", "url": "https://cdn/a.png"}],
        "folders": [{"id": "folder_0", "name": "Engine", "files": [{"id": "f0", "name": "b.pdf", "url": "https://cdn/b.pdf"}]}],
    })

    assert manifest.pop_file("https://cdn/missing") is None
    source, part = manifest.pop_file("https://cdn/b.pdf")
    assert source == "Engine" and part.name == "b.pdf"
    assert manifest.folder("Engine").files == []

    manifest.files_in("Brakes").append(part)
    brakes = manifest.folder("Brakes")
    assert brakes.id == "folder_1"
    assert brakes.files == [part]
    assert manifest.files_in(None) is manifest.root_files
