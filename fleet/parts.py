"""
Parts manifest: the folder/file tree attached to an equipment or vehicle.

Stored as a JSON document column::

    {"rootFiles": [{"id", "name", "url", "type"}],
     "folders":   [{"id", "name", "files": [...]}]}

Older rows hold the same document serialized as a string, or a list whose
first element is that string; ``parse_parts_manifest`` reads all of them.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

log = logging.getLogger(__name__)

FILE_IMAGE = "image"
FILE_DOCUMENT = "document"


@dataclass
class PartFile:
    id: str
    name: str
    url: Optional[str] = None
    type: str = FILE_DOCUMENT

    @staticmethod
    def from_dict(d: Dict) -> "PartFile":
        return PartFile(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or ""),
            url=d.get("url") or None,
            type=d.get("type") or FILE_DOCUMENT,
        )


@dataclass
class PartFolder:
    id: str
    name: str
    files: List[PartFile] = field(default_factory=list)

    @staticmethod
    def from_dict(d: Dict) -> "PartFolder":
        return PartFolder(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or ""),
            files=[PartFile.from_dict(f) for f in d.get("files") or [] if isinstance(f, dict)],
        )


@dataclass
class PartsManifest:
    root_files: List[PartFile] = field(default_factory=list)
    folders: List[PartFolder] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "rootFiles": [asdict(f) for f in self.root_files],
            "folders": [asdict(f) for f in self.folders],
        }

    def is_empty(self) -> bool:
        return not self.root_files and not self.folders

    def urls(self) -> List[str]:
        out = [f.url for f in self.root_files if f.url]
        for folder in self.folders:
            out.extend(f.url for f in folder.files if f.url)
        return out

    def folder(self, name: str) -> Optional[PartFolder]:
        for f in self.folders:
            if f.name == name:
                return f
        return None

    def pop_file(self, url: str) -> Optional[Tuple[Optional[str], PartFile]]:
        """Detach the file with ``url``; returns (folder name or None for root, file)."""
        for i, f in enumerate(self.root_files):
            if f.url == url:
                return None, self.root_files.pop(i)
        for folder in self.folders:
            for i, f in enumerate(folder.files):
                if f.url == url:
                    return folder.name, folder.files.pop(i)
        return None

    def files_in(self, folder_name: Optional[str]) -> List[PartFile]:
        """File list of ``folder_name`` (None is the root), creating the folder if needed."""
        if folder_name is None:
            return self.root_files
        folder = self.folder(folder_name)
        if folder is None:
            folder = PartFolder(_unique_id(f"folder_{len(self.folders)}", {f.id for f in self.folders}), folder_name)
            self.folders.append(folder)
        return folder.files

    def uploaded_only(self) -> "PartsManifest":
        """Copy keeping only files that already carry a URL; empty folders stay."""
        return PartsManifest(
            root_files=[f for f in self.root_files if f.url],
            folders=[
                PartFolder(fo.id, fo.name, [f for f in fo.files if f.url])
                for fo in self.folders
            ],
        )


def _from_document(doc) -> PartsManifest:
    if not isinstance(doc, dict):
        raise ValueError("parts manifest must be an object")
    return PartsManifest(
        root_files=[PartFile.from_dict(f) for f in doc.get("rootFiles") or [] if isinstance(f, dict)],
        folders=[PartFolder.from_dict(f) for f in doc.get("folders") or [] if isinstance(f, dict)],
    )


def parse_parts_manifest(raw) -> PartsManifest:
    """Read any stored form of the manifest; unreadable input gives an empty one."""
    if raw is None or raw == "":
        return PartsManifest()
    if isinstance(raw, PartsManifest):
        return raw

    try:
        if isinstance(raw, dict):
            return _from_document(raw)

        if isinstance(raw, str):
            return _from_document(json.loads(raw))

        if isinstance(raw, list):
            if not raw:
                return PartsManifest()
            first = raw[0]
            if isinstance(first, dict):
                return _from_document(first)
            if isinstance(first, str) and first.lstrip().startswith("{"):
                return _from_document(json.loads(first))
            # plain list of URLs
            return PartsManifest(root_files=[
                PartFile(id=f"root_{i}", name=str(u).rsplit("/", 1)[-1], url=str(u))
                for i, u in enumerate(raw) if u
            ])
    except (ValueError, TypeError) as e:
        log.warning("unreadable parts manifest ignored: %s", e)
        return PartsManifest()

    return PartsManifest()


def _unique_id(base: str, taken) -> str:
    candidate, n = base, 1
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    return candidate


def file_kind(mimetype: Optional[str]) -> str:
    return FILE_IMAGE if (mimetype or "").startswith("image/") else FILE_DOCUMENT


# upload(file_storage, folder_name_or_None, number) -> public url
Uploader = Callable[[object, Optional[str], int], str]


def build_parts_manifest(structure_raw, form, files, upload: Uploader) -> Optional[PartsManifest]:
    """
    Merge the submitted ``partsStructure`` with the uploaded part files.

    Files already carrying a URL are kept, declared folders are kept even
    when empty, and every ``partsFile_*`` upload is appended. Returns None
    when no structure was submitted or it cannot be parsed.
    """
    if not structure_raw:
        return None
    try:
        submitted = _from_document(json.loads(structure_raw))
    except (ValueError, TypeError) as e:
        log.warning("partsStructure ignored: %s", e)
        return None

    manifest = submitted.uploaded_only()

    i = 0
    while f"partsFile_root_{i}" in files:
        fs = files[f"partsFile_root_{i}"]
        name = form.get(f"partsFile_root_{i}_name") or fs.filename
        if fs and fs.filename:
            url = upload(fs, None, i + 1)
            taken = {f.id for f in manifest.root_files}
            manifest.root_files.append(PartFile(_unique_id(f"root_{i}", taken), name, url, file_kind(fs.mimetype)))
        i += 1

    folder_idx = 0
    while f"partsFile_folder_{folder_idx}_0" in files:
        file_idx = 0
        while f"partsFile_folder_{folder_idx}_{file_idx}" in files:
            key = f"partsFile_folder_{folder_idx}_{file_idx}"
            fs = files[key]
            name = form.get(f"{key}_name") or fs.filename
            folder_name = form.get(f"{key}_folder") or "root"
            if fs and fs.filename:
                url = upload(fs, folder_name, file_idx + 1)
                folder = manifest.folder(folder_name)
                if folder is None:
                    folder = PartFolder(f"folder_{folder_idx}", folder_name)
                    manifest.folders.append(folder)
                taken = {f.id for f in folder.files}
                folder.files.append(
                    PartFile(_unique_id(f"folder_{folder_idx}_file_{file_idx}", taken), name, url, file_kind(fs.mimetype))
                )
            file_idx += 1
        folder_idx += 1

    return manifest
