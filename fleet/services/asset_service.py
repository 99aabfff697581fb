"""
Equipment / vehicle lifecycle.

Creation is a multi-step flow:

1. validate and insert the asset row
2. upload the fixed file slots under ``<resource>-<id>/<subfolder>/``;
   a failure here deletes the row and the folder again
3. upload part files into ``parts-management/<folder>/`` and store the manifest
4. optionally create the nested maintenance report with its files
   (best effort, never fails the request)

The per-resource differences live in ``AssetKind`` (see equipment_service
and vehicle_service).
"""

import json
import mimetypes
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from flask import current_app
from sqlalchemy import or_

from ..errors import NotFoundError, StorageError, ValidationError
from ..extensions import db
from ..models import ASSET_STATUSES, Project
from ..parts import build_parts_manifest, parse_parts_manifest
from ..storage.paths import (
    asset_folder,
    delete_directory,
    extract_storage_path,
    file_extension,
    file_stem,
    object_name,
    sanitize_segment,
    timestamp_ms,
)
from . import maintenance_service
from .forms import clean_str, form_value, is_truthy_flag, missing_fields, parse_date, parse_int
from .upload_service import delete_by_url, store_bytes, store_file, storage_client, validate_upload

STR, DATE, INT = "str", "date", "int"


@dataclass(frozen=True)
class FileSlot:
    form_field: str
    column: str
    prefix: str
    subfolder: str
    keep_flag: str


@dataclass(frozen=True)
class ScalarField:
    column: str
    names: Tuple[str, ...]
    kind: str = STR
    required: bool = False


@dataclass(frozen=True)
class AssetKind:
    resource: str
    label: str
    model: type
    bucket: str
    parts_column: str
    slots: Sequence[FileSlot]
    fields: Sequence[ScalarField]
    reports: maintenance_service.ReportKind
    # missing required field names -> message
    required_message: Callable[[Sequence[str]], str]

    def folder(self, asset_id: str) -> str:
        return asset_folder(self.resource, asset_id)


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _parse(field: ScalarField, raw):
    label = field.names[0]
    if field.kind == DATE:
        return parse_date(raw, label)
    if field.kind == INT:
        return parse_int(raw, label)
    return clean_str(raw)


def _check_status(status):
    if status is not None and status not in ASSET_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ASSET_STATUSES)}")


def _check_project(project_id):
    if db.session.get(Project, project_id) is None:
        raise NotFoundError("Project not found")


def get_asset(kind: AssetKind, asset_id):
    asset = db.session.get(kind.model, asset_id) if asset_id else None
    if asset is None:
        raise NotFoundError(f"{kind.label} not found")
    return asset


def list_assets(kind: AssetKind, query):
    model = kind.model
    q = model.query
    if query.project_id:
        q = q.filter(model.project_id == query.project_id)
    if query.status:
        q = q.filter(model.status == query.status)
    if query.has_text():
        like = query.like()
        q = q.filter(or_(
            model.brand.ilike(like),
            model.model.ilike(like),
            model.plate_number.ilike(like),
            model.owner.ilike(like),
        ))

    q = q.order_by(model.created_at.desc())
    total = q.count()
    rows = query.page.apply(q).all()
    return [a.to_dict(with_reports=True) for a in rows], total


# ==========================================
# uploads
# ==========================================
def _upload_slot(kind: AssetKind, asset_id, slot: FileSlot, fs) -> str:
    directory = f"{kind.folder(asset_id)}/{slot.subfolder}"
    return store_file(kind.bucket, directory, object_name(slot.prefix, fs.filename), fs)


def _parts_uploader(kind: AssetKind, asset_id):
    def upload(fs, folder_name, number):
        directory = f"{kind.folder(asset_id)}/parts-management/{sanitize_segment(folder_name or 'root')}"
        filename = f"{number}_{sanitize_segment(file_stem(fs.filename))}_{timestamp_ms()}.{file_extension(fs.filename)}"
        return store_file(kind.bucket, directory, filename, fs)
    return upload


def _indexed_files(files, field):
    i = 0
    while f"{field}_{i}" in files:
        yield i, files[f"{field}_{i}"]
        i += 1


def _store_report_files(kind: AssetKind, asset_id, report_id, form, files):
    """Upload report part images and attachments; failures are skipped."""
    base = f"{kind.folder(asset_id)}/maintenance-reports/{report_id}"
    urls = []

    for i, fs in _indexed_files(files, "partImage"):
        if not fs or not fs.filename:
            continue
        directory = f"{base}/parts"
        part_name = sanitize_segment(form.get(f"partImageName_{i}") or f"part_{i + 1}")
        try:
            data = validate_upload(fs, directory)
            name = f"{part_name}_{timestamp_ms()}.{file_extension(fs.filename)}"
            urls.append(store_file(kind.bucket, directory, name, fs, data=data))
        except (ValueError, StorageError) as e:
            current_app.logger.warning("report part image %d skipped: %s", i + 1, e)

    for i, fs in _indexed_files(files, "maintenanceAttachment"):
        if not fs or not fs.filename:
            continue
        directory = f"{base}/attachments"
        try:
            data = validate_upload(fs, directory)
            name = f"maintenance_attachment_{i + 1}_{timestamp_ms()}.{file_extension(fs.filename)}"
            urls.append(store_file(kind.bucket, directory, name, fs, data=data))
        except (ValueError, StorageError) as e:
            current_app.logger.warning("report attachment %d skipped: %s", i + 1, e)

    return urls


def _create_nested_report(kind: AssetKind, asset, form, files, user_id):
    raw = form.get("maintenanceReport")
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        current_app.logger.warning("maintenanceReport is not valid JSON; skipped")
        return None
    if not isinstance(data, dict) or not clean_str(data.get("issueDescription") or data.get("issue_description")):
        return None

    try:
        report = maintenance_service.new_report(kind.reports, asset, data, user_id)
        db.session.add(report)
        _commit()

        urls = _store_report_files(kind, asset.id, report.id, form, files)
        if urls:
            report.attachment_urls = list(report.attachment_urls or []) + urls
            _commit()
        return report
    except Exception:
        db.session.rollback()
        current_app.logger.exception("nested maintenance report for %s %s failed", kind.resource, asset.id)
        return None


def _rollback_created(kind: AssetKind, asset):
    asset_id = asset.id
    folder = kind.folder(asset_id)
    try:
        db.session.delete(asset)
        _commit()
    except Exception:
        current_app.logger.exception("could not remove %s %s after failed upload", kind.resource, asset_id)
    delete_directory(storage_client(), kind.bucket, folder)


# ==========================================
# create / update / delete
# ==========================================
def create_asset(kind: AssetKind, form, files, user_id):
    required = [f.names for f in kind.fields if f.required]
    missing = missing_fields(form, required)
    if missing:
        raise ValidationError(kind.required_message(missing))

    values = {}
    for field in kind.fields:
        raw = form_value(form, *field.names)
        if raw is not None:
            values[field.column] = _parse(field, raw)
    _check_status(values.get("status"))
    _check_project(values["project_id"])

    asset = kind.model(created_by=user_id, **{k: v for k, v in values.items() if v is not None})
    db.session.add(asset)
    _commit()
    current_app.logger.info("%s %s created", kind.resource, asset.id)

    updates = {}
    try:
        for slot in kind.slots:
            fs = files.get(slot.form_field)
            if fs and fs.filename:
                updates[slot.column] = _upload_slot(kind, asset.id, slot, fs)
    except (StorageError, OSError) as e:
        current_app.logger.error("%s %s upload failed: %s", kind.resource, asset.id, e)
        _rollback_created(kind, asset)
        raise StorageError("File upload failed") from e

    try:
        manifest = build_parts_manifest(form.get("partsStructure"), form, files, _parts_uploader(kind, asset.id))
    except StorageError as e:
        current_app.logger.warning("%s %s parts upload failed: %s", kind.resource, asset.id, e)
        manifest = None
    if manifest is not None:
        updates[kind.parts_column] = manifest.to_dict()

    if updates:
        for column, value in updates.items():
            setattr(asset, column, value)
        _commit()

    _create_nested_report(kind, asset, form, files, user_id)

    db.session.refresh(asset)
    return asset


def update_asset(kind: AssetKind, asset_id, form, files):
    asset = get_asset(kind, asset_id)
    changes = {}

    for field in kind.fields:
        raw = form_value(form, *field.names)
        if raw is None:
            continue
        value = _parse(field, raw)
        if field.required and value is None:
            raise ValidationError(kind.required_message([field.names[0]]))
        if value != getattr(asset, field.column):
            changes[field.column] = value

    _check_status(changes.get("status"))
    if "project_id" in changes:
        _check_project(changes["project_id"])

    for slot in kind.slots:
        fs = files.get(slot.form_field)
        existing = getattr(asset, slot.column)
        if fs and fs.filename:
            if existing:
                delete_by_url(kind.bucket, existing)
            try:
                changes[slot.column] = _upload_slot(kind, asset.id, slot, fs)
            except (StorageError, OSError) as e:
                current_app.logger.error("%s %s upload failed: %s", kind.resource, asset.id, e)
                db.session.rollback()
                raise StorageError("File upload failed") from e
        elif slot.keep_flag in form and not is_truthy_flag(form.get(slot.keep_flag)):
            if existing:
                delete_by_url(kind.bucket, existing)
                changes[slot.column] = None

    if form.get("partsStructure"):
        old = parse_parts_manifest(getattr(asset, kind.parts_column))
        try:
            manifest = build_parts_manifest(form.get("partsStructure"), form, files, _parts_uploader(kind, asset.id))
        except StorageError as e:
            # slot changes above are already in storage; keep the old manifest
            current_app.logger.warning("%s %s parts upload failed: %s", kind.resource, asset.id, e)
            manifest = None
        if manifest is not None:
            kept = set(manifest.urls())
            for url in old.urls():
                if url not in kept:
                    delete_by_url(kind.bucket, url)
            changes[kind.parts_column] = manifest.to_dict()

    if changes:
        for column, value in changes.items():
            setattr(asset, column, value)
        _commit()
        current_app.logger.info("%s %s updated: %s", kind.resource, asset.id, ", ".join(sorted(changes)))

    return asset


def delete_asset(kind: AssetKind, asset_id):
    asset = get_asset(kind, asset_id)
    folder = kind.folder(asset.id)

    reports = list(asset.maintenance_reports)
    for report in reports:
        db.session.delete(report)
    db.session.delete(asset)
    _commit()

    removed = delete_directory(storage_client(), kind.bucket, folder)
    current_app.logger.info(
        "%s %s deleted (%d reports, %d files)", kind.resource, asset_id, len(reports), removed
    )

    return {
        "message": f"{kind.label} deleted successfully",
        "cleanedUp": {
            f"{kind.resource}Record": True,
            "maintenanceReports": len(reports),
            "storageFolder": folder,
            "filesRemoved": removed,
        },
    }


def move_part(kind: AssetKind, data: dict):
    """
    Move one part file into another manifest folder (``root`` is the top level).

    The object is copied to ``parts-management/<folder>/`` under a new name,
    the manifest is updated, and only then is the old object removed.
    """
    asset_id = clean_str(data.get(kind.reports.asset_param))
    part_url = clean_str(data.get("partUrl"))
    target = clean_str(data.get("newFolderPath"))
    if not asset_id or not part_url or not target:
        raise ValidationError("Missing required fields")

    asset = get_asset(kind, asset_id)
    manifest = parse_parts_manifest(getattr(asset, kind.parts_column))
    found = manifest.pop_file(part_url)
    if found is None:
        raise NotFoundError("Part file not found")
    source, part = found

    target_name = None if target == "root" else target
    if source == target_name:
        return {"success": True, "newUrl": part_url, kind.parts_column: asset.to_dict()[kind.parts_column]}

    old_path = extract_storage_path(part_url, kind.bucket)
    if not old_path:
        raise ValidationError("Invalid file URL format")

    files = manifest.files_in(target_name)
    original = clean_str(data.get("originalFilename")) or part.name or old_path.rsplit("/", 1)[-1]
    directory = f"{kind.folder(asset.id)}/parts-management/{sanitize_segment(target)}"
    filename = f"{len(files) + 1}_{sanitize_segment(file_stem(original))}_{timestamp_ms()}.{file_extension(original)}"
    content_type = mimetypes.guess_type(original)[0]

    try:
        content = storage_client().download(kind.bucket, old_path)
        new_url = store_bytes(kind.bucket, directory, filename, content, content_type)
    except StorageError as e:
        current_app.logger.error("%s %s part move failed: %s", kind.resource, asset.id, e)
        raise StorageError("Failed to move file") from e

    part.url = new_url
    files.append(part)
    setattr(asset, kind.parts_column, manifest.to_dict())
    _commit()

    delete_by_url(kind.bucket, part_url)
    current_app.logger.info("%s %s part moved to %s", kind.resource, asset.id, target)
    return {"success": True, "newUrl": new_url, kind.parts_column: manifest.to_dict()}


def required_fields_message(missing: Optional[Sequence[str]]) -> str:
    return f"Missing required fields: {', '.join(missing)}"


def first_required_message(missing: Sequence[str]) -> str:
    return f"{missing[0]} is required"
