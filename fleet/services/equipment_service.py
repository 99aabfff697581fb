from ..models import Equipment
from ..storage import BUCKET_EQUIPMENTS
from . import asset_service
from .asset_service import DATE, INT, AssetKind, FileSlot, ScalarField
from .maintenance_service import EQUIPMENT_REPORTS

IMAGES = "equipment-images"
DOCUMENTS = "equipment-documents"

EQUIPMENT = AssetKind(
    resource="equipment",
    label="Equipment",
    model=Equipment,
    bucket=BUCKET_EQUIPMENTS,
    parts_column="equipment_parts",
    slots=(
        FileSlot("equipmentImage", "image_url", "image", IMAGES, "keepExistingImage"),
        FileSlot("originalReceipt", "original_receipt_url", "receipt", DOCUMENTS, "keepExistingReceipt"),
        FileSlot("equipmentRegistration", "equipment_registration_url", "registration", DOCUMENTS,
                 "keepExistingRegistration"),
        FileSlot("thirdpartyInspection", "thirdparty_inspection_image", "thirdparty_inspection", DOCUMENTS,
                 "keepExistingThirdpartyInspection"),
        FileSlot("pgpcInspection", "pgpc_inspection_image", "pgpc_inspection", DOCUMENTS,
                 "keepExistingPgpcInspection"),
    ),
    fields=(
        ScalarField("brand", ("brand",), required=True),
        ScalarField("model", ("model",), required=True),
        ScalarField("type", ("type",), required=True),
        ScalarField("owner", ("owner",), required=True),
        ScalarField("project_id", ("projectId", "project_id"), required=True),
        ScalarField("status", ("status",)),
        ScalarField("remarks", ("remarks",)),
        ScalarField("plate_number", ("plateNumber", "plate_number")),
        ScalarField("before", ("before",), INT),
        ScalarField("insurance_expiration_date", ("insuranceExpirationDate", "insurance_expiration_date"), DATE),
        ScalarField("registration_expiry", ("registrationExpiry", "registration_expiry"), DATE),
        ScalarField("inspection_date", ("inspectionDate", "inspection_date"), DATE),
    ),
    reports=EQUIPMENT_REPORTS,
    required_message=asset_service.required_fields_message,
)


def list_equipment(query):
    return asset_service.list_assets(EQUIPMENT, query)


def get_equipment(equipment_id):
    return asset_service.get_asset(EQUIPMENT, equipment_id)


def create_equipment(form, files, user_id):
    return asset_service.create_asset(EQUIPMENT, form, files, user_id)


def update_equipment(equipment_id, form, files):
    return asset_service.update_asset(EQUIPMENT, equipment_id, form, files)


def delete_equipment(equipment_id):
    return asset_service.delete_asset(EQUIPMENT, equipment_id)


def move_equipment_part(data):
    return asset_service.move_part(EQUIPMENT, data)
