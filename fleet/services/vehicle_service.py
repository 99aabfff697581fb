from ..models import Vehicle
from ..storage import BUCKET_VEHICLES
from . import asset_service
from .asset_service import DATE, INT, AssetKind, FileSlot, ScalarField
from .maintenance_service import VEHICLE_REPORTS

IMAGES = "vehicle-images"
DOCUMENTS = "vehicle-documents"

VEHICLE = AssetKind(
    resource="vehicle",
    label="Vehicle",
    model=Vehicle,
    bucket=BUCKET_VEHICLES,
    parts_column="vehicle_parts",
    slots=(
        FileSlot("frontImg", "front_img_url", "front", IMAGES, "keepExistingFrontImg"),
        FileSlot("backImg", "back_img_url", "back", IMAGES, "keepExistingBackImg"),
        FileSlot("side1Img", "side1_img_url", "side1", IMAGES, "keepExistingSide1Img"),
        FileSlot("side2Img", "side2_img_url", "side2", IMAGES, "keepExistingSide2Img"),
        FileSlot("originalReceipt", "original_receipt_url", "receipt", DOCUMENTS, "keepExistingReceipt"),
        FileSlot("carRegistration", "car_registration_url", "registration", DOCUMENTS,
                 "keepExistingRegistration"),
    ),
    # order matters: the first missing one is reported
    fields=(
        ScalarField("brand", ("brand",), required=True),
        ScalarField("model", ("model",), required=True),
        ScalarField("type", ("type",), required=True),
        ScalarField("plate_number", ("plateNumber", "plate_number"), required=True),
        ScalarField("inspection_date", ("inspectionDate", "inspection_date"), DATE, required=True),
        ScalarField("before", ("before",), INT, required=True),
        ScalarField("expiry_date", ("expiryDate", "expiry_date"), DATE, required=True),
        ScalarField("status", ("status",), required=True),
        ScalarField("owner", ("owner",), required=True),
        ScalarField("project_id", ("projectId", "project_id"), required=True),
        ScalarField("remarks", ("remarks",)),
        ScalarField("registration_expiry", ("registrationExpiry", "registration_expiry"), DATE),
    ),
    reports=VEHICLE_REPORTS,
    required_message=asset_service.first_required_message,
)


def list_vehicles(query):
    return asset_service.list_assets(VEHICLE, query)


def get_vehicle(vehicle_id):
    return asset_service.get_asset(VEHICLE, vehicle_id)


def create_vehicle(form, files, user_id):
    return asset_service.create_asset(VEHICLE, form, files, user_id)


def update_vehicle(vehicle_id, form, files):
    return asset_service.update_asset(VEHICLE, vehicle_id, form, files)


def delete_vehicle(vehicle_id):
    return asset_service.delete_asset(VEHICLE, vehicle_id)


def move_vehicle_part(data):
    return asset_service.move_part(VEHICLE, data)
